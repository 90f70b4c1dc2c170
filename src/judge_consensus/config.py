"""
Engine configuration.

Supports:
- YAML config files
- Credentials from the environment (and a .env file)
- Factories that wire judges, comparator and quality gate from one config
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from judge_consensus.comparison.pairwise import PairwiseComparator
from judge_consensus.consensus.challenge import ChallengeGenerator
from judge_consensus.consensus.gate import QualityGate
from judge_consensus.consensus.vote import ConsensusVoter
from judge_consensus.judges.invoker import JudgeInvoker
from judge_consensus.judges.protocols import CompletionBackend, JudgeConfig, Provider
from judge_consensus.judges.voting import VOTING_MODELS, default_voting_configs
from judge_consensus.observability import EvaluationObserver

logger = logging.getLogger(__name__)

API_KEY_ENV: dict[str, str] = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class JudgeSettings(BaseModel):
    """Serializable judge settings; the API key is never dumped."""

    provider: Provider = "gemini"
    model: str = "gemini-2.5-flash-lite"
    api_key: SecretStr | None = Field(None, exclude=True, repr=False)
    timeout_s: float = 30.0
    max_output_tokens: int = 3000
    temperature: float = 0.1

    def to_judge_config(self) -> JudgeConfig:
        """Convert to the runtime judge configuration."""
        return JudgeConfig(
            provider=self.provider,
            model=self.model,
            api_key=self.api_key.get_secret_value() if self.api_key else None,
            timeout_s=self.timeout_s,
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
        )

    @classmethod
    def from_judge_config(cls, config: JudgeConfig) -> JudgeSettings:
        return cls(api_key=config.api_key, **config.to_dict())


class EngineConfig(BaseModel):
    """Every tunable of the evaluation engine."""

    model_config = ConfigDict(extra="ignore")

    # Calibration
    calibration_threshold: float = Field(0.85, ge=-1, le=1)
    min_calibration_samples: int = Field(5, ge=2)
    drift_threshold: float = Field(0.05, ge=0)
    bias_tolerance: float = Field(0.3, ge=0)

    # Judge calls
    judge_timeout_s: float = Field(30.0, gt=0)
    critical_timeout_s: float = Field(60.0, gt=0)
    max_output_tokens: int = Field(3000, gt=0)
    judge_temperature: float = Field(0.1, ge=0)
    min_content_length: int = Field(10, ge=0)
    max_parallel_judges: int = Field(5, ge=1)

    # Comparison
    length_ratio_limit: float = Field(1.25, gt=1)
    score_ratio_limit: float = Field(1.05, gt=1)

    # Consensus
    vote_excerpt_chars: int = Field(2000, gt=0)
    min_successful_votes: int = Field(1, ge=1)
    critical_voting: bool = Field(False, description="Raise when fewer than min_successful_votes votes return")

    comparison_judge: JudgeSettings = Field(default_factory=JudgeSettings)
    challenge_judge: JudgeSettings | None = None
    voting_judges: list[JudgeSettings] = Field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: Path | str) -> EngineConfig:
        """Load config from a YAML file. Unknown keys are ignored."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def to_yaml(self) -> str:
        """Convert to YAML string (credentials omitted)."""
        return yaml.dump(self.model_dump(mode="json"), default_flow_style=False, sort_keys=False)

    def save(self, path: Path | str) -> None:
        """Save config to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(self.to_yaml())

    @classmethod
    def from_env(cls, env_file: Path | str | None = None, **overrides: Any) -> EngineConfig:
        """
        Build a config from credentials in the environment.

        The comparison and challenge judges use the first provider with a
        key (Gemini, then OpenAI, then Anthropic). Without any key the
        challenge judge is None and the voting ensemble is empty.

        Args:
            env_file: Optional .env path; the default search is used otherwise
            **overrides: Field values applied on top of the defaults
        """
        load_dotenv(env_file)
        config = cls(**overrides)
        keys = {provider: os.getenv(var) for provider, var in API_KEY_ENV.items()}

        available = [p for p in ("gemini", "openai", "anthropic") if keys[p]]
        if not available:
            logger.warning("No judge API keys found in environment")
            return config

        provider = available[0]
        judge = JudgeSettings(
            provider=provider,
            model=VOTING_MODELS[provider],
            api_key=keys[provider],
            timeout_s=config.judge_timeout_s,
            max_output_tokens=config.max_output_tokens,
            temperature=config.judge_temperature,
        )
        config.comparison_judge = judge
        config.challenge_judge = judge.model_copy(update={"timeout_s": config.critical_timeout_s})
        config.voting_judges = [
            JudgeSettings.from_judge_config(c)
            for c in default_voting_configs(
                gemini_key=keys["gemini"],
                openai_key=keys["openai"],
                anthropic_key=keys["anthropic"],
                timeout_s=config.judge_timeout_s,
                max_output_tokens=config.max_output_tokens,
            )
        ]
        logger.info(
            f"Judges from environment: comparison={judge.provider}/{judge.model}, "
            f"voters={len(config.voting_judges)}"
        )
        return config

    # =========================================================================
    # FACTORIES
    # =========================================================================

    def build_invoker(self, backend: CompletionBackend | None = None) -> JudgeInvoker:
        return JudgeInvoker(
            backend=backend,
            max_workers=self.max_parallel_judges,
            min_content_length=self.min_content_length,
        )

    def build_comparator(
        self,
        invoker: JudgeInvoker,
        observer: EvaluationObserver | None = None,
    ) -> PairwiseComparator:
        return PairwiseComparator(
            invoker,
            self.comparison_judge.to_judge_config(),
            observer=observer,
            length_ratio_limit=self.length_ratio_limit,
            score_ratio_limit=self.score_ratio_limit,
        )

    def build_quality_gate(
        self,
        invoker: JudgeInvoker,
        observer: EvaluationObserver | None = None,
    ) -> QualityGate:
        """Wire challenger and voter; either is None when its judges are unset."""
        challenger = None
        if self.challenge_judge is not None:
            challenger = ChallengeGenerator(
                invoker, self.challenge_judge.to_judge_config(), observer=observer
            )
        voter = None
        if self.voting_judges:
            voter = ConsensusVoter(
                invoker,
                [j.to_judge_config() for j in self.voting_judges],
                observer=observer,
                excerpt_chars=self.vote_excerpt_chars,
                critical=self.critical_voting,
                min_successful=self.min_successful_votes,
            )
        return QualityGate(challenger, voter, observer=observer)
