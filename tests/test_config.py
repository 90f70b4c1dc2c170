"""Tests for engine configuration."""

import pytest
import yaml
from pydantic import ValidationError

from judge_consensus.comparison import PairwiseComparator
from judge_consensus.config import EngineConfig, JudgeSettings
from judge_consensus.consensus import QualityGate
from judge_consensus.judges import ScriptedBackend

ENV_KEYS = ("GEMINI_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No provider keys, and an empty .env file; keys loaded from .env are undone."""
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "unset")
        monkeypatch.delenv(key)
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return env_file


class TestEngineConfig:
    """Test defaults, YAML round trips and validation."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.calibration_threshold == 0.85
        assert config.min_calibration_samples == 5
        assert config.drift_threshold == 0.05
        assert config.judge_timeout_s == 30.0
        assert config.critical_timeout_s == 60.0
        assert config.vote_excerpt_chars == 2000
        assert config.comparison_judge.model == "gemini-2.5-flash-lite"
        assert config.challenge_judge is None
        assert config.voting_judges == []

    def test_invalid_value(self):
        with pytest.raises(ValidationError):
            EngineConfig(length_ratio_limit=0.5)

    def test_from_yaml_ignores_unknown(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(yaml.dump({
            "calibration_threshold": 0.9,
            "not_a_field": True,
            "comparison_judge": {"provider": "openai", "model": "gpt-5-nano"},
        }))
        config = EngineConfig.from_yaml(path)
        assert config.calibration_threshold == 0.9
        assert config.comparison_judge.provider == "openai"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("")
        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_save_omits_credentials(self, tmp_path):
        config = EngineConfig(
            comparison_judge=JudgeSettings(api_key="secret-key"),
            voting_judges=[JudgeSettings(provider="openai", model="gpt-5-nano", api_key="other-secret")],
        )
        path = tmp_path / "out" / "engine.yaml"
        config.save(path)
        text = path.read_text()
        assert "secret" not in text
        assert "secret-key" not in repr(config)
        reloaded = EngineConfig.from_yaml(path)
        assert reloaded.voting_judges[0].model == "gpt-5-nano"
        assert reloaded.voting_judges[0].api_key is None


class TestFromEnv:
    """Test credential discovery."""

    def test_no_keys(self, clean_env):
        config = EngineConfig.from_env(env_file=clean_env)
        assert config.challenge_judge is None
        assert config.voting_judges == []

    def test_gemini_key(self, clean_env, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        config = EngineConfig.from_env(env_file=clean_env)
        assert config.comparison_judge.provider == "gemini"
        assert config.comparison_judge.to_judge_config().api_key == "g-key"
        assert config.challenge_judge.timeout_s == 60.0
        assert len(config.voting_judges) == 3

    def test_env_file(self, clean_env):
        clean_env.write_text("OPENAI_API_KEY=o-key\n")
        config = EngineConfig.from_env(env_file=clean_env)
        assert config.comparison_judge.provider == "openai"
        assert config.comparison_judge.model == "gpt-5-nano"
        assert [j.provider for j in config.voting_judges] == ["openai"]

    def test_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")
        config = EngineConfig.from_env(env_file=clean_env, judge_timeout_s=12, critical_timeout_s=20)
        assert config.comparison_judge.timeout_s == 12
        assert config.challenge_judge.timeout_s == 20
        assert config.voting_judges[0].timeout_s == 12


class TestFactories:
    """Test wiring of core components."""

    def test_build_comparator(self):
        config = EngineConfig(length_ratio_limit=1.5)
        comparator = config.build_comparator(config.build_invoker(ScriptedBackend()))
        assert isinstance(comparator, PairwiseComparator)
        assert comparator.length_ratio_limit == 1.5
        assert comparator.judge_config.model == "gemini-2.5-flash-lite"

    def test_build_gate_without_judges(self):
        config = EngineConfig()
        gate = config.build_quality_gate(config.build_invoker(ScriptedBackend()))
        assert isinstance(gate, QualityGate)
        assert gate.challenger is None
        assert gate.voter is None

    def test_build_gate_with_judges(self):
        config = EngineConfig(
            challenge_judge=JudgeSettings(model="challenger"),
            voting_judges=[JudgeSettings(model="v1"), JudgeSettings(model="v2"), JudgeSettings(model="v3")],
            vote_excerpt_chars=500,
        )
        gate = config.build_quality_gate(config.build_invoker(ScriptedBackend()))
        assert gate.challenger.judge_config.model == "challenger"
        assert [c.model for c in gate.voter.voting_configs] == ["v1", "v2", "v3"]
        assert gate.voter.excerpt_chars == 500
