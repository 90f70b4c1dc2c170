"""Default diverse-provider voting ensemble."""

from __future__ import annotations

import logging

from judge_consensus.judges.protocols import JudgeConfig

logger = logging.getLogger(__name__)

# One lightweight model per provider; diverse ensembles beat repeated calls
VOTING_MODELS: dict[str, str] = {
    "gemini": "gemini-2.5-flash-lite",
    "openai": "gpt-5-nano",
    "anthropic": "claude-haiku-4.5",
}

# Extra Gemini variants used to fill a Gemini-only ensemble
GEMINI_FILL_MODELS = ("gemini-3-flash-preview", "gemini-2.5-flash-lite")

MIN_ENSEMBLE_SIZE = 3


def default_voting_configs(
    gemini_key: str | None = None,
    openai_key: str | None = None,
    anthropic_key: str | None = None,
    timeout_s: float = 30.0,
    max_output_tokens: int = 3000,
    temperature: float = 0.7,
) -> list[JudgeConfig]:
    """
    Build an odd-sized voting ensemble from whichever credentials exist.

    One model per available provider, filled to three with Gemini variants
    when a Gemini key exists. An even count is trimmed to the largest odd one.

    Args:
        gemini_key: Gemini API key
        openai_key: OpenAI API key
        anthropic_key: Anthropic API key
        timeout_s: Per-call timeout
        max_output_tokens: Output cap per vote
        temperature: Sampling temperature

    Returns:
        Judge configs; empty when no key is given
    """
    common = {"timeout_s": timeout_s, "max_output_tokens": max_output_tokens, "temperature": temperature}
    configs: list[JudgeConfig] = []

    if gemini_key:
        configs.append(JudgeConfig("gemini", VOTING_MODELS["gemini"], api_key=gemini_key, **common))
    if openai_key:
        configs.append(JudgeConfig("openai", VOTING_MODELS["openai"], api_key=openai_key, **common))
    if anthropic_key:
        configs.append(JudgeConfig("anthropic", VOTING_MODELS["anthropic"], api_key=anthropic_key, **common))

    if gemini_key:
        for model in GEMINI_FILL_MODELS:
            if len(configs) >= MIN_ENSEMBLE_SIZE:
                break
            configs.append(JudgeConfig("gemini", model, api_key=gemini_key, **common))

    if not configs:
        logger.error("[Vote] No API keys provided for voting")
        return configs

    if len(configs) % 2 == 0:
        dropped = configs.pop()
        logger.warning("Voting ensemble trimmed to odd size; dropped %s", dropped.label)

    return configs
