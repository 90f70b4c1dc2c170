"""LiteLLM-backed provider requests with retry on transient failures."""

from __future__ import annotations

import logging

import litellm
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from judge_consensus.judges.protocols import JudgeConfig

logger = logging.getLogger(__name__)

# LiteLLM model prefixes per provider
LITELLM_PREFIXES: dict[str, str] = {
    "gemini": "gemini/",
    "openai": "openai/",
    "anthropic": "anthropic/",
}

RETRYABLE_EXCEPTIONS = (
    "RateLimitError",
    "APIConnectionError",
    "APITimeoutError",
    "Timeout",
    "InternalServerError",
    "ServiceUnavailableError",
)


def is_retryable_exception(exc: BaseException) -> bool:
    """Check if an exception is a transient provider error."""
    exc_name = type(exc).__name__
    return exc_name in RETRYABLE_EXCEPTIONS or "rate limit" in str(exc).lower()


def litellm_model_key(config: JudgeConfig) -> str:
    """Get the LiteLLM model key for a judge config."""
    prefix = LITELLM_PREFIXES[config.provider]
    if config.model.startswith(prefix):
        return config.model
    return f"{prefix}{config.model}"


class LiteLLMBackend:
    """Backend that calls providers through ``litellm.completion``."""

    def __init__(
        self,
        max_attempts: int = 2,
        min_wait_s: float = 1.0,
        max_wait_s: float = 10.0,
    ):
        """
        Initialize the backend.

        Args:
            max_attempts: Attempts per call, including the first
            min_wait_s: Minimum backoff between attempts
            max_wait_s: Maximum backoff between attempts
        """
        self.max_attempts = max_attempts
        self.min_wait_s = min_wait_s
        self.max_wait_s = max_wait_s

    def complete(self, prompt: str, config: JudgeConfig) -> str:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=self.min_wait_s, max=self.max_wait_s),
            retry=retry_if_exception(is_retryable_exception),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._complete_once, prompt, config)

    def _complete_once(self, prompt: str, config: JudgeConfig) -> str:
        kwargs = {
            "model": litellm_model_key(config),
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": config.max_output_tokens,
            "temperature": config.temperature,
            "timeout": config.timeout_s,
        }
        if config.api_key:
            kwargs["api_key"] = config.api_key

        response = litellm.completion(**kwargs)
        return response.choices[0].message.content or ""
