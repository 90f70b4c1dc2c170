"""
Protocol definitions for judge invocation.

Defines the configuration and response types shared by every judge call,
and the backend interface that performs the actual provider request.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, Protocol, runtime_checkable

Provider = Literal["gemini", "openai", "anthropic"]

PROVIDERS: tuple[str, ...] = ("gemini", "openai", "anthropic")


@dataclass
class JudgeConfig:
    """Configuration for one judge model."""

    provider: Provider
    model: str
    api_key: str | None = field(default=None, repr=False)
    timeout_s: float = 30.0
    max_output_tokens: int = 10000
    temperature: float = 0.7

    def __post_init__(self) -> None:
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {self.provider}. Supported: {list(PROVIDERS)}")

    @property
    def label(self) -> str:
        return f"{self.provider}/{self.model}"

    def with_overrides(self, **changes: Any) -> JudgeConfig:
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form without the credential."""
        return {
            "provider": self.provider,
            "model": self.model,
            "timeout_s": self.timeout_s,
            "max_output_tokens": self.max_output_tokens,
            "temperature": self.temperature,
        }


@dataclass
class JudgeResponse:
    """Result of one judge call; ``error`` is set when the call failed."""

    model: str
    content: str
    error: str | None = None
    latency_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class CompletionBackend(Protocol):
    """Performs a single provider request and returns the text content."""

    def complete(self, prompt: str, config: JudgeConfig) -> str:
        """Send a prompt to the configured model and return its text."""
        ...
