"""
Logging setup and structured evaluation events.

Provides:
- Rich console logging with optional file output
- An observer interface that core components report events and fallbacks to

Usage:
    from judge_consensus.observability import CountingObserver, setup_logging

    setup_logging(verbose=True)

    observer = CountingObserver()
    voter = ConsensusVoter(invoker, configs, observer=observer)
    ...
    print(observer.fallbacks)
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from rich.logging import RichHandler

logger = logging.getLogger(__name__)

NOISY_LOGGERS = ("httpx", "httpcore", "litellm", "LiteLLM", "openai", "anthropic")


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    use_rich: bool = True,
) -> None:
    """
    Configure logging for CLI runs and scripts.

    Args:
        verbose: If True, show DEBUG level; otherwise INFO
        log_file: Optional path to write full logs (always DEBUG level)
        use_rich: Use rich for console output; plain stderr formatting otherwise
    """
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = []

    if use_rich:
        console_handler: logging.Handler = RichHandler(
            level=level,
            show_time=True,
            show_path=verbose,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        ))
    handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# =============================================================================
# OBSERVER INTERFACE
# =============================================================================


class EvaluationObserver(Protocol):
    """Receives structured events from the evaluation core."""

    def record_event(self, name: str, **fields: Any) -> None:
        """Record a notable event (a vote cast, a comparison finished)."""
        ...

    def record_fallback(self, component: str, reason: str, **fields: Any) -> None:
        """Record a documented fallback taken instead of a parsed judgment."""
        ...


def _format_fields(fields: dict[str, Any]) -> str:
    return " ".join(f"{k}={v!r}" for k, v in fields.items())


class LoggingObserver:
    """Observer that emits events as log records."""

    def __init__(self, logger_name: str = "judge_consensus.events"):
        self._log = logging.getLogger(logger_name)

    def record_event(self, name: str, **fields: Any) -> None:
        self._log.info("%s %s", name, _format_fields(fields))

    def record_fallback(self, component: str, reason: str, **fields: Any) -> None:
        self._log.warning("[%s] fallback: %s %s", component, reason, _format_fields(fields))


@dataclass
class FallbackRecord:
    """A fallback taken by a core component."""

    timestamp: datetime
    component: str
    reason: str
    fields: dict[str, Any] = field(default_factory=dict)


class CountingObserver(LoggingObserver):
    """Logging observer that also keeps counts, for summaries and tests."""

    def __init__(self, logger_name: str = "judge_consensus.events", max_recent: int = 50):
        super().__init__(logger_name)
        self.events: Counter = Counter()
        self.fallbacks: Counter = Counter()
        self.recent_fallbacks: list[FallbackRecord] = []
        self.max_recent = max_recent

    def record_event(self, name: str, **fields: Any) -> None:
        super().record_event(name, **fields)
        self.events[name] += 1

    def record_fallback(self, component: str, reason: str, **fields: Any) -> None:
        super().record_fallback(component, reason, **fields)
        self.fallbacks[component] += 1
        self.recent_fallbacks.append(
            FallbackRecord(timestamp=datetime.now(), component=component, reason=reason, fields=fields)
        )
        if len(self.recent_fallbacks) > self.max_recent:
            self.recent_fallbacks.pop(0)

    def summary(self) -> dict[str, Any]:
        """Return counts of events and fallbacks."""
        return {
            "events": dict(self.events),
            "fallbacks": dict(self.fallbacks),
            "total_fallbacks": sum(self.fallbacks.values()),
        }
