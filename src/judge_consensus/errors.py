"""Exception hierarchy for judge evaluation and consensus."""

from __future__ import annotations


class JudgeConsensusError(Exception):
    """Base class for all errors raised by this package."""


class InsufficientDataError(JudgeConsensusError, ValueError):
    """Too few observations to compute a statistic."""

    def __init__(self, required: int, actual: int, what: str = "score pairs"):
        self.required = required
        self.actual = actual
        super().__init__(f"Need at least {required} {what}, got {actual}")


class JudgeCallError(JudgeConsensusError):
    """A critical judge invocation failed or returned insufficient content."""

    def __init__(self, message: str, model: str, cause: BaseException | None = None):
        self.model = model
        self.cause = cause
        super().__init__(f"{message} (model: {model})")


class JudgeParseError(JudgeConsensusError):
    """A judge response did not match the required shape (strict parsing only)."""

    def __init__(self, reason: str, raw: str = ""):
        self.reason = reason
        self.raw = raw
        super().__init__(reason)


class DataFileError(JudgeConsensusError):
    """A data file is missing or does not match its schema."""
