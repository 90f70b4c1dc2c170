"""
Judge response parsing.

Judges are not guaranteed to emit only JSON, so every response goes through
two stages:

1. ``extract_json_span`` / ``iter_json_spans``: locate balanced ``{...}``
   spans in free-form text (string- and escape-aware).
2. ``parse_judge_json``: decode a span and validate it against a pydantic
   shape. Failure returns a ``ParseFailure`` sentinel instead of raising.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from judge_consensus.data.schemas import ChallengeCritique, VoteChoice
from judge_consensus.errors import JudgeParseError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class ParseFailure:
    """Typed sentinel for a response that did not match the expected shape."""

    reason: str
    raw: str = ""

    def __bool__(self) -> bool:
        return False


# =============================================================================
# STAGE 1: SPAN EXTRACTION
# =============================================================================


def _balanced_end(text: str, start: int) -> int | None:
    """Index one past the brace closing the one at ``start``, if any."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def iter_json_spans(text: str) -> Iterator[str]:
    """Yield balanced top-level ``{...}`` spans in order of appearance."""
    pos = text.find("{")
    while pos != -1:
        end = _balanced_end(text, pos)
        if end is None:
            pos = text.find("{", pos + 1)
            continue
        yield text[pos:end]
        pos = text.find("{", end)


def extract_json_span(text: str) -> str | None:
    """Return the first balanced ``{...}`` span, or None."""
    return next(iter_json_spans(text), None)


# =============================================================================
# STAGE 2: DECODING
# =============================================================================


def _repair(span: str) -> str:
    """Fix common judge output defects: trailing commas, bare keys, single quotes."""
    repaired = re.sub(r",\s*([}\]])", r"\1", span)
    repaired = re.sub(r"([{,]\s*)([A-Za-z_]\w*)\s*:", r'\1"\2":', repaired)
    repaired = re.sub(r":\s*'([^'\"]*)'", r': "\1"', repaired)
    return repaired


def decode_json(span: str) -> dict[str, Any] | ParseFailure:
    """
    Decode a JSON object span, with one repair pass on failure.

    Control characters inside strings (raw newlines, tabs) are accepted.
    """
    try:
        data = json.loads(span, strict=False)
    except json.JSONDecodeError:
        try:
            data = json.loads(_repair(span), strict=False)
        except json.JSONDecodeError as e:
            return ParseFailure(f"invalid JSON: {e.msg}", span)

    if not isinstance(data, dict):
        return ParseFailure("expected a JSON object", span)
    return data


def parse_judge_json(text: str | None, shape: type[T]) -> T | ParseFailure:
    """
    Extract and validate a judge response against a shape.

    Spans are tried in order; the first that decodes and validates wins.

    Args:
        text: Raw judge output
        shape: Pydantic model describing the expected object

    Returns:
        A validated ``shape`` instance, or a ParseFailure
    """
    if not text or not text.strip():
        return ParseFailure("empty response", text or "")

    failure = ParseFailure("no JSON object found", text)
    for span in iter_json_spans(text):
        decoded = decode_json(span)
        if isinstance(decoded, ParseFailure):
            failure = ParseFailure(decoded.reason, text)
            continue
        try:
            return shape.model_validate(decoded)
        except ValidationError as e:
            failure = ParseFailure(
                f"{shape.__name__} shape mismatch ({e.error_count()} errors)", text
            )
    return failure


def require_shape(text: str | None, shape: type[T]) -> T:
    """Like ``parse_judge_json`` but raises JudgeParseError on failure."""
    parsed = parse_judge_json(text, shape)
    if isinstance(parsed, ParseFailure):
        raise JudgeParseError(parsed.reason, parsed.raw)
    return parsed


# =============================================================================
# RESPONSE SHAPES
# =============================================================================


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


class PairwiseJudgment(BaseModel):
    """Rationale-first pairwise verdict over two positionally labeled responses."""

    response_1_claims: list[str] = Field(default_factory=list)
    response_2_claims: list[str] = Field(default_factory=list)
    response_1_evaluation: str = ""
    response_2_evaluation: str = ""
    winner: Literal["1", "2", "tie"]
    response_1_score: float = Field(..., ge=1, le=5)
    response_2_score: float = Field(..., ge=1, le=5)
    reasoning: str = ""

    @field_validator("response_1_claims", "response_2_claims", mode="before")
    @classmethod
    def _coerce_claims(cls, value: Any) -> list[str]:
        return _string_list(value)

    @field_validator("response_1_evaluation", "response_2_evaluation", "reasoning", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("winner", mode="before")
    @classmethod
    def _normalize_winner(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            normalized = value.strip().lower().replace("response", "").strip(" _")
            return normalized or value
        return value


SECTION_PATTERN = re.compile(r"^(overview|global|q\d+)$")


def normalize_section(section: Any) -> str:
    """Map a critique section id to overview, global, or qN."""
    if not isinstance(section, str):
        return "overview"
    normalized = section.strip().lower()
    if SECTION_PATTERN.match(normalized):
        return normalized
    logger.debug("Invalid section id %r mapped to 'overview'", section)
    return "overview"


class ChallengeJudgment(BaseModel):
    """Structured critique of a synthesis."""

    model_config = ConfigDict(populate_by_name=True)

    passed: bool = Field(..., alias="pass")
    critiques: list[ChallengeCritique] = Field(default_factory=list)

    @field_validator("critiques", mode="before")
    @classmethod
    def _normalize_critiques(cls, value: Any) -> list[dict[str, str]]:
        if not isinstance(value, list):
            return []
        critiques = []
        for item in value:
            if isinstance(item, str) and item.strip():
                critiques.append({"section": "overview", "issue": item.strip()})
            elif isinstance(item, dict) and isinstance(item.get("issue"), str) and item["issue"].strip():
                critiques.append({
                    "section": normalize_section(item.get("section")),
                    "issue": item["issue"].strip(),
                })
        return critiques


class VoteJudgment(BaseModel):
    """A single sufficiency vote."""

    vote: VoteChoice
    reasoning: str = ""
    critical_gaps: list[str] = Field(default_factory=list)

    @field_validator("vote", mode="before")
    @classmethod
    def _normalize_vote(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("critical_gaps", mode="before")
    @classmethod
    def _coerce_gaps(cls, value: Any) -> list[str]:
        return [gap.strip() for gap in _string_list(value)]

    @field_validator("reasoning", mode="before")
    @classmethod
    def _coerce_reasoning(cls, value: Any) -> str:
        return "" if value is None else str(value)
