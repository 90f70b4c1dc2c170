"""
Heuristic parsing of challenge responses that are not valid JSON.

Rules are pure functions tried in order; the first that returns a match
wins. When no rule matches the response is treated as having no gaps,
which only happens for trivially short responses.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from judge_consensus.data.schemas import ChallengeCritique
from judge_consensus.parsing import normalize_section

SHORT_RESPONSE_CHARS = 30
MAX_CRITIQUE_CHARS = 500

NO_GAP_PHRASES = (
    "no significant gaps",
    "no critical gaps",
    "no major gaps",
    "no gaps found",
    "no gaps identified",
    "no significant issues",
    "no issues found",
    "all checklist items pass",
)

_NUMBERED_ITEM = re.compile(r"^\s*\d+[.)]\s+(.+?)\s*$", re.MULTILINE)
_ANY_ITEM = re.compile(r"(?:^|\s)\d+[.)]\s+\S")
_SECTION_PREFIX = re.compile(r"^\[?(overview|global|q\d+)\]?\s*[:\-]?\s+", re.IGNORECASE)


@dataclass(frozen=True)
class FallbackMatch:
    """Result of a heuristic rule: which rule matched and what it found."""

    method: str
    critiques: list[ChallengeCritique] = field(default_factory=list)


FallbackRule = Callable[[str], "FallbackMatch | None"]


def _critique(text: str) -> ChallengeCritique:
    section = "overview"
    match = _SECTION_PREFIX.match(text)
    if match:
        section = normalize_section(match.group(1))
        text = text[match.end():]
    return ChallengeCritique(section=section, issue=text.strip()[:MAX_CRITIQUE_CHARS])


def match_no_gap_phrase(text: str) -> FallbackMatch | None:
    """Literal "no significant gaps" style signal, unless the text also lists numbered items."""
    lowered = text.lower()
    if not any(phrase in lowered for phrase in NO_GAP_PHRASES):
        return None
    if _ANY_ITEM.search(text):
        return None
    return FallbackMatch("no_gaps_phrase")


def match_numbered_list(text: str) -> FallbackMatch | None:
    """One critique per numbered item ("1. ..." or "1) ...")."""
    items = [item for item in _NUMBERED_ITEM.findall(text) if item.strip()]
    if not items:
        return None
    return FallbackMatch("numbered_list", [_critique(item) for item in items])


def match_whole_response(text: str) -> FallbackMatch | None:
    """Fail-safe: a non-trivial unstructured response is one critique."""
    if len(text.strip()) < SHORT_RESPONSE_CHARS:
        return None
    return FallbackMatch("whole_response", [_critique(text)])


DEFAULT_RULES: tuple[FallbackRule, ...] = (
    match_no_gap_phrase,
    match_numbered_list,
    match_whole_response,
)


def run_fallback_chain(text: str, rules: Sequence[FallbackRule] = DEFAULT_RULES) -> FallbackMatch:
    """Apply rules in order and return the first match, or "no gaps"."""
    for rule in rules:
        match = rule(text)
        if match is not None:
            return match
    return FallbackMatch("short_response")
