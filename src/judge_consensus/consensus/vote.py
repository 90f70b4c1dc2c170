"""
Ensemble sufficiency vote on a synthesis versus its critique.

Each judge in an odd-sized, provider-diverse ensemble votes
``synthesis_wins`` or ``critique_wins``. Majority rules and ties favor the
synthesis. Failed or unparseable votes count as ``synthesis_wins`` and are
reported to the observer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from judge_consensus.data.schemas import ChallengeResult, SufficiencyVote, VoteChoice, VoteDetail
from judge_consensus.judges.invoker import JudgeInvoker
from judge_consensus.judges.protocols import JudgeConfig, JudgeResponse
from judge_consensus.observability import EvaluationObserver, LoggingObserver
from judge_consensus.parsing import ParseFailure, VoteJudgment, parse_judge_json

logger = logging.getLogger(__name__)

EXCERPT_CHARS = 2000
NO_GAPS_REASONING = "No significant gaps identified in critique"


def synthesis_excerpt(synthesis: str, max_chars: int = EXCERPT_CHARS) -> str:
    """First ``max_chars`` characters, with an ellipsis when truncated."""
    if len(synthesis) <= max_chars:
        return synthesis
    return synthesis[:max_chars] + "..."


def build_vote_prompt(
    query: str,
    synthesis: str,
    challenge: ChallengeResult,
    excerpt_chars: int = EXCERPT_CHARS,
) -> str:
    """Build the prompt each voting judge receives."""
    if challenge.critiques:
        critique_points = "\n".join(f"{i}. {c}" for i, c in enumerate(challenge.critiques, 1))
    else:
        critique_points = challenge.raw_response

    return f"""You are deciding whether a research synthesis is good enough despite a critique.

ORIGINAL QUERY:
{query}

SYNTHESIS (first {excerpt_chars} chars):
{synthesis_excerpt(synthesis, excerpt_chars)}

CRITIQUE POINTS:
{critique_points}

---

THE KEY TEST: Does any critique point block the user from understanding or
acting on the answer?

- If the critique identifies an unanswered core question, an ignored
  constraint, a factual error, or missing information the user needs to act,
  vote "critique_wins" and list those critical gaps.
- If the critique points are stylistic, optional, or minor, vote
  "synthesis_wins".

Return JSON only:
{{
  "vote": "synthesis_wins" or "critique_wins",
  "reasoning": "One sentence",
  "critical_gaps": ["<gap that blocks the user>", "..."]
}}""".strip()


def default_vote(reasoning: str = NO_GAPS_REASONING) -> SufficiencyVote:
    """Vote used when no challenge ran or the challenge found no gaps."""
    return SufficiencyVote(
        sufficient=True,
        votes_for=1,
        votes_against=0,
        critical_gaps=[],
        details=[VoteDetail(model="default", vote=VoteChoice.SYNTHESIS_WINS, reasoning=reasoning)],
    )


def union_gaps(gap_lists: Iterable[Sequence[str]]) -> list[str]:
    """Order-preserving union; duplicates compare case- and whitespace-insensitively."""
    seen: set[str] = set()
    gaps: list[str] = []
    for gap_list in gap_lists:
        for gap in gap_list:
            key = " ".join(gap.split()).casefold()
            if key and key not in seen:
                seen.add(key)
                gaps.append(gap.strip())
    return gaps


def tally_votes(details: Sequence[VoteDetail]) -> SufficiencyVote:
    """Aggregate per-model votes; ``votes_for >= votes_against`` is sufficient."""
    votes_for = sum(1 for d in details if d.vote is VoteChoice.SYNTHESIS_WINS)
    votes_against = sum(1 for d in details if d.vote is VoteChoice.CRITIQUE_WINS)
    critical_gaps = union_gaps(d.critical_gaps for d in details if d.vote is VoteChoice.CRITIQUE_WINS)
    return SufficiencyVote(
        sufficient=votes_for >= votes_against,
        votes_for=votes_for,
        votes_against=votes_against,
        critical_gaps=critical_gaps,
        details=list(details),
    )


class ConsensusVoter:
    """Runs the voting ensemble."""

    def __init__(
        self,
        invoker: JudgeInvoker,
        voting_configs: Sequence[JudgeConfig],
        observer: EvaluationObserver | None = None,
        excerpt_chars: int = EXCERPT_CHARS,
        critical: bool = False,
        min_successful: int = 1,
    ):
        """
        Initialize the voter.

        Args:
            invoker: Judge invoker
            voting_configs: Ensemble members; an odd count avoids ties
            observer: Receives vote events and fallbacks
            excerpt_chars: Characters of the synthesis shown to voters
            critical: Raise JudgeCallError when fewer than ``min_successful``
                votes come back, instead of defaulting failed votes
            min_successful: Minimum successful calls in critical mode
        """
        self.invoker = invoker
        self.voting_configs = list(voting_configs)
        self.observer = observer or LoggingObserver()
        self.excerpt_chars = excerpt_chars
        self.critical = critical
        self.min_successful = min_successful

        if self.voting_configs and len(self.voting_configs) % 2 == 0:
            logger.warning(
                "Voting ensemble has an even size (%d); ties favor the synthesis",
                len(self.voting_configs),
            )

    def vote(self, query: str, synthesis: str, challenge: ChallengeResult | None) -> SufficiencyVote:
        """
        Vote on whether the synthesis survives the critique.

        Args:
            query: Original query
            synthesis: Answer under review
            challenge: Critique from ChallengeGenerator, or None if none ran

        Returns:
            SufficiencyVote

        Raises:
            JudgeCallError: Only in critical mode, when too few votes succeed
        """
        if challenge is None or not challenge.has_significant_gaps:
            logger.info("[Vote] No significant critique - synthesis wins by default")
            return default_vote()

        if not self.voting_configs:
            self.observer.record_fallback("vote", "no voting judges configured; synthesis accepted")
            return SufficiencyVote(sufficient=True, votes_for=0, votes_against=0)

        prompt = build_vote_prompt(query, synthesis, challenge, self.excerpt_chars)
        responses = self.invoker.invoke_parallel(
            prompt,
            self.voting_configs,
            critical=self.critical,
            min_successful=self.min_successful,
        )

        result = tally_votes([self._parse_vote(r) for r in responses])
        logger.info(
            "[Vote] %d synthesis_wins, %d critique_wins -> %s",
            result.votes_for,
            result.votes_against,
            "sufficient" if result.sufficient else "insufficient",
        )
        self.observer.record_event(
            "sufficiency_vote",
            votes_for=result.votes_for,
            votes_against=result.votes_against,
            sufficient=result.sufficient,
            critical_gaps=len(result.critical_gaps),
        )
        return result

    def _parse_vote(self, response: JudgeResponse) -> VoteDetail:
        if not response.ok or not response.content:
            reason = response.error or "empty response"
            return self._defaulted(response.model, f"judge call failed: {reason}")

        parsed = parse_judge_json(response.content, VoteJudgment)
        if isinstance(parsed, ParseFailure):
            return self._defaulted(response.model, f"unparseable vote: {parsed.reason}")

        gaps = parsed.critical_gaps if parsed.vote is VoteChoice.CRITIQUE_WINS else []
        return VoteDetail(
            model=response.model,
            vote=parsed.vote,
            reasoning=parsed.reasoning or "No reasoning provided",
            critical_gaps=gaps,
        )

    def _defaulted(self, model: str, reason: str) -> VoteDetail:
        self.observer.record_fallback("vote", f"{reason}; defaulting to synthesis_wins", model=model)
        return VoteDetail(
            model=model,
            vote=VoteChoice.SYNTHESIS_WINS,
            reasoning=f"Defaulted to synthesis_wins ({reason})",
            defaulted=True,
        )
