"""
Quality gate: challenge a synthesis, then vote on the challenge.

States: SYNTHESIZED -> CHALLENGED -> {ACCEPTED | VOTING} -> {ACCEPTED | REJECTED}
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from judge_consensus.consensus.challenge import ChallengeGenerator
from judge_consensus.consensus.vote import ConsensusVoter, default_vote
from judge_consensus.data.schemas import ChallengeResult, SufficiencyVote
from judge_consensus.observability import EvaluationObserver, LoggingObserver

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    """States of the quality gate."""

    SYNTHESIZED = "synthesized"
    CHALLENGED = "challenged"
    VOTING = "voting"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class QualityGateOutcome:
    """Final state of a gated synthesis, with the evidence behind it."""

    state: GateState
    vote: SufficiencyVote
    challenge: ChallengeResult | None = None
    transitions: list[GateState] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.state is GateState.ACCEPTED

    @property
    def critical_gaps(self) -> list[str]:
        return self.vote.critical_gaps


class QualityGate:
    """
    Runs ChallengeGenerator then ConsensusVoter for one synthesis.

    A missing challenger (no credentials) accepts by default; a missing voter
    accepts with empty tallies.
    """

    def __init__(
        self,
        challenger: ChallengeGenerator | None,
        voter: ConsensusVoter | None,
        observer: EvaluationObserver | None = None,
    ):
        self.challenger = challenger
        self.voter = voter
        self.observer = observer or LoggingObserver()

    def evaluate(
        self,
        query: str,
        synthesis: str,
        constraints: Sequence[str] | None = None,
        sub_questions: Sequence[str] | None = None,
        context: str | None = None,
    ) -> QualityGateOutcome:
        """
        Gate a synthesis.

        Args:
            query: Original query
            synthesis: Answer under review
            constraints: Stated constraints
            sub_questions: Sub-questions the answer must cover
            context: Optional extra reviewer context

        Returns:
            QualityGateOutcome in state ACCEPTED or REJECTED
        """
        transitions = [GateState.SYNTHESIZED]

        if self.challenger is None:
            self.observer.record_fallback("gate", "no challenge judge configured; accepted by default")
            transitions.append(GateState.ACCEPTED)
            return QualityGateOutcome(GateState.ACCEPTED, default_vote(), None, transitions)

        challenge = self.challenger.challenge(
            query, synthesis, constraints=constraints, sub_questions=sub_questions, context=context
        )
        transitions.append(GateState.CHALLENGED)

        if not challenge.has_significant_gaps:
            transitions.append(GateState.ACCEPTED)
            return QualityGateOutcome(GateState.ACCEPTED, default_vote(), challenge, transitions)

        transitions.append(GateState.VOTING)
        if self.voter is None:
            self.observer.record_fallback("gate", "no voting judges configured; accepted by default")
            vote = SufficiencyVote(sufficient=True, votes_for=0, votes_against=0)
        else:
            vote = self.voter.vote(query, synthesis, challenge)

        state = GateState.ACCEPTED if vote.sufficient else GateState.REJECTED
        transitions.append(state)
        logger.info("[Gate] %s (%d for, %d against)", state.value, vote.votes_for, vote.votes_against)
        return QualityGateOutcome(state, vote, challenge, transitions)


def determine_confidence(complexity: int, vote: SufficiencyVote | None) -> Literal["high", "medium", "low"]:
    """Confidence in a gated answer given query complexity (1-5) and the vote."""
    if vote is not None and not vote.sufficient:
        return "low"
    if complexity >= 4 and vote is not None and vote.votes_for >= 2:
        return "high"
    return "medium"
