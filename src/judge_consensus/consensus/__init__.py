"""Challenge / vote consensus flow for single-answer quality gating."""

from judge_consensus.consensus.challenge import ChallengeGenerator, build_challenge_prompt
from judge_consensus.consensus.fallbacks import (
    DEFAULT_RULES,
    FallbackMatch,
    match_no_gap_phrase,
    match_numbered_list,
    match_whole_response,
    run_fallback_chain,
)
from judge_consensus.consensus.gate import (
    GateState,
    QualityGate,
    QualityGateOutcome,
    determine_confidence,
)
from judge_consensus.consensus.vote import (
    ConsensusVoter,
    build_vote_prompt,
    default_vote,
    synthesis_excerpt,
    tally_votes,
    union_gaps,
)

__all__ = [
    "DEFAULT_RULES",
    "ChallengeGenerator",
    "ConsensusVoter",
    "FallbackMatch",
    "GateState",
    "QualityGate",
    "QualityGateOutcome",
    "build_challenge_prompt",
    "build_vote_prompt",
    "default_vote",
    "determine_confidence",
    "match_no_gap_phrase",
    "match_numbered_list",
    "match_whole_response",
    "run_fallback_chain",
    "synthesis_excerpt",
    "tally_votes",
    "union_gaps",
]
