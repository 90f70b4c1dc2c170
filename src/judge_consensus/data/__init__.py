"""Data schemas and file loading."""

from judge_consensus.data.loader import (
    example_score_pairs,
    example_scores_file,
    load_comparison_samples,
    load_scores_file,
    save_scores_file,
)
from judge_consensus.data.schemas import (
    BiasDirection,
    CalibrationResult,
    ChallengeCritique,
    ChallengeResult,
    ComparisonOutcome,
    ComparisonResult,
    ComparisonSample,
    DriftReport,
    GoldStandard,
    SampleResponses,
    ScorePair,
    ScoresFile,
    ScoresMetadata,
    SufficiencyVote,
    TaskCategory,
    VoteChoice,
    VoteDetail,
    Winner,
)

__all__ = [
    # Schemas
    "BiasDirection",
    "CalibrationResult",
    "ChallengeCritique",
    "ChallengeResult",
    "ComparisonOutcome",
    "ComparisonResult",
    "ComparisonSample",
    "DriftReport",
    "GoldStandard",
    "SampleResponses",
    "ScorePair",
    "ScoresFile",
    "ScoresMetadata",
    "SufficiencyVote",
    "TaskCategory",
    "VoteChoice",
    "VoteDetail",
    "Winner",
    # Loading
    "example_score_pairs",
    "example_scores_file",
    "load_comparison_samples",
    "load_scores_file",
    "save_scores_file",
]
