"""Bias-mitigated pairwise comparison."""

from judge_consensus.comparison.pairwise import (
    COMPARISON_PROMPT,
    ComparisonError,
    PairwiseComparator,
    TrialResult,
    round_half_up,
)
from judge_consensus.comparison.rubrics import RUBRICS, CategoryRubric, get_rubric
from judge_consensus.comparison.verbosity import (
    VerbosityAssessment,
    assess_verbosity,
    score_per_info_unit,
    twenty_five_five_rule,
    word_count,
)

__all__ = [
    "COMPARISON_PROMPT",
    "RUBRICS",
    "CategoryRubric",
    "ComparisonError",
    "PairwiseComparator",
    "TrialResult",
    "VerbosityAssessment",
    "assess_verbosity",
    "get_rubric",
    "round_half_up",
    "score_per_info_unit",
    "twenty_five_five_rule",
    "word_count",
]
