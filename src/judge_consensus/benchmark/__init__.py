"""Benchmark aggregation: significance testing and the decision matrix."""

from judge_consensus.benchmark.decision_matrix import (
    MIN_CATEGORY_SAMPLES,
    CategoryResult,
    DecisionMatrix,
    Recommendation,
    format_decision_matrix,
    generate_decision_matrix,
)
from judge_consensus.benchmark.runner import load_stored_outcomes, run_benchmark
from judge_consensus.benchmark.statistics import (
    BootstrapResult,
    paired_bootstrap_significance,
    step_f1,
)

__all__ = [
    "BootstrapResult",
    "CategoryResult",
    "DecisionMatrix",
    "MIN_CATEGORY_SAMPLES",
    "Recommendation",
    "format_decision_matrix",
    "generate_decision_matrix",
    "load_stored_outcomes",
    "paired_bootstrap_significance",
    "run_benchmark",
    "step_f1",
]
