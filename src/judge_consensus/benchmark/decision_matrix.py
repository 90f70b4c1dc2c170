"""
Per-category system selection from pairwise benchmark results.

Groups comparisons by task category, tests each category for a significant
score difference, and derives "switching points": the task types where one
system should be preferred over the other.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import numpy as np

from judge_consensus.benchmark.statistics import BootstrapResult, paired_bootstrap_significance
from judge_consensus.data.schemas import ComparisonOutcome, TaskCategory, Winner

MIN_CATEGORY_SAMPLES = 5


class Recommendation(str, Enum):
    """Which system to use for a task category."""

    USE_SYSTEM = "USE_SYSTEM"
    USE_BASELINE = "USE_BASELINE"
    TIE = "TIE"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


@dataclass
class CategoryResult:
    """Benchmark outcome for one task category."""

    category: TaskCategory
    total_samples: int
    system_wins: int
    baseline_wins: int
    ties: int
    system_win_rate: float
    bootstrap: BootstrapResult
    recommendation: Recommendation


@dataclass
class DecisionMatrix:
    """Per-category recommendations plus switching points."""

    timestamp: str
    total_comparisons: int
    by_category: list[CategoryResult]
    switching_points: list[str] = field(default_factory=list)
    system_strong: list[TaskCategory] = field(default_factory=list)
    baseline_strong: list[TaskCategory] = field(default_factory=list)
    tie_categories: list[TaskCategory] = field(default_factory=list)


def _switching_points(
    system_strong: list[TaskCategory],
    baseline_strong: list[TaskCategory],
    ties: list[TaskCategory],
) -> list[str]:
    points = []
    if TaskCategory.MULTI_HOP_REASONING in system_strong:
        points.append("Query complexity > 2 hops: USE SYSTEM")
    if TaskCategory.SYNTHESIS in system_strong:
        points.append("Multi-document synthesis: USE SYSTEM")
    if TaskCategory.RAG_QUALITY in system_strong:
        points.append("Citation-critical tasks: USE SYSTEM")
    if TaskCategory.SINGLE_HOP_FACTUAL in baseline_strong or TaskCategory.LATENCY in baseline_strong:
        points.append("Simple factual lookup: USE BASELINE (faster)")
    if TaskCategory.INSTRUCTION_FOLLOWING in ties:
        points.append("Format constraints: Either (prefer lower cost)")
    if TaskCategory.CODE_GENERATION in ties:
        points.append("Code generation: Either (prefer lower cost)")
    return points


def generate_decision_matrix(
    outcomes: Sequence[ComparisonOutcome],
    min_samples: int = MIN_CATEGORY_SAMPLES,
    iterations: int = 10000,
    random_state: int | np.random.Generator | None = None,
) -> DecisionMatrix:
    """
    Build a decision matrix from pairwise comparison outcomes.

    Args:
        outcomes: Comparison results with their samples
        min_samples: Categories below this size are INSUFFICIENT_DATA
        iterations: Bootstrap iterations per category
        random_state: Random seed or generator for reproducibility

    Returns:
        DecisionMatrix with categories sorted by system win rate (descending)
    """
    rng = np.random.default_rng(random_state)
    grouped: dict[TaskCategory, list[ComparisonOutcome]] = {}
    for outcome in outcomes:
        grouped.setdefault(outcome.sample.category, []).append(outcome)

    results: list[CategoryResult] = []
    system_strong: list[TaskCategory] = []
    baseline_strong: list[TaskCategory] = []
    tie_categories: list[TaskCategory] = []

    for category, items in grouped.items():
        total = len(items)
        system_wins = sum(1 for o in items if o.result.winner is Winner.SYSTEM)
        baseline_wins = sum(1 for o in items if o.result.winner is Winner.BASELINE)
        ties = total - system_wins - baseline_wins

        bootstrap = paired_bootstrap_significance(
            [o.result.baseline_score for o in items],
            [o.result.system_score for o in items],
            iterations=iterations,
            random_state=rng,
        )

        if total < min_samples:
            recommendation = Recommendation.INSUFFICIENT_DATA
        elif bootstrap.is_significant and bootstrap.mean > 0:
            recommendation = Recommendation.USE_SYSTEM
            system_strong.append(category)
        elif bootstrap.is_significant and bootstrap.mean < 0:
            recommendation = Recommendation.USE_BASELINE
            baseline_strong.append(category)
        else:
            recommendation = Recommendation.TIE
            tie_categories.append(category)

        results.append(CategoryResult(
            category=category,
            total_samples=total,
            system_wins=system_wins,
            baseline_wins=baseline_wins,
            ties=ties,
            system_win_rate=system_wins / total,
            bootstrap=bootstrap,
            recommendation=recommendation,
        ))

    results.sort(key=lambda r: r.system_win_rate, reverse=True)

    return DecisionMatrix(
        timestamp=datetime.now().isoformat(),
        total_comparisons=len(outcomes),
        by_category=results,
        switching_points=_switching_points(system_strong, baseline_strong, tie_categories),
        system_strong=system_strong,
        baseline_strong=baseline_strong,
        tie_categories=tie_categories,
    )


def _p_label(result: CategoryResult) -> str:
    if result.bootstrap.is_significant:
        return "p<0.05"
    return f"p={result.bootstrap.p_superiority:.2f}"


def format_decision_matrix(matrix: DecisionMatrix) -> str:
    """Render a decision matrix as plain text."""
    rule = "=" * 80
    thin = "-" * 80
    lines = [
        rule,
        "DECISION MATRIX: System vs Baseline",
        f"Generated: {matrix.timestamp}",
        f"Total Comparisons: {matrix.total_comparisons}",
        rule,
        "",
        "RECOMMENDATIONS",
        thin,
    ]

    def section(title: str, recommendation: Recommendation) -> None:
        rows = [c for c in matrix.by_category if c.recommendation is recommendation]
        if not rows:
            return
        lines.append("")
        lines.append(title)
        for c in rows:
            if recommendation is Recommendation.USE_BASELINE:
                detail = f"win rate: {c.baseline_wins / c.total_samples:.0%}, {_p_label(c)}"
            elif recommendation is Recommendation.TIE:
                detail = f"{c.system_win_rate:.0%} vs {c.baseline_wins / c.total_samples:.0%}, {_p_label(c)}"
            elif recommendation is Recommendation.INSUFFICIENT_DATA:
                detail = f"{c.total_samples} samples"
            else:
                detail = f"win rate: {c.system_win_rate:.0%}, {_p_label(c)}"
            lines.append(f"  - {c.category.value} ({detail})")

    section("Use system for:", Recommendation.USE_SYSTEM)
    section("Use baseline for:", Recommendation.USE_BASELINE)
    section("No clear winner (prefer lower cost):", Recommendation.TIE)
    section(f"Insufficient data (<{MIN_CATEGORY_SAMPLES} samples):", Recommendation.INSUFFICIENT_DATA)

    lines.extend([
        "",
        "DETAILED BREAKDOWN",
        thin,
        f"{'Category':<22}| {'Sys Win':<9}| {'P(Sup)':<8}| {'95% CI':<16}| Recommendation",
        thin,
    ])
    for c in matrix.by_category:
        ci = f"[{c.bootstrap.lower:.2f}, {c.bootstrap.upper:.2f}]"
        lines.append(
            f"{c.category.value:<22}| {c.system_win_rate:<9.0%}| "
            f"{c.bootstrap.p_superiority:<8.2f}| {ci:<16}| {c.recommendation.value}"
        )

    if matrix.switching_points:
        lines.append("")
        lines.append("SWITCHING POINTS:")
        lines.extend(f"  - {point}" for point in matrix.switching_points)

    lines.append("")
    lines.append(rule)
    return "\n".join(lines)
