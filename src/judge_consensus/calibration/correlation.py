"""
Correlation analysis between human and judge scores.

Pearson r measures whether a judge's scores track human scores. A judge is
considered calibrated at r >= 0.85, the level reported for strong LLM judges
against expert raters (arxiv:2306.05685).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from judge_consensus.data.schemas import BiasDirection, CalibrationResult, ScorePair
from judge_consensus.errors import InsufficientDataError

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.85
MIN_CORRELATION_PAIRS = 2
MIN_CALIBRATION_SAMPLES = 5
BIAS_TOLERANCE = 0.3

# Variance below this is treated as a constant sequence
_ZERO_VARIANCE = 1e-12


def _scores(pairs: Sequence[ScorePair]) -> tuple[np.ndarray, np.ndarray]:
    human = np.array([p.human_score for p in pairs], dtype=float)
    llm = np.array([p.llm_score for p in pairs], dtype=float)
    return human, llm


def sample_std(values: np.ndarray) -> float:
    """Sample standard deviation (n-1); 0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def pearson_correlation(pairs: Sequence[ScorePair]) -> float:
    """
    Pearson correlation between human and judge scores.

    Args:
        pairs: Score pairs to correlate

    Returns:
        r in [-1, 1]; 0.0 when either sequence has zero variance

    Raises:
        InsufficientDataError: If fewer than 2 pairs are given
    """
    if len(pairs) < MIN_CORRELATION_PAIRS:
        raise InsufficientDataError(MIN_CORRELATION_PAIRS, len(pairs))

    human, llm = _scores(pairs)
    dev_human = human - human.mean()
    dev_llm = llm - llm.mean()

    var_human = float(np.sum(dev_human * dev_human))
    var_llm = float(np.sum(dev_llm * dev_llm))
    if var_human < _ZERO_VARIANCE or var_llm < _ZERO_VARIANCE:
        logger.debug("Zero variance in score sequence, correlation defined as 0")
        return 0.0

    r = float(np.sum(dev_human * dev_llm) / np.sqrt(var_human * var_llm))
    return float(np.clip(r, -1.0, 1.0))


def classify_bias(
    mean_human: float,
    mean_llm: float,
    tolerance: float = BIAS_TOLERANCE,
) -> tuple[BiasDirection, float]:
    """Return the bias direction and magnitude of judge scores vs human scores."""
    magnitude = abs(mean_llm - mean_human)
    if magnitude < tolerance:
        return BiasDirection.ALIGNED, magnitude
    if mean_llm > mean_human:
        return BiasDirection.LENIENT, magnitude
    return BiasDirection.STRICT, magnitude


def build_recommendations(
    pearson_r: float,
    threshold: float,
    bias_direction: BiasDirection,
    bias_magnitude: float,
    std_human: float,
    std_llm: float,
) -> list[str]:
    """Rule-based advice; rules are cumulative, not mutually exclusive."""
    recommendations: list[str] = []
    is_calibrated = pearson_r >= threshold

    if not is_calibrated:
        recommendations.append(f"Correlation {pearson_r:.3f} below threshold {threshold}")
        if pearson_r < 0.5:
            recommendations.append("Judge prompt needs significant revision")
            recommendations.append("Consider using a different judge model")
        elif pearson_r < 0.7:
            recommendations.append("Refine judge prompt rubric for consistency")
            recommendations.append("Add more specific scoring criteria")
        else:
            recommendations.append("Minor adjustments to rubric wording may help")

    if bias_direction is BiasDirection.LENIENT:
        recommendations.append(f"Judge is {bias_magnitude:.2f} points too lenient on average")
        recommendations.append("Add stricter pass/fail criteria for critical gaps")
    elif bias_direction is BiasDirection.STRICT:
        recommendations.append(f"Judge is {bias_magnitude:.2f} points too strict on average")
        recommendations.append("Clarify the distinction between critical gaps and stylistic preferences")

    if std_llm < std_human * 0.5:
        recommendations.append("LLM scores lack variance - may be anchoring to safe middle scores")

    if is_calibrated and not recommendations:
        recommendations.append("Judge is well-calibrated")

    return recommendations


def calibrate(
    pairs: Sequence[ScorePair],
    threshold: float = DEFAULT_THRESHOLD,
    min_samples: int = MIN_CALIBRATION_SAMPLES,
    bias_tolerance: float = BIAS_TOLERANCE,
) -> CalibrationResult:
    """
    Run a full calibration analysis of judge scores against human scores.

    With fewer than ``min_samples`` pairs this returns a sentinel result
    (r=0, not calibrated) carrying a recommendation to collect more data.

    Args:
        pairs: Score pairs to analyze
        threshold: Minimum acceptable r
        min_samples: Minimum pairs for a real verdict
        bias_tolerance: Mean difference below which the judge counts as aligned

    Returns:
        CalibrationResult with statistics and recommendations
    """
    if len(pairs) < min_samples:
        logger.warning(
            "Only %d score pairs, need %d for a calibration verdict", len(pairs), min_samples
        )
        return CalibrationResult(
            pearson_r=0.0,
            is_calibrated=False,
            sample_count=len(pairs),
            recommendations=[f"Need at least {min_samples} samples for reliable calibration"],
            threshold=threshold,
        )

    pearson_r = pearson_correlation(pairs)
    human, llm = _scores(pairs)
    mean_human = float(human.mean())
    mean_llm = float(llm.mean())
    std_human = sample_std(human)
    std_llm = sample_std(llm)

    bias_direction, bias_magnitude = classify_bias(mean_human, mean_llm, bias_tolerance)

    return CalibrationResult(
        pearson_r=pearson_r,
        is_calibrated=pearson_r >= threshold,
        sample_count=len(pairs),
        mean_human=mean_human,
        mean_llm=mean_llm,
        std_human=std_human,
        std_llm=std_llm,
        bias_direction=bias_direction,
        bias_magnitude=bias_magnitude,
        recommendations=build_recommendations(
            pearson_r, threshold, bias_direction, bias_magnitude, std_human, std_llm
        ),
        threshold=threshold,
    )
