"""Per-category calibration."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from judge_consensus.calibration.correlation import (
    BIAS_TOLERANCE,
    DEFAULT_THRESHOLD,
    MIN_CALIBRATION_SAMPLES,
    calibrate,
)
from judge_consensus.data.schemas import CalibrationResult, ScorePair

logger = logging.getLogger(__name__)

OVERALL = "overall"


def calibrate_by_category(
    pairs: Sequence[ScorePair],
    threshold: float = DEFAULT_THRESHOLD,
    min_samples: int = MIN_CALIBRATION_SAMPLES,
    bias_tolerance: float = BIAS_TOLERANCE,
) -> dict[str, CalibrationResult]:
    """
    Calibrate each category separately, plus an overall entry.

    Pairs without a category only count toward ``overall``. Categories with
    fewer than ``min_samples`` pairs are omitted.

    Args:
        pairs: Score pairs, optionally tagged with a category
        threshold: Minimum acceptable r
        min_samples: Minimum pairs for a category to be reported
        bias_tolerance: Mean difference below which the judge counts as aligned

    Returns:
        Mapping of category name to result, in first-seen order, ending with "overall"
    """
    partitions: dict[str, list[ScorePair]] = {}
    for pair in pairs:
        if pair.category:
            partitions.setdefault(pair.category, []).append(pair)

    results: dict[str, CalibrationResult] = {}
    for category, category_pairs in partitions.items():
        if category == OVERALL:
            logger.warning("Category named %r is shadowed by the overall entry", OVERALL)
            continue
        if len(category_pairs) < min_samples:
            logger.debug(
                "Skipping category %s: %d pairs < %d", category, len(category_pairs), min_samples
            )
            continue
        results[category] = calibrate(
            category_pairs, threshold=threshold, min_samples=min_samples, bias_tolerance=bias_tolerance
        )

    results[OVERALL] = calibrate(
        pairs, threshold=threshold, min_samples=min_samples, bias_tolerance=bias_tolerance
    )
    return results
