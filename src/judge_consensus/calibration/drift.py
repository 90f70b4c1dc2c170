"""Judge drift detection against a stored baseline correlation."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from judge_consensus.calibration.correlation import pearson_correlation
from judge_consensus.data.schemas import DriftReport, ScorePair

logger = logging.getLogger(__name__)

DEFAULT_DRIFT_THRESHOLD = 0.05


def detect_drift(
    current_pairs: Sequence[ScorePair],
    baseline_r: float,
    threshold: float = DEFAULT_DRIFT_THRESHOLD,
) -> DriftReport:
    """
    Compare the current correlation against a baseline.

    Drift is symmetric: an improvement beyond the threshold is flagged the
    same as a degradation. Check ``drift_amount`` for the sign.

    Args:
        current_pairs: Freshly collected score pairs
        baseline_r: Correlation from a previous calibration run
        threshold: Maximum acceptable |current_r - baseline_r|

    Returns:
        DriftReport

    Raises:
        InsufficientDataError: If fewer than 2 pairs are given
    """
    current_r = pearson_correlation(current_pairs)
    drift_amount = current_r - baseline_r
    has_drifted = abs(drift_amount) > threshold

    if has_drifted:
        logger.warning(
            "Judge drift detected: r %.4f -> %.4f (%+.4f)", baseline_r, current_r, drift_amount
        )

    return DriftReport(
        current_r=current_r,
        baseline_r=baseline_r,
        drift_amount=drift_amount,
        has_drifted=has_drifted,
        threshold=threshold,
        samples_compared=len(current_pairs),
    )
