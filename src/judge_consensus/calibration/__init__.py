"""Offline calibration pipeline: correlation, drift, per-category analysis."""

from judge_consensus.calibration.categories import OVERALL, calibrate_by_category
from judge_consensus.calibration.correlation import (
    DEFAULT_THRESHOLD,
    MIN_CALIBRATION_SAMPLES,
    calibrate,
    classify_bias,
    pearson_correlation,
)
from judge_consensus.calibration.drift import DEFAULT_DRIFT_THRESHOLD, detect_drift
from judge_consensus.calibration.reporting import (
    format_calibration_report,
    format_category_summary,
    format_drift_report,
)

__all__ = [
    "DEFAULT_DRIFT_THRESHOLD",
    "DEFAULT_THRESHOLD",
    "MIN_CALIBRATION_SAMPLES",
    "OVERALL",
    "calibrate",
    "calibrate_by_category",
    "classify_bias",
    "detect_drift",
    "format_calibration_report",
    "format_category_summary",
    "format_drift_report",
    "pearson_correlation",
]
