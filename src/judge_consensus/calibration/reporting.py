"""Plain-text calibration and drift reports."""

from __future__ import annotations

from judge_consensus.data.schemas import CalibrationResult, DriftReport

_HEAVY_RULE = "=" * 60
_LIGHT_RULE = "-" * 60


def format_calibration_report(result: CalibrationResult) -> str:
    """Render a calibration result; sentinel results render with their advice."""
    status = "CALIBRATED" if result.is_calibrated else "NOT CALIBRATED"
    lines = [
        _HEAVY_RULE,
        "  JUDGE CALIBRATION REPORT",
        _HEAVY_RULE,
        "",
        f"  Status: {status}",
        f"  Pearson r: {result.pearson_r:.4f}",
        f"  Target: >= {result.threshold}",
        "",
        f"  Samples: {result.sample_count}",
        "",
        f"  Human Scores: mean={result.mean_human:.2f}, std={result.std_human:.2f}",
        f"  LLM Scores:   mean={result.mean_llm:.2f}, std={result.std_llm:.2f}",
        "",
        f"  Bias: {result.bias_direction.value} ({result.bias_magnitude:.2f} points)",
        "",
        "  Recommendations:",
    ]
    lines.extend(f"    - {rec}" for rec in result.recommendations)
    lines.extend(["", _HEAVY_RULE])
    return "\n".join(lines)


def format_drift_report(report: DriftReport) -> str:
    """Render a drift report, including the direction of change."""
    status = "DRIFT DETECTED" if report.has_drifted else "STABLE"
    if report.drift_amount > 0:
        direction = "improved"
    elif report.drift_amount < 0:
        direction = "degraded"
    else:
        direction = "unchanged"

    lines = [
        _LIGHT_RULE,
        "  DRIFT DETECTION REPORT",
        _LIGHT_RULE,
        "",
        f"  Status: {status}",
        "",
        f"  Current r:  {report.current_r:.4f}",
        f"  Baseline r: {report.baseline_r:.4f}",
        f"  Drift:      {report.drift_amount:+.4f} ({direction})",
        f"  Threshold:  {report.threshold}",
        "",
        f"  Samples Compared: {report.samples_compared}",
        f"  Timestamp: {report.timestamp.isoformat()}",
        "",
        _LIGHT_RULE,
    ]
    return "\n".join(lines)


def format_category_summary(results: dict[str, CalibrationResult]) -> str:
    """One line per category: r and calibration flag."""
    lines = ["By Category:"]
    for category, result in results.items():
        lines.append(
            f"  {category}: r={result.pearson_r:.3f}, calibrated={result.is_calibrated}, "
            f"n={result.sample_count}"
        )
    return "\n".join(lines)
