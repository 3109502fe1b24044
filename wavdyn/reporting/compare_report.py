"""A/B comparison report building."""
from __future__ import annotations

from wavdyn.types import AudioCurve, ComparisonResult, ComparisonVerdict, Consistency

CONSISTENCY_LABELS = {
    Consistency.HIGH: "High dynamic consistency",
    Consistency.MODERATE: "Dynamic differences exist",
    Consistency.LARGE: "Huge dynamic difference",
}


def curve_summary(curve: AudioCurve) -> dict:
    return {
        "name": curve.name,
        "source": curve.source,
        "duration_s": curve.duration,
        "average_dbfs": curve.average_dbfs,
        "points": len(curve),
        "skipped_rows": curve.skipped_rows,
    }


def build_compare_report(
    curve_a: AudioCurve,
    curve_b: AudioCurve,
    result: ComparisonResult,
    verdict: ComparisonVerdict,
    *,
    include_diff_points: bool = False,
) -> dict:
    """Build a JSON-serialisable comparison report."""
    report = {
        "track_a": curve_summary(curve_a),
        "track_b": curve_summary(curve_b),
        "statistics": {
            "n_points": result.n_points,
            "mean_diff_db": result.mean_diff,
            "std_dev_db": result.std_dev,
            "max_diff_db": result.max_diff,
            "min_diff_db": result.min_diff,
            "correlation_r": result.correlation_coefficient,
            "t_statistic": result.t_statistic,
        },
        "hypothesis_test": {
            "target_mean_diff_db": result.target_mean_diff,
            "confidence": verdict.confidence,
            "critical_value": verdict.critical_value,
            "reject_h0": verdict.reject_h0,
        },
        "consistency": verdict.consistency.value,
    }
    if include_diff_points:
        report["diff_points"] = [[float(t), float(d)] for t, d in result.diff_points]
    return report


def render_compare_text(report: dict) -> str:
    """Render a report dict as the plain-text analysis summary."""
    stats = report["statistics"]
    test = report["hypothesis_test"]
    lines = [
        f"Track A (Ref):    {report['track_a']['name']} ({report['track_a']['duration_s']:.2f}s)",
        f"Track B (Target): {report['track_b']['name']} ({report['track_b']['duration_s']:.2f}s)",
        f"Average Difference: {stats['mean_diff_db']:.2f} dB",
        f"Dynamic Std Dev: {stats['std_dev_db']:.4f}",
        f"Dynamic Correlation (r): {stats['correlation_r']:.4f}",
        f"Max Difference: {stats['max_diff_db']:.2f} dB",
        f"Min Difference: {stats['min_diff_db']:.2f} dB",
        f"Mean Diff T-Statistic: {stats['t_statistic']:.2f}",
        CONSISTENCY_LABELS[Consistency(report["consistency"])],
    ]
    verdict = "Mean difference is significant" if test["reject_h0"] else "Mean difference is not significant"
    lines.append(
        f"{verdict} (target {test['target_mean_diff_db']:.2f} dB, "
        f"{test['confidence'] * 100.0:.0f}% confidence, critical {test['critical_value']:.3f})"
    )
    return "\n".join(lines)
