"""Point-by-point A/B comparison of two loudness curves."""
from __future__ import annotations

import numpy as np

from wavdyn.config import DEFAULT_CONFIG
from wavdyn.errors import ComparisonError, DurationMismatch
from wavdyn.metrics.correlation import pearson_correlation
from wavdyn.metrics.stats import critical_value, sample_std, t_statistic
from wavdyn.types import AudioCurve, ComparisonResult, ComparisonVerdict, Consistency

HIGH_CONSISTENCY_STD_DB = 1.0
MODERATE_DIFFERENCE_STD_DB = 3.0


def compare(
    curve_a: AudioCurve,
    curve_b: AudioCurve,
    target_mean_diff: float = 0.0,
    *,
    tolerance_s: float = DEFAULT_CONFIG.duration_tolerance_s,
) -> ComparisonResult:
    """
    Compare two loudness curves index by index.

    Both curves are assumed to be windowed with identical parameters, so
    point i of A is paired with point i of B; only the first
    min(len(A), len(B)) points take part.

    Args:
        curve_a: Reference curve.
        curve_b: Curve under test.
        target_mean_diff: Hypothesized mean of A - B for the t-test.
        tolerance_s: Largest accepted difference between the two durations.

    Returns:
        ComparisonResult; the function has no side effects, so identical
        inputs always yield identical results.

    Raises:
        DurationMismatch: |duration_a - duration_b| > tolerance_s.
        ComparisonError: Either curve has no points.
    """
    if abs(curve_a.duration - curve_b.duration) > tolerance_s:
        raise DurationMismatch(curve_a.duration, curve_b.duration, tolerance_s)

    n = min(len(curve_a), len(curve_b))
    if n == 0:
        raise ComparisonError("Cannot compare an empty curve.")

    a_vals = curve_a.values[:n]
    b_vals = curve_b.values[:n]
    diff = a_vals - b_vals

    mean = float(np.mean(diff))
    std_dev = sample_std(diff)
    return ComparisonResult(
        mean_diff=mean,
        std_dev=std_dev,
        max_diff=float(np.max(diff)),
        min_diff=float(np.min(diff)),
        correlation_coefficient=pearson_correlation(a_vals, b_vals),
        t_statistic=t_statistic(mean - float(target_mean_diff), std_dev, n),
        diff_points=np.column_stack([curve_a.times[:n], diff]),
        target_mean_diff=float(target_mean_diff),
    )


def classify_consistency(std_dev: float) -> Consistency:
    """Bucket the spread of the difference curve."""
    if std_dev < HIGH_CONSISTENCY_STD_DB:
        return Consistency.HIGH
    if std_dev < MODERATE_DIFFERENCE_STD_DB:
        return Consistency.MODERATE
    return Consistency.LARGE


def assess(result: ComparisonResult, confidence: float) -> ComparisonVerdict:
    """Classify a result and run the two-tailed test at the given confidence."""
    crit = critical_value(confidence)
    return ComparisonVerdict(
        consistency=classify_consistency(result.std_dev),
        confidence=float(confidence),
        critical_value=crit,
        reject_h0=abs(result.t_statistic) > crit,
    )
