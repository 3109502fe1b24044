"""Sample statistics and the single-sample t-test."""
from __future__ import annotations
import math

import numpy as np

# Two-tailed normal critical values keyed by confidence level.
CRITICAL_VALUES = {
    0.90: 1.645,
    0.95: 1.960,
    0.99: 2.576,
}
DEFAULT_CONFIDENCE = 0.95


def sample_std(x: np.ndarray) -> float:
    """Bessel-corrected standard deviation; the divisor never drops below 1."""
    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        raise ValueError("sample_std expects a non-empty array.")
    mean = float(np.mean(x))
    variance = float(np.sum((x - mean) ** 2)) / max(x.size - 1, 1)
    return math.sqrt(variance)


def t_statistic(mean_minus_target: float, std_dev: float, n: int) -> float:
    """
    Single-sample t statistic: (mean - target) / (std_dev / sqrt(n)).

    Returns 0.0 when n <= 1 or std_dev is zero to machine precision.
    """
    if n <= 1 or abs(std_dev) < np.finfo(np.float64).eps:
        return 0.0
    sem = std_dev / math.sqrt(n)
    return float(mean_minus_target / sem)


def critical_value(confidence: float) -> float:
    """Two-tailed critical value for a confidence level, 1.960 when unknown."""
    for level, value in CRITICAL_VALUES.items():
        if math.isclose(float(confidence), level, abs_tol=1e-6):
            return value
    return CRITICAL_VALUES[DEFAULT_CONFIDENCE]
