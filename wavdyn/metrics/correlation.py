"""Pearson correlation between loudness sequences."""
from __future__ import annotations

import numpy as np


def pearson_correlation(a: np.ndarray, b: np.ndarray) -> float:
    """
    Compute the Pearson correlation coefficient of two equal-length sequences.

    Args:
        a: First value sequence.
        b: Second value sequence, same length as a.

    Returns:
        r in [-1, 1]; 0.0 when fewer than two values are given or either
        sequence has zero variance.
    """
    x = np.asarray(a, dtype=np.float64)
    y = np.asarray(b, dtype=np.float64)
    if x.ndim != 1 or y.ndim != 1 or x.size != y.size:
        raise ValueError("Expected two 1D sequences of equal length.")
    if x.size <= 1:
        return 0.0
    x_centered = x - np.mean(x)
    y_centered = y - np.mean(y)
    numerator = float(np.sum(x_centered * y_centered))
    denom = float(np.sqrt(np.sum(x_centered ** 2) * np.sum(y_centered ** 2)))
    if denom == 0.0:
        return 0.0
    # Rounding can push |r| a hair past 1 for perfectly collinear input.
    return float(np.clip(numerator / denom, -1.0, 1.0))
