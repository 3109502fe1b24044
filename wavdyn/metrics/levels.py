"""RMS and dBFS level metrics."""
from __future__ import annotations

import numpy as np

FLOOR_DBFS = -120.0
SILENCE_RMS = 1e-9


def rms(x: np.ndarray) -> float:
    """Root-mean-square of a sample span; 0.0 for an empty span."""
    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(x ** 2)))


def rms_dbfs(
    x: np.ndarray,
    *,
    floor_dbfs: float = FLOOR_DBFS,
    silence_rms: float = SILENCE_RMS,
) -> float:
    """
    Compute RMS level in dBFS over all samples in x.

    Empty or near-silent spans (RMS below silence_rms) return floor_dbfs
    instead of taking the log of zero.
    """
    level = rms(x)
    if level < silence_rms:
        return float(floor_dbfs)
    return float(20.0 * np.log10(level))
