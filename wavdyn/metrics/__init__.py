"""Level and statistics helpers for loudness curves."""

from wavdyn.metrics.correlation import pearson_correlation
from wavdyn.metrics.levels import rms, rms_dbfs
from wavdyn.metrics.stats import critical_value, sample_std, t_statistic

__all__ = [
    "critical_value",
    "pearson_correlation",
    "rms",
    "rms_dbfs",
    "sample_std",
    "t_statistic",
]
