"""A/B comparison of loudness curves."""

from wavdyn.analysis.compare import assess, classify_consistency, compare

__all__ = ["assess", "classify_consistency", "compare"]
