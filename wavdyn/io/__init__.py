"""Readers that turn WAV and CSV files into loudness curves."""

from wavdyn.io.loader import load_curve

__all__ = ["load_curve"]
