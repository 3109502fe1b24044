"""DSP modules for wavdyn."""

from wavdyn.dsp.windowing import WindowPlan, loudness_curve, plan_windows

__all__ = [
    "WindowPlan",
    "loudness_curve",
    "plan_windows",
]
