"""Sliding-window RMS loudness curves over interleaved sample streams."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

import numpy as np

from wavdyn.config import AnalysisConfig, DEFAULT_CONFIG
from wavdyn.errors import EmptySampleData, InvalidWindowConfig, TaskCancelled
from wavdyn.metrics.levels import rms_dbfs
from wavdyn.types import AudioCurve

ProgressCallback = Callable[[float], None]
CancelCheck = Callable[[], bool]

# Upper bound on progress callbacks per curve.
PROGRESS_STEPS = 20


@dataclass(frozen=True)
class WindowPlan:
    """Window and hop lengths, in samples of the interleaved stream."""
    span: int
    hop: int
    sample_rate: int
    channels: int

    def n_windows(self, n_samples: int) -> int:
        if n_samples < self.span:
            return 0
        return (n_samples - self.span) // self.hop + 1

    def midpoint_seconds(self, start: int) -> float:
        return (start + self.span // 2) / float(self.sample_rate * self.channels)


def plan_windows(
    sample_rate: int,
    channels: int,
    *,
    window_seconds: float = DEFAULT_CONFIG.window_seconds,
    hop_seconds: float = DEFAULT_CONFIG.hop_seconds,
) -> WindowPlan:
    """
    Size the analysis windows for a stream.

    Frame counts are truncated to whole frames before being scaled by the
    channel count, so a very low sample rate can yield an empty window.
    """
    sample_rate = int(sample_rate)
    channels = int(channels)
    window_frames = int(window_seconds * sample_rate)
    hop_frames = int(hop_seconds * sample_rate)
    span = window_frames * channels
    hop = hop_frames * channels
    if span <= 0 or hop <= 0:
        raise InvalidWindowConfig(
            f"Window/hop size computed as 0 (rate={sample_rate}Hz, channels={channels})."
        )
    return WindowPlan(span=span, hop=hop, sample_rate=sample_rate, channels=channels)


def loudness_curve(
    samples: np.ndarray,
    sample_rate: int,
    channels: int,
    *,
    name: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
    progress: ProgressCallback | None = None,
    should_stop: CancelCheck | None = None,
) -> AudioCurve:
    """
    Convert normalized interleaved samples into a loudness curve.

    Args:
        samples: Interleaved samples in [-1, 1] (1D).
        sample_rate: Frames per second.
        channels: Channel count of the interleaved stream.
        name: Curve name.
        config: Window, hop and floor settings.
        progress: Called with a fraction in [0, 1] as windows complete.
        should_stop: Polled between windows; a True result aborts with
            TaskCancelled.

    Returns:
        AudioCurve with one point per window, timed at the window midpoint.
    """
    x = np.asarray(samples, dtype=np.float64).reshape(-1)
    if x.size == 0:
        raise EmptySampleData("No sample data to analyze.")
    plan = plan_windows(
        sample_rate,
        channels,
        window_seconds=config.window_seconds,
        hop_seconds=config.hop_seconds,
    )
    n_windows = plan.n_windows(x.size)
    if n_windows == 0:
        raise EmptySampleData(
            f"Signal shorter than one {config.window_seconds:.2f}s analysis window."
        )

    report_every = max(1, n_windows // PROGRESS_STEPS)
    points = np.empty((n_windows, 2), dtype=np.float64)
    for k in range(n_windows):
        if should_stop is not None and should_stop():
            raise TaskCancelled(f"{name}: cancelled after {k} of {n_windows} windows.")
        start = k * plan.hop
        points[k, 0] = plan.midpoint_seconds(start)
        points[k, 1] = rms_dbfs(
            x[start:start + plan.span],
            floor_dbfs=config.floor_dbfs,
            silence_rms=config.silence_rms,
        )
        if progress is not None and ((k + 1) % report_every == 0 or k + 1 == n_windows):
            progress((k + 1) / n_windows)

    return AudioCurve(
        name=name,
        points=points,
        duration=float(points[-1, 0]),
        average_dbfs=float(np.mean(points[:, 1])),
        source="wav",
        sample_rate=plan.sample_rate,
        channels=plan.channels,
    )
