from __future__ import annotations

import sys
import time
from pathlib import Path

import numpy as np
import soundfile as sf

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wavdyn.types import AudioCurve  # noqa: E402


def gen_sine(freq_hz: float, duration_s: float, fs: int, amp: float = 1.0) -> np.ndarray:
    t = np.arange(int(duration_s * fs)) / fs
    return amp * np.sin(2.0 * np.pi * freq_hz * t)


def write_wav(
    path: Path,
    samples: np.ndarray,
    fs: int = 48000,
    subtype: str = "FLOAT",
) -> Path:
    sf.write(str(path), samples, fs, subtype=subtype, format="WAV")
    return path


def write_csv(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def make_curve(values, *, name: str = "curve", hop: float = 0.1, start: float = 0.2) -> AudioCurve:
    values = np.asarray(values, dtype=np.float64)
    times = start + hop * np.arange(values.size)
    return AudioCurve(
        name=name,
        points=np.column_stack([times, values]),
        duration=float(times[-1]) if values.size else 0.0,
        average_dbfs=float(np.mean(values)) if values.size else -120.0,
        source="csv",
    )


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
