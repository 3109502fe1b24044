"""Format dispatch for curve loading."""
from __future__ import annotations
from pathlib import Path

from wavdyn.config import AnalysisConfig, DEFAULT_CONFIG
from wavdyn.dsp.windowing import CancelCheck, ProgressCallback
from wavdyn.io.csv_curve import parse_csv
from wavdyn.io.wav import parse_wav
from wavdyn.types import AudioCurve

SUPPORTED_EXTS = {".wav", ".csv"}


def load_curve(
    path: str | Path,
    *,
    config: AnalysisConfig = DEFAULT_CONFIG,
    logger=None,
    progress: ProgressCallback | None = None,
    should_stop: CancelCheck | None = None,
) -> AudioCurve:
    """Load a .csv curve directly; decode and window anything else as WAV."""
    if Path(path).suffix.lower() == ".csv":
        return parse_csv(path, logger=logger)
    return parse_wav(
        path,
        config=config,
        logger=logger,
        progress=progress,
        should_stop=should_stop,
    )
