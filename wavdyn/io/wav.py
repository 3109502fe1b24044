"""WAV decoding to normalized interleaved float64 samples."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from wavdyn.config import AnalysisConfig, DEFAULT_CONFIG
from wavdyn.dsp.windowing import CancelCheck, ProgressCallback, loudness_curve
from wavdyn.errors import DecodeIOError, EmptySampleData, UnsupportedFormat
from wavdyn.types import AudioCurve

_logger = logging.getLogger(__name__)

WAV_FORMATS = {"WAV", "WAVEX"}


@dataclass(frozen=True)
class SampleFormat:
    bits: int
    is_float: bool
    read_dtype: str
    full_scale: float


# libsndfile hands 24-bit PCM back left-justified in int32, so its full
# scale is 2^31 rather than 2^23; the normalized values are identical.
SUPPORTED_SUBTYPES = {
    "PCM_16": SampleFormat(16, False, "int16", float(2 ** 15)),
    "PCM_24": SampleFormat(24, False, "int32", float(2 ** 31)),
    "PCM_32": SampleFormat(32, False, "int32", float(2 ** 31)),
    "FLOAT": SampleFormat(32, True, "float32", 1.0),
}


@dataclass(frozen=True)
class DecodedWav:
    samples: np.ndarray
    sample_rate: int
    channels: int
    subtype: str


def _soundfile():
    try:
        import soundfile as sf
    except Exception as exc:
        raise RuntimeError("soundfile backend not available.") from exc
    return sf


def decode_wav(path: str | Path, *, logger=None) -> DecodedWav:
    """
    Decode a WAV file and normalize its samples to [-1, 1].

    Integer PCM is divided by 2^(bits-1); 32-bit float is taken as-is.
    Samples are returned interleaved (frame-major) as a flat float64 array.

    Raises:
        DecodeIOError: The file cannot be opened or read.
        UnsupportedFormat: Not a WAV container, or a subtype other than
            16/24/32-bit integer PCM or 32-bit float.
        EmptySampleData: The file holds no frames.
    """
    log = logger or _logger
    sf = _soundfile()
    path = str(path)
    try:
        info = sf.info(path)
    except (RuntimeError, OSError) as exc:
        raise DecodeIOError(f"Cannot open {path}: {exc}") from exc

    log.debug(
        "WAV spec: rate=%sHz, channels=%s, format=%s, subtype=%s",
        info.samplerate, info.channels, info.format, info.subtype,
    )
    if info.format not in WAV_FORMATS:
        raise UnsupportedFormat(f"Unsupported container: {info.format}")
    fmt = SUPPORTED_SUBTYPES.get(info.subtype)
    if fmt is None:
        raise UnsupportedFormat(f"Unsupported WAV sample format: {info.subtype}")

    try:
        raw, rate = sf.read(path, dtype=fmt.read_dtype, always_2d=True)
    except (RuntimeError, OSError) as exc:
        raise DecodeIOError(f"Cannot read samples from {path}: {exc}") from exc
    if raw.size == 0:
        raise EmptySampleData("WAV file has no usable sample data.")

    samples = raw.reshape(-1).astype(np.float64)
    if not fmt.is_float:
        samples /= fmt.full_scale
    log.debug("Total samples: %d", samples.size)
    return DecodedWav(
        samples=samples,
        sample_rate=int(rate),
        channels=int(raw.shape[1]),
        subtype=info.subtype,
    )


def parse_wav(
    path: str | Path,
    *,
    config: AnalysisConfig = DEFAULT_CONFIG,
    logger=None,
    progress: ProgressCallback | None = None,
    should_stop: CancelCheck | None = None,
) -> AudioCurve:
    """Decode a WAV file and window it into a loudness curve."""
    log = logger or _logger
    name = Path(path).name
    log.info("Parsing WAV file: %s", name)
    try:
        decoded = decode_wav(path, logger=log)
    except UnsupportedFormat as exc:
        log.error("%s: %s", name, exc)
        raise
    curve = loudness_curve(
        decoded.samples,
        decoded.sample_rate,
        decoded.channels,
        name=name,
        config=config,
        progress=progress,
        should_stop=should_stop,
    )
    log.info(
        "WAV parsed: %s (Duration: %.2fs, Points: %d)",
        name, curve.duration, len(curve),
    )
    return curve
