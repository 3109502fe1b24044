"""Normalized curve export to CSV."""
from __future__ import annotations
import csv
import io
import logging
from pathlib import Path

from wavdyn.errors import ExportError
from wavdyn.types import AudioCurve

_logger = logging.getLogger(__name__)

EXPORT_HEADER = ["Time (s)", "Loudness (dBFS)", "Normalized Loudness (dBFS)"]


def default_export_name(curve: AudioCurve) -> str:
    """Suggested export filename: the curve name without .wav/.csv, plus .csv."""
    return f"{curve.name.replace('.wav', '').replace('.csv', '')}.csv"


def normalization_offset(curve: AudioCurve, target_dbfs: float) -> float:
    """Gain in dB that moves the curve's average level onto target_dbfs."""
    return float(target_dbfs) - curve.average_dbfs


def export_rows(curve: AudioCurve, target_dbfs: float) -> list[list[str]]:
    """Formatted (time, raw dBFS, normalized dBFS) rows, without the header."""
    offset = normalization_offset(curve, target_dbfs)
    return [
        [f"{t:.3f}", f"{v:.2f}", f"{v + offset:.2f}"]
        for t, v in curve.points
    ]


def render_curve_csv(curve: AudioCurve, target_dbfs: float) -> str:
    """Render the export as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    writer.writerows(export_rows(curve, target_dbfs))
    return buffer.getvalue()


def export_curve_csv(
    curve: AudioCurve,
    target_dbfs: float,
    path: str | Path,
    *,
    logger=None,
) -> Path:
    """
    Write the normalized export of a curve to path.

    Raises:
        ExportError: The file cannot be written.
    """
    log = logger or _logger
    out = Path(path)
    log.info("Exporting data to: %s", out)
    log.debug(
        "Applying normalization offset: %.2f dB",
        normalization_offset(curve, target_dbfs),
    )
    try:
        out.write_text(render_curve_csv(curve, target_dbfs), encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Cannot write {out}: {exc}") from exc
    log.info("CSV export succeeded: %s", out.name)
    return out
