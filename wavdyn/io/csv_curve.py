"""CSV curve reader: rows of (time_s, dBFS) taken directly as curve points."""
from __future__ import annotations
import csv
import logging
import math
from pathlib import Path

import numpy as np

from wavdyn.errors import CsvRowError, DecodeIOError, EmptySampleData
from wavdyn.types import AudioCurve

_logger = logging.getLogger(__name__)


def _to_float(text: str) -> float | None:
    try:
        return float(text.strip())
    except ValueError:
        return None


def _undecodable(text: str) -> bool:
    # surrogateescape maps undecodable bytes to lone surrogates
    return any("\udc80" <= ch <= "\udcff" for ch in text)


def _is_header(row: list[str]) -> bool:
    """A leading row is a header when neither of its first two fields is numeric."""
    if any(_undecodable(c) for c in row):
        return False
    return not any(_to_float(c) is not None for c in row[:2])


def parse_row(row: list[str], line: int, last_time: float | None) -> tuple[float, float]:
    """
    Parse one data row into (time, value).

    Raises:
        CsvRowError: Bytes that are not UTF-8, fewer than two fields, a
            non-numeric or non-finite field, or a time not after the
            previous row's.
    """
    if any(_undecodable(c) for c in row):
        raise CsvRowError(line, "row is not valid UTF-8")
    if len(row) < 2:
        raise CsvRowError(line, f"fewer than 2 columns: {row!r}")
    t = _to_float(row[0])
    if t is None:
        raise CsvRowError(line, f"time is not a number: {row[0]!r}")
    v = _to_float(row[1])
    if v is None:
        raise CsvRowError(line, f"value is not a number: {row[1]!r}")
    if not (math.isfinite(t) and math.isfinite(v)):
        raise CsvRowError(line, f"non-finite field: {row[:2]!r}")
    if last_time is not None and t <= last_time:
        raise CsvRowError(line, f"time {t} is not after previous time {last_time}")
    return t, v


def parse_csv(path: str | Path, *, logger=None) -> AudioCurve:
    """
    Load a CSV loudness curve.

    Malformed rows are logged and skipped; the file only fails as a whole
    when it cannot be opened or read, or when no valid row remains.
    """
    log = logger or _logger
    name = Path(path).name
    log.info("Parsing CSV file: %s", name)

    points: list[tuple[float, float]] = []
    skipped = 0
    seen_data = False
    try:
        with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            reader = csv.reader(f)
            while True:
                try:
                    row = next(reader)
                except StopIteration:
                    break
                except csv.Error as exc:
                    skipped += 1
                    log.error("CSV read error (line %d): %s", reader.line_num, exc)
                    continue
                if not any(c.strip() for c in row):
                    continue
                if not seen_data:
                    seen_data = True
                    if _is_header(row):
                        continue
                last_time = points[-1][0] if points else None
                try:
                    points.append(parse_row(row, reader.line_num, last_time))
                except CsvRowError as exc:
                    skipped += 1
                    log.error("CSV format error (%s)", exc)
    except OSError as exc:
        raise DecodeIOError(f"Cannot read {path}: {exc}") from exc

    if not points:
        raise EmptySampleData(f"{name}: no valid (time, value) rows.")

    pts = np.array(points, dtype=np.float64)
    curve = AudioCurve(
        name=name,
        points=pts,
        duration=float(pts[-1, 0]),
        average_dbfs=float(np.mean(pts[:, 1])),
        source="csv",
        skipped_rows=skipped,
    )
    log.info(
        "CSV parsed: %s (Duration: %.2fs, Points: %d, Skipped rows: %d)",
        name, curve.duration, len(curve), skipped,
    )
    return curve
