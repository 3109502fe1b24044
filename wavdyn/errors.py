"""Exception taxonomy for decoding, comparison, commands and export."""
from __future__ import annotations


class WavdynError(Exception):
    """Base class for every error raised by wavdyn."""


class DecodeError(WavdynError):
    """A file could not be turned into an AudioCurve."""


class UnsupportedFormat(DecodeError):
    pass


class EmptySampleData(DecodeError):
    pass


class InvalidWindowConfig(DecodeError):
    pass


class DecodeIOError(DecodeError):
    pass


class CsvRowError(WavdynError):
    """A single CSV row was rejected; the rest of the file still loads."""

    def __init__(self, line: int, reason: str):
        super().__init__(f"line {line}: {reason}")
        self.line = line
        self.reason = reason


class ComparisonError(WavdynError):
    pass


class DurationMismatch(ComparisonError):
    def __init__(self, duration_a: float, duration_b: float, tolerance_s: float):
        super().__init__(
            f"Duration difference too large ({duration_a:.2f}s vs {duration_b:.2f}s, "
            f"tolerance {tolerance_s:.2f}s); point-by-point comparison is not possible."
        )
        self.duration_a = duration_a
        self.duration_b = duration_b
        self.tolerance_s = tolerance_s


class CommandError(WavdynError):
    pass


class UnknownCommand(CommandError):
    def __init__(self, verb: str):
        super().__init__(f"command not found: {verb}")
        self.verb = verb


class BadArguments(CommandError):
    pass


class ExportError(WavdynError):
    pass


class TaskCancelled(WavdynError):
    """Raised inside a job once its task has been killed."""
