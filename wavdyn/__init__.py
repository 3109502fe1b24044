"""
wavdyn - WAV Dynamics Analyzer

Extracts loudness curves from WAV/CSV files and compares two curves
point by point for dynamic consistency.
"""
from wavdyn.version import __version__
from wavdyn.types import (
    AudioCurve,
    AudioTask,
    ComparisonResult,
    ComparisonVerdict,
    Consistency,
    LogEntry,
    LogLevel,
    Slot,
    TaskState,
    TaskStatus,
)

__all__ = [
    "__version__",
    "AudioCurve",
    "AudioTask",
    "ComparisonResult",
    "ComparisonVerdict",
    "Consistency",
    "LogEntry",
    "LogLevel",
    "Slot",
    "TaskState",
    "TaskStatus",
]
