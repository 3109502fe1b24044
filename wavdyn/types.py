from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import numpy as np


class TaskStatus(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"
    COMPLETED = "completed"
    KILLED = "killed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.KILLED, TaskStatus.ERROR})


class LogLevel(str, Enum):
    INFO = "info"
    ERROR = "error"
    DEBUG = "debug"
    COMMAND = "command"


class Slot(str, Enum):
    A = "A"
    B = "B"

    @property
    def other(self) -> "Slot":
        return Slot.B if self is Slot.A else Slot.A


class Consistency(str, Enum):
    HIGH = "high_consistency"
    MODERATE = "moderate_difference"
    LARGE = "large_difference"


def _frozen_points(points) -> np.ndarray:
    pts = np.array(points, dtype=np.float64).reshape(-1, 2)
    pts.setflags(write=False)
    return pts


@dataclass(frozen=True, eq=False)
class AudioCurve:
    """Loudness curve: (time_s, dBFS) points plus summary values."""
    name: str
    points: np.ndarray
    duration: float
    average_dbfs: float
    source: str = "wav"
    sample_rate: int | None = None
    channels: int | None = None
    skipped_rows: int = 0

    def __post_init__(self):
        object.__setattr__(self, "points", _frozen_points(self.points))

    @property
    def times(self) -> np.ndarray:
        return self.points[:, 0]

    @property
    def values(self) -> np.ndarray:
        return self.points[:, 1]

    def __len__(self) -> int:
        return int(self.points.shape[0])


@dataclass(frozen=True, eq=False)
class ComparisonResult:
    mean_diff: float
    std_dev: float
    max_diff: float
    min_diff: float
    correlation_coefficient: float
    t_statistic: float
    diff_points: np.ndarray
    target_mean_diff: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "diff_points", _frozen_points(self.diff_points))

    @property
    def n_points(self) -> int:
        return int(self.diff_points.shape[0])


@dataclass(frozen=True)
class ComparisonVerdict:
    consistency: Consistency
    confidence: float
    critical_value: float
    reject_h0: bool


@dataclass(frozen=True)
class TaskState:
    status: TaskStatus
    progress: float = 0.0
    message: str | None = None

    @classmethod
    def waiting(cls) -> "TaskState":
        return cls(TaskStatus.WAITING)

    @classmethod
    def running(cls, progress: float = 0.0) -> "TaskState":
        return cls(TaskStatus.RUNNING, progress=min(1.0, max(0.0, float(progress))))

    @classmethod
    def completed(cls) -> "TaskState":
        return cls(TaskStatus.COMPLETED, progress=1.0)

    @classmethod
    def killed(cls) -> "TaskState":
        return cls(TaskStatus.KILLED)

    @classmethod
    def error(cls, message: str) -> "TaskState":
        return cls(TaskStatus.ERROR, message=message)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        return self.status in (TaskStatus.WAITING, TaskStatus.RUNNING)

    def describe(self) -> str:
        if self.status == TaskStatus.RUNNING:
            return f"Running ({self.progress * 100.0:.0f}%)"
        if self.status == TaskStatus.ERROR:
            return f"Error: {self.message}"
        return self.status.value.capitalize()


@dataclass
class AudioTask:
    id: int
    name: str
    state: TaskState = field(default_factory=TaskState.waiting)


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    message: str
    level: LogLevel

    def format(self) -> str:
        return f"[{self.timestamp}] <{self.level.value.upper()}> {self.message}"
