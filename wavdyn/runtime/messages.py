"""Messages exchanged between the caller, the pool loop and worker threads."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from wavdyn.types import AudioCurve, LogEntry, Slot, TaskState


# Worker/pool -> caller

@dataclass(frozen=True)
class LogAppend:
    entry: LogEntry


@dataclass(frozen=True)
class TaskStateChanged:
    task_id: int
    state: TaskState


@dataclass(frozen=True, eq=False)
class BatchResult:
    """A curve loaded in single/batch mode."""
    curve: AudioCurve
    task_id: int


@dataclass(frozen=True, eq=False)
class SlotResult:
    """A curve loaded into comparison slot A or B."""
    curve: AudioCurve
    slot: Slot
    task_id: int


ResultReady = Union[BatchResult, SlotResult]
WorkerMessage = Union[LogAppend, TaskStateChanged, BatchResult, SlotResult]


# Caller -> pool loop

@dataclass(frozen=True)
class KillCommand:
    task_id: int


@dataclass(frozen=True)
class ShutdownCommand:
    pass


PoolCommand = Union[KillCommand, ShutdownCommand]
