"""Background task execution, messaging and caller-side session state."""

from wavdyn.runtime.logstore import LogStore, StoreLogger
from wavdyn.runtime.pool import TaskContext, WorkerPool
from wavdyn.runtime.session import Session
from wavdyn.runtime.tasks import TaskRegistry

__all__ = [
    "LogStore",
    "Session",
    "StoreLogger",
    "TaskContext",
    "TaskRegistry",
    "WorkerPool",
]
