"""Shared task registry with sticky terminal states."""
from __future__ import annotations
import threading
from dataclasses import replace
from typing import Callable

from wavdyn.types import AudioTask, TaskState


class TaskRegistry:
    """
    Ordered list of task descriptors, guarded by one lock.

    Tasks are appended on registration and never removed. Callers only ever
    see copies, so no descriptor is shared across threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tasks: list[AudioTask] = []
        self._by_id: dict[int, AudioTask] = {}
        self._next_id = 1

    def register(self, name: str) -> AudioTask:
        with self._lock:
            task = AudioTask(id=self._next_id, name=name, state=TaskState.waiting())
            self._next_id += 1
            self._tasks.append(task)
            self._by_id[task.id] = task
            return replace(task)

    def get(self, task_id: int) -> AudioTask | None:
        with self._lock:
            task = self._by_id.get(task_id)
            return replace(task) if task is not None else None

    def snapshot(self) -> list[AudioTask]:
        with self._lock:
            return [replace(t) for t in self._tasks]

    def transition(
        self,
        task_id: int,
        state: TaskState,
        *,
        on_applied: Callable[[], None] | None = None,
    ) -> bool:
        """
        Apply state unless the task is unknown or already terminal.

        on_applied runs under the registry lock once the state is set, so
        nothing observes the new state before it has run. It must not block.
        """
        with self._lock:
            task = self._by_id.get(task_id)
            if task is None or task.state.is_terminal:
                return False
            task.state = state
            if on_applied is not None:
                on_applied()
            return True

    def kill(self, task_id: int) -> AudioTask | None:
        """Mark a live task Killed; returns the updated copy, or None for a no-op."""
        with self._lock:
            task = self._by_id.get(task_id)
            if task is None or task.state.is_terminal:
                return None
            task.state = TaskState.killed()
            return replace(task)

    def any_active(self) -> bool:
        with self._lock:
            return any(t.state.is_active for t in self._tasks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)
