"""Worker pool: one command loop plus one fresh thread per submitted job."""
from __future__ import annotations
import logging
import queue
import threading
from pathlib import Path
from typing import Callable

from wavdyn.config import AnalysisConfig, DEFAULT_CONFIG
from wavdyn.errors import TaskCancelled, WavdynError
from wavdyn.io.loader import load_curve
from wavdyn.runtime.logstore import LogStore, StoreLogger, make_entry, python_level
from wavdyn.runtime.messages import (
    BatchResult,
    KillCommand,
    LogAppend,
    PoolCommand,
    ShutdownCommand,
    SlotResult,
    TaskStateChanged,
    WorkerMessage,
)
from wavdyn.runtime.tasks import TaskRegistry
from wavdyn.types import AudioCurve, LogLevel, Slot, TaskState

_logger = logging.getLogger(__name__)

Job = Callable[["TaskContext"], object]


class TaskContext:
    """Handle given to a running job: logging, progress and the kill flag."""

    def __init__(self, pool: "WorkerPool", task_id: int, name: str):
        self.task_id = task_id
        self.name = name
        self.config = pool.config
        self.logger: StoreLogger = pool.store.logger(f"wavdyn.task.{task_id}")
        self._pool = pool
        self._cancel = threading.Event()

    def is_cancelled(self) -> bool:
        return self._cancel.is_set()

    def cancel(self) -> None:
        self._cancel.set()

    def report_progress(self, fraction: float) -> None:
        self._pool._set_state(self.task_id, TaskState.running(fraction))


class WorkerPool:
    """
    Runs jobs off the calling thread and reports through a message queue.

    "Pool" is a registry abstraction: every submitted job gets its own
    thread and threads are never reused. A separate long-lived loop thread
    handles kill and shutdown commands. Messages for the caller go to
    `messages`, an unbounded queue drained by a single consumer.

    Killing a task is advisory. The registry entry becomes Killed at once,
    and the job's TaskContext is flagged; jobs that poll the flag stop
    early, others run to the end and have their result discarded.
    """

    def __init__(
        self,
        store: LogStore,
        *,
        registry: TaskRegistry | None = None,
        config: AnalysisConfig = DEFAULT_CONFIG,
        messages: "queue.Queue[WorkerMessage] | None" = None,
    ):
        self.store = store
        self.registry = registry if registry is not None else TaskRegistry()
        self.config = config
        self.messages: "queue.Queue[WorkerMessage]" = messages if messages is not None else queue.Queue()
        self._commands: "queue.Queue[PoolCommand]" = queue.Queue()
        self._contexts: dict[int, TaskContext] = {}
        self._contexts_lock = threading.Lock()
        self._log = store.logger("wavdyn.pool")
        self._loop = threading.Thread(
            target=self._command_loop, name="wavdyn-pool", daemon=True
        )
        self._loop.start()

    # ------------------------------------------------------------------
    # Caller API

    def submit(self, name: str, job: Job, *, slot: Slot | None = None) -> int:
        """
        Register a task and start its job on a new thread.

        If the job returns an AudioCurve it is delivered as a BatchResult,
        or as a SlotResult when slot is given.
        """
        task = self.registry.register(name)
        ctx = TaskContext(self, task.id, name)
        with self._contexts_lock:
            self._contexts[task.id] = ctx
        self._log.info("Task %d started: %s", task.id, name)
        worker = threading.Thread(
            target=self._run_task,
            args=(ctx, job, slot),
            name=f"wavdyn-task-{task.id}",
            daemon=True,
        )
        worker.start()
        return task.id

    def submit_load(self, path: str | Path, *, slot: Slot | None = None) -> int:
        """Load a WAV/CSV file in the background."""
        filename = Path(path).name
        name = f"Track {slot.value} Load: {filename}" if slot is not None else filename

        def job(ctx: TaskContext) -> AudioCurve:
            return load_curve(
                path,
                config=ctx.config,
                logger=ctx.logger,
                progress=ctx.report_progress,
                should_stop=ctx.is_cancelled,
            )

        return self.submit(name, job, slot=slot)

    def submit_slot_load(self, path: str | Path, slot: Slot) -> int:
        """Load a file into comparison slot A or B."""
        return self.submit_load(path, slot=Slot(slot))

    def request_kill(self, task_id: int) -> None:
        self._commands.put(KillCommand(task_id))

    def shutdown(self) -> None:
        """Stop the command loop. Running jobs are left to finish on their own."""
        self._commands.put(ShutdownCommand())

    @property
    def running(self) -> bool:
        return self._loop.is_alive()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the command loop (not the jobs) to exit."""
        self._loop.join(timeout)
        return not self._loop.is_alive()

    # ------------------------------------------------------------------
    # Internals

    def _post(self, message: WorkerMessage) -> None:
        self.messages.put(message)

    def _post_log(self, level: LogLevel, message: str) -> None:
        _logger.log(python_level(level), message)
        self._post(LogAppend(make_entry(level, message)))

    def _set_state(self, task_id: int, state: TaskState) -> bool:
        if not self.registry.transition(task_id, state):
            return False
        self._post(TaskStateChanged(task_id, state))
        return True

    def _command_loop(self) -> None:
        while True:
            try:
                command = self._commands.get(timeout=self.config.poll_interval_s)
            except queue.Empty:
                continue
            if isinstance(command, ShutdownCommand):
                self._post_log(LogLevel.DEBUG, "WorkerPool received Shutdown command. Exiting.")
                return
            if isinstance(command, KillCommand):
                self._handle_kill(command.task_id)

    def _handle_kill(self, task_id: int) -> None:
        task = self.registry.kill(task_id)
        if task is None:
            self._post_log(
                LogLevel.DEBUG,
                f"Kill ignored: task {task_id} is unknown or already finished.",
            )
            return
        with self._contexts_lock:
            ctx = self._contexts.get(task_id)
        if ctx is not None:
            ctx.cancel()
        self._post(TaskStateChanged(task_id, task.state))
        self._post_log(
            LogLevel.COMMAND,
            f"Task {task_id} ({task.name}) marked for kill. "
            "Work already in progress is not guaranteed to stop.",
        )

    def _run_task(self, ctx: TaskContext, job: Job, slot: Slot | None) -> None:
        self._set_state(ctx.task_id, TaskState.running(0.0))
        try:
            result = job(ctx)
        except TaskCancelled as exc:
            ctx.logger.info("Task %d stopped: %s", ctx.task_id, exc)
            return
        except WavdynError as exc:
            self._fail(ctx, f"File load failed ({ctx.name}): {exc}")
            return
        except Exception as exc:
            ctx.logger.exception("Task %d crashed", ctx.task_id)
            self._fail(ctx, f"Unexpected error ({ctx.name}): {exc}")
            return
        finally:
            with self._contexts_lock:
                self._contexts.pop(ctx.task_id, None)

        completed = TaskState.completed()

        def deliver() -> None:
            if isinstance(result, AudioCurve):
                if slot is None:
                    self._post(BatchResult(result, ctx.task_id))
                else:
                    self._post(SlotResult(result, slot, ctx.task_id))
            self._post(TaskStateChanged(ctx.task_id, completed))

        # Completion and kill race on the registry; only the winner posts.
        if self.registry.transition(ctx.task_id, completed, on_applied=deliver):
            ctx.logger.info("Task %d completed: %s", ctx.task_id, ctx.name)
        else:
            ctx.logger.info("Task %d was killed; discarding its result.", ctx.task_id)

    def _fail(self, ctx: TaskContext, message: str) -> None:
        ctx.logger.error(message)
        self._set_state(ctx.task_id, TaskState.error(message))
