from __future__ import annotations

import queue
import threading

import pytest

from tests.conftest import gen_sine, make_curve, wait_for, write_wav
from wavdyn.errors import DecodeError, TaskCancelled
from wavdyn.runtime.logstore import LogStore
from wavdyn.runtime.messages import BatchResult, LogAppend, SlotResult, TaskStateChanged
from wavdyn.runtime.pool import WorkerPool
from wavdyn.runtime.tasks import TaskRegistry
from wavdyn.types import Slot, TaskState, TaskStatus


def _drain(q) -> list:
    out = []
    while True:
        try:
            out.append(q.get_nowait())
        except queue.Empty:
            return out


def _status(pool: WorkerPool, task_id: int) -> TaskStatus:
    return pool.registry.get(task_id).state.status


@pytest.fixture
def pool():
    p = WorkerPool(LogStore())
    yield p
    p.shutdown()
    p.join(timeout=2.0)


def test_registry_ids_and_sticky_terminal_states():
    reg = TaskRegistry()
    ids = [reg.register(n).id for n in ("a", "b", "c")]
    assert ids == [1, 2, 3]
    assert reg.get(1).state == TaskState.waiting()

    assert reg.transition(1, TaskState.running(0.5))
    assert reg.transition(1, TaskState.completed())
    assert not reg.transition(1, TaskState.running(0.1))
    assert reg.kill(1) is None
    assert reg.get(1).state.status == TaskStatus.COMPLETED

    killed = reg.kill(2)
    assert killed.state.status == TaskStatus.KILLED
    assert not reg.transition(2, TaskState.completed())
    assert reg.kill(99) is None
    assert reg.any_active()
    assert reg.transition(3, TaskState.error("boom"))
    assert not reg.any_active()


def test_registry_returns_copies():
    reg = TaskRegistry()
    task = reg.register("a")
    task.state = TaskState.completed()
    assert reg.get(1).state.status == TaskStatus.WAITING


def test_kill_one_of_three_running_jobs(pool):
    release = threading.Event()

    def blocking_job(ctx):
        release.wait(5.0)
        return None

    ids = [pool.submit(f"job{i}", blocking_job) for i in range(3)]
    assert ids == [1, 2, 3]
    assert wait_for(lambda: all(_status(pool, i) == TaskStatus.RUNNING for i in ids))

    pool.request_kill(2)
    assert wait_for(lambda: _status(pool, 2) == TaskStatus.KILLED)
    release.set()
    assert wait_for(lambda: _status(pool, 1) == TaskStatus.COMPLETED)
    assert wait_for(lambda: _status(pool, 3) == TaskStatus.COMPLETED)
    assert _status(pool, 2) == TaskStatus.KILLED

    messages = _drain(pool.messages)
    killed = [m for m in messages if isinstance(m, TaskStateChanged) and m.task_id == 2]
    assert killed[-1].state.status == TaskStatus.KILLED
    assert any(
        isinstance(m, LogAppend) and "marked for kill" in m.entry.message for m in messages
    )


def test_kill_after_completion_is_ignored(pool):
    pool.submit("quick", lambda ctx: None)
    assert wait_for(lambda: _status(pool, 1) == TaskStatus.COMPLETED)
    pool.request_kill(1)
    pool.shutdown()
    assert pool.join(timeout=2.0)
    assert not pool.running
    assert _status(pool, 1) == TaskStatus.COMPLETED

    logs = [m.entry.message for m in _drain(pool.messages) if isinstance(m, LogAppend)]
    assert any(msg.startswith("Kill ignored") for msg in logs)
    assert logs[-1] == "WorkerPool received Shutdown command. Exiting."


def test_failing_jobs_end_in_error(pool):
    def decode_fails(ctx):
        raise DecodeError("bad header")

    def crashes(ctx):
        raise KeyError("oops")

    a = pool.submit("a.wav", decode_fails)
    b = pool.submit("b.wav", crashes)
    assert wait_for(lambda: _status(pool, a) == TaskStatus.ERROR)
    assert wait_for(lambda: _status(pool, b) == TaskStatus.ERROR)
    assert pool.registry.get(a).state.message == "File load failed (a.wav): bad header"
    assert pool.registry.get(b).state.message.startswith("Unexpected error (b.wav)")


def test_progress_is_reported(pool):
    def job(ctx):
        ctx.report_progress(0.5)
        return None

    task_id = pool.submit("p", job)
    assert wait_for(lambda: _status(pool, task_id) == TaskStatus.COMPLETED)
    progress = [
        m.state.progress for m in _drain(pool.messages)
        if isinstance(m, TaskStateChanged) and m.state.status == TaskStatus.RUNNING
    ]
    assert progress == [0.0, 0.5]


def test_load_results_are_tagged(pool, tmp_path):
    wav = write_wav(tmp_path / "tone.wav", gen_sine(440.0, 1.0, 8000, amp=0.5), fs=8000)
    batch_id = pool.submit_load(wav)
    slot_id = pool.submit_slot_load(wav, Slot.B)
    assert pool.registry.get(slot_id).name == "Track B Load: tone.wav"
    assert wait_for(lambda: _status(pool, batch_id) == TaskStatus.COMPLETED)
    assert wait_for(lambda: _status(pool, slot_id) == TaskStatus.COMPLETED)

    messages = _drain(pool.messages)
    batch = [m for m in messages if isinstance(m, BatchResult)]
    slot = [m for m in messages if isinstance(m, SlotResult)]
    assert [m.task_id for m in batch] == [batch_id]
    assert [(m.task_id, m.slot) for m in slot] == [(slot_id, Slot.B)]
    assert batch[0].curve.name == "tone.wav"
    assert len(batch[0].curve) == 7


def test_transition_hook_runs_only_when_applied():
    reg = TaskRegistry()
    reg.register("a")
    calls = []
    assert reg.transition(1, TaskState.completed(), on_applied=lambda: calls.append(1))
    assert not reg.transition(1, TaskState.completed(), on_applied=lambda: calls.append(2))
    assert not reg.transition(7, TaskState.completed(), on_applied=lambda: calls.append(3))
    assert calls == [1]


def test_kill_racing_completion_drops_result(pool):
    def job(ctx):
        # registry flips to Killed before the context is ever flagged
        pool.registry.kill(ctx.task_id)
        return make_curve([-20.0, -21.0])

    task_id = pool.submit("racy", job)
    assert wait_for(
        lambda: any("discarding its result" in e.message for e in pool.store.entries())
    )
    messages = _drain(pool.messages)
    assert not any(isinstance(m, (BatchResult, SlotResult)) for m in messages)
    assert not any(
        isinstance(m, TaskStateChanged) and m.state.status == TaskStatus.COMPLETED
        for m in messages
    )
    assert _status(pool, task_id) == TaskStatus.KILLED


def test_killed_job_result_is_discarded(pool):
    release = threading.Event()

    def job(ctx):
        release.wait(5.0)
        return make_curve([-20.0, -21.0])

    task_id = pool.submit("late", job)
    assert wait_for(lambda: _status(pool, task_id) == TaskStatus.RUNNING)
    pool.request_kill(task_id)
    assert wait_for(lambda: _status(pool, task_id) == TaskStatus.KILLED)
    release.set()
    assert wait_for(
        lambda: any("discarding its result" in e.message for e in pool.store.entries())
    )
    messages = _drain(pool.messages)
    assert not any(isinstance(m, (BatchResult, SlotResult)) for m in messages)
    assert _status(pool, task_id) == TaskStatus.KILLED


def test_cooperative_job_stops_on_kill(pool):
    def job(ctx):
        if not wait_for(ctx.is_cancelled, timeout=5.0):
            return None
        raise TaskCancelled("stopped early")

    task_id = pool.submit("coop", job)
    assert wait_for(lambda: _status(pool, task_id) == TaskStatus.RUNNING)
    pool.request_kill(task_id)
    assert wait_for(
        lambda: any("stopped early" in e.message for e in pool.store.entries())
    )
    assert _status(pool, task_id) == TaskStatus.KILLED
