"""Caller-owned state: loaded curves, A/B slots and the current comparison."""
from __future__ import annotations
import queue
import time
from pathlib import Path
from typing import Iterable

from wavdyn.analysis.compare import assess, compare
from wavdyn.config import AnalysisConfig, DEFAULT_CONFIG
from wavdyn.errors import ComparisonError
from wavdyn.metrics.stats import DEFAULT_CONFIDENCE
from wavdyn.reporting.export import default_export_name, export_curve_csv
from wavdyn.runtime.logstore import LogStore
from wavdyn.runtime.messages import (
    BatchResult,
    LogAppend,
    SlotResult,
    TaskStateChanged,
    WorkerMessage,
)
from wavdyn.runtime.pool import WorkerPool
from wavdyn.types import (
    AudioCurve,
    ComparisonResult,
    ComparisonVerdict,
    Slot,
    TaskStatus,
)


class Session:
    """
    Single consumer of a WorkerPool's messages.

    All mutation of the fields below happens on the thread that calls
    drain() and the setters; workers only ever talk to it through messages.
    """

    def __init__(
        self,
        *,
        config: AnalysisConfig = DEFAULT_CONFIG,
        store: LogStore | None = None,
        pool: WorkerPool | None = None,
    ):
        self.config = config
        if store is None:
            store = LogStore(soft_cap=config.log_soft_cap, evict_count=config.log_evict_count)
        self.store = store
        self.pool = pool if pool is not None else WorkerPool(store, config=config)
        self.logger = store.logger("wavdyn.session")

        self.curves: list[AudioCurve] = []
        self.slots: dict[Slot, AudioCurve | None] = {Slot.A: None, Slot.B: None}
        self.compare_result: ComparisonResult | None = None
        self.verdict: ComparisonVerdict | None = None
        self.error_msg: str | None = None
        self.target_mean_diff = 0.0
        self.confidence = DEFAULT_CONFIDENCE
        self.target_lufs = config.default_target_lufs
        self.logger.info("Session started.")

    # ------------------------------------------------------------------
    # Job submission

    def open_files(self, paths: Iterable[str | Path]) -> list[int]:
        """Load files in batch mode; each one becomes its own task."""
        paths = list(paths)
        self.logger.info("Selected files: %d", len(paths))
        self.error_msg = None
        return [self.pool.submit_load(p) for p in paths]

    def select_track(self, slot: Slot, path: str | Path) -> int:
        """Load a file into comparison slot A or B."""
        slot = Slot(slot)
        self.logger.info("Selecting Track %s", slot.value)
        self.error_msg = None
        return self.pool.submit_slot_load(path, slot)

    def clear_curves(self) -> None:
        self.curves.clear()
        self.logger.info("File list cleared.")

    @property
    def loading(self) -> bool:
        return self.pool.registry.any_active()

    @property
    def track_a(self) -> AudioCurve | None:
        return self.slots[Slot.A]

    @property
    def track_b(self) -> AudioCurve | None:
        return self.slots[Slot.B]

    @property
    def ready_to_compare(self) -> bool:
        return self.track_a is not None and self.track_b is not None

    # ------------------------------------------------------------------
    # Message consumption

    def drain(self) -> int:
        """Handle every queued message without blocking; returns how many."""
        handled = 0
        while True:
            try:
                message = self.pool.messages.get_nowait()
            except queue.Empty:
                return handled
            self._handle(message)
            handled += 1

    def wait_until_idle(self, poll_interval_s: float | None = None) -> None:
        """Drain repeatedly until no task is waiting or running."""
        interval = poll_interval_s if poll_interval_s is not None else self.config.poll_interval_s
        while True:
            self.drain()
            if not self.loading:
                self.drain()
                return
            time.sleep(interval)

    def _handle(self, message: WorkerMessage) -> None:
        if isinstance(message, LogAppend):
            self.store.append_entry(message.entry)
        elif isinstance(message, TaskStateChanged):
            if message.state.status == TaskStatus.ERROR:
                self.error_msg = f"Task {message.task_id} Error: {message.state.message}"
        elif isinstance(message, SlotResult):
            self.slots[message.slot] = message.curve
            if self.ready_to_compare:
                self.run_comparison()
        elif isinstance(message, BatchResult):
            self.curves.append(message.curve)
        else:
            raise TypeError(f"Unexpected worker message: {message!r}")

    # ------------------------------------------------------------------
    # Comparison

    def set_target_mean_diff(self, value: float) -> None:
        self.target_mean_diff = float(value)
        if self.ready_to_compare:
            self.run_comparison()

    def set_confidence(self, confidence: float) -> None:
        self.confidence = float(confidence)
        self.logger.debug("Confidence set to %.0f%%", self.confidence * 100.0)
        if self.ready_to_compare:
            self.run_comparison()

    def run_comparison(self) -> ComparisonResult | None:
        """Recompute the A/B result from the current slots, target and confidence."""
        a, b = self.track_a, self.track_b
        if a is None or b is None:
            self.logger.error("Comparison failed: Track A or Track B is missing.")
            return None
        try:
            result = compare(
                a, b, self.target_mean_diff,
                tolerance_s=self.config.duration_tolerance_s,
            )
        except ComparisonError as exc:
            self.logger.error("Comparison failed: %s", exc)
            self.error_msg = str(exc)
            self.compare_result = None
            self.verdict = None
            return None

        self.logger.debug("Compared points: %d", result.n_points)
        self.logger.info(
            "Comparison finished. Mean Diff: %.2f dB, Std Dev: %.4f",
            result.mean_diff, result.std_dev,
        )
        self.logger.debug(
            "Correlation (r): %.4f, T-Stat: %.2f",
            result.correlation_coefficient, result.t_statistic,
        )
        self.compare_result = result
        self.verdict = assess(result, self.confidence)
        self.error_msg = None
        return result

    # ------------------------------------------------------------------
    # Export / teardown

    def export_curve(self, path: str | Path | None = None, *, index: int = 0) -> Path:
        """Export one loaded curve normalized to target_lufs."""
        curve = self.curves[index]
        out = Path(path) if path is not None else Path(default_export_name(curve))
        return export_curve_csv(curve, self.target_lufs, out, logger=self.logger)

    def close(self) -> None:
        self.pool.shutdown()
