"""Bounded, thread-safe log store backing the console view."""
from __future__ import annotations
import logging
import threading
from datetime import datetime

from wavdyn.types import LogEntry, LogLevel

SOFT_CAP = 1000
EVICT_COUNT = 500


def make_entry(level: LogLevel, message: str) -> LogEntry:
    return LogEntry(
        timestamp=datetime.now().strftime("%H:%M:%S"),
        message=message,
        level=level,
    )


def python_level(level: LogLevel) -> int:
    if level == LogLevel.ERROR:
        return logging.ERROR
    if level == LogLevel.DEBUG:
        return logging.DEBUG
    return logging.INFO


def store_level(levelno: int) -> LogLevel:
    """Map a stdlib logging level onto the console levels."""
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno <= logging.DEBUG:
        return LogLevel.DEBUG
    return LogLevel.INFO


class LogStore:
    """
    Append-only log with hysteresis trimming.

    Once more than soft_cap entries are held, the oldest evict_count are
    dropped in a single batch. Every entry gets a sequence number so readers
    can follow the log across evictions and clears.
    """

    def __init__(self, *, soft_cap: int = SOFT_CAP, evict_count: int = EVICT_COUNT):
        if not 0 < evict_count <= soft_cap:
            raise ValueError("evict_count must be in (0, soft_cap].")
        self.soft_cap = soft_cap
        self.evict_count = evict_count
        self._lock = threading.Lock()
        self._entries: list[LogEntry] = []
        self._first_seq = 0

    def append_entry(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            if len(self._entries) > self.soft_cap:
                del self._entries[:self.evict_count]
                self._first_seq += self.evict_count

    def append(self, level: LogLevel, message: str) -> LogEntry:
        entry = make_entry(level, message)
        self.append_entry(entry)
        return entry

    def clear(self) -> None:
        with self._lock:
            self._first_seq += len(self._entries)
            self._entries.clear()

    def entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def read_since(self, seq: int) -> tuple[list[LogEntry], int]:
        """Return entries with sequence number >= seq, plus the next cursor."""
        with self._lock:
            start = max(0, seq - self._first_seq)
            end_seq = self._first_seq + len(self._entries)
            return list(self._entries[start:]), end_seq

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def logger(self, name: str) -> "StoreLogger":
        return StoreLogger(self, logging.getLogger(name))


class StoreLogger(logging.LoggerAdapter):
    """Logger that records every call in a LogStore before normal dispatch."""

    def __init__(self, store: LogStore, logger: logging.Logger):
        super().__init__(logger, {})
        self.store = store

    def log(self, level, msg, *args, **kwargs):
        text = str(msg) % args if args else str(msg)
        self.store.append(store_level(level), text)
        super().log(level, msg, *args, **kwargs)

    def command(self, msg, *args, **kwargs):
        """Record user input at Command level; it reaches logging as INFO."""
        text = str(msg) % args if args else str(msg)
        self.store.append(LogLevel.COMMAND, text)
        super().log(logging.INFO, msg, *args, **kwargs)
