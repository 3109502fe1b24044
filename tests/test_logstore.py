from __future__ import annotations

import logging
import threading

import pytest

from wavdyn.runtime.logstore import LogStore
from wavdyn.types import LogLevel


def test_overflow_evicts_oldest_batch():
    store = LogStore()
    for i in range(1000):
        store.append(LogLevel.INFO, f"m{i}")
    assert len(store) == 1000
    store.append(LogLevel.INFO, "m1000")
    entries = store.entries()
    assert len(entries) == 501
    assert entries[0].message == "m500"
    assert entries[-1].message == "m1000"
    store.append(LogLevel.INFO, "m1001")
    assert len(store) == 502


def test_small_cap_hysteresis():
    store = LogStore(soft_cap=4, evict_count=2)
    for i in range(5):
        store.append(LogLevel.DEBUG, str(i))
    assert [e.message for e in store.entries()] == ["2", "3", "4"]


def test_invalid_cap():
    with pytest.raises(ValueError):
        LogStore(soft_cap=10, evict_count=11)


def test_read_since_follows_eviction_and_clear():
    store = LogStore(soft_cap=4, evict_count=2)
    store.append(LogLevel.INFO, "a")
    store.append(LogLevel.INFO, "b")
    entries, cursor = store.read_since(0)
    assert [e.message for e in entries] == ["a", "b"]
    for m in ("c", "d", "e"):
        store.append(LogLevel.INFO, m)
    entries, cursor = store.read_since(cursor)
    assert [e.message for e in entries] == ["c", "d", "e"]
    store.clear()
    assert len(store) == 0
    store.append(LogLevel.INFO, "f")
    entries, cursor = store.read_since(cursor)
    assert [e.message for e in entries] == ["f"]
    assert store.read_since(cursor) == ([], cursor)


def test_entry_format():
    store = LogStore()
    entry = store.append(LogLevel.ERROR, "boom")
    assert len(entry.timestamp) == 8
    assert entry.format() == f"[{entry.timestamp}] <ERROR> boom"


def test_store_logger_levels_and_mirroring(caplog):
    store = LogStore()
    log = store.logger("wavdyn.test")
    with caplog.at_level(logging.DEBUG, logger="wavdyn.test"):
        log.debug("d %d", 1)
        log.info("i")
        log.warning("w")
        log.error("e")
        log.command("Executed: %s", "tasks")
    levels = [e.level for e in store.entries()]
    assert levels == [LogLevel.DEBUG, LogLevel.INFO, LogLevel.INFO, LogLevel.ERROR, LogLevel.COMMAND]
    assert store.entries()[0].message == "d 1"
    assert store.entries()[-1].message == "Executed: tasks"
    assert [r.getMessage() for r in caplog.records][-1] == "Executed: tasks"


def test_concurrent_appends_respect_cap():
    store = LogStore(soft_cap=100, evict_count=50)

    def writer(n):
        for i in range(500):
            store.append(LogLevel.INFO, f"{n}-{i}")

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert 50 < len(store) <= 100
    _, cursor = store.read_since(0)
    assert cursor == 8 * 500
