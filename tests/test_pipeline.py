"""End-to-end tests for the ingestion pipeline."""

from __future__ import annotations

import itertools
import threading
import time
from typing import Iterable

import pytest

from datastore.history_store import HistoryStore
from models.records import PipelineStats, TemperatureRecord
from services.pipeline import IngestionPipeline, build_default_pipeline
from services.scheduler import SchedulerState
from services.sources import DeviceSource, FixtureSource
from services.validator import ReadingValidator


def _build_pipeline(
    temperatures: Iterable[float],
    capacity: int = 100,
    min_temp: float = -50,
    max_temp: float = 100,
    repeat: bool = False,
) -> IngestionPipeline:
    store = HistoryStore(capacity=capacity)
    clock = itertools.count(1_000, 1_000)
    validator = ReadingValidator(store, min_temp=min_temp, max_temp=max_temp, clock=lambda: next(clock))
    return IngestionPipeline(
        source=FixtureSource(temperatures, repeat=repeat),
        validator=validator,
        store=store,
        polling_interval_ms=60_000,
    )


def _temperatures(records: Iterable[TemperatureRecord]) -> list[float]:
    return [record.temperature for record in records]


def test_end_to_end_scenario_with_rejections() -> None:
    pipeline = _build_pipeline([10, 20, 22, 101, 25], min_temp=15, max_temp=100)

    for _ in range(5):
        pipeline.run_cycle()

    assert _temperatures(pipeline.get_all_records()) == [20, 22, 25]
    stats = pipeline.get_stats()
    assert (stats.total_records, stats.valid_records, stats.invalid_records) == (3, 3, 2)


def test_default_bounds_only_reject_above_hundred() -> None:
    pipeline = _build_pipeline([10, 20, 22, 101, 25])

    for _ in range(5):
        pipeline.run_cycle()

    assert _temperatures(pipeline.get_all_records()) == [10, 20, 22, 25]
    stats = pipeline.get_stats()
    assert (stats.total_records, stats.valid_records, stats.invalid_records) == (4, 4, 1)
    assert stats.last_processed == pipeline.get_latest_record().timestamp


def test_run_cycle_returns_stored_record_or_none() -> None:
    pipeline = _build_pipeline([21.456, 150])

    stored = pipeline.run_cycle()
    rejected = pipeline.run_cycle()

    assert stored is not None
    assert stored.temperature == 21.46
    assert rejected is None


def test_counters_match_readings_fed() -> None:
    temperatures = [-60, -50, 0, 55.5, 100, 100.01, 42, 300, -49.99]
    pipeline = _build_pipeline(temperatures, capacity=3)

    for _ in temperatures:
        pipeline.run_cycle()

    stats = pipeline.get_stats()
    valid = sum(1 for t in temperatures if -50 <= t <= 100)
    assert stats.valid_records + stats.invalid_records == len(temperatures)
    assert stats.valid_records == valid
    assert stats.total_records == valid
    assert len(pipeline.get_all_records()) == 3


def test_bounded_retention_keeps_last_accepted_records() -> None:
    temperatures = [float(n) for n in range(25)]
    pipeline = _build_pipeline(temperatures, capacity=10)

    for _ in temperatures:
        pipeline.run_cycle()

    assert _temperatures(pipeline.get_all_records()) == temperatures[-10:]
    assert _temperatures(pipeline.get_all_records(limit=3)) == temperatures[-3:]


def test_records_in_range() -> None:
    pipeline = _build_pipeline([20, 21, 22])
    for _ in range(3):
        pipeline.run_cycle()

    assert [r.timestamp for r in pipeline.get_all_records()] == [1_000, 2_000, 3_000]
    assert _temperatures(pipeline.get_records_in_range(1_500, 3_000)) == [21, 22]


def test_latest_on_fresh_pipeline_is_none() -> None:
    pipeline = _build_pipeline([])

    pipeline.reset_pipeline()

    assert pipeline.get_latest_record() is None
    assert pipeline.get_all_records() == []


def test_load_fault_drops_record_without_counting_it(monkeypatch) -> None:
    pipeline = _build_pipeline([20.0, 21.0])

    def broken_append(record: TemperatureRecord) -> None:
        raise MemoryError("store unavailable")

    monkeypatch.setattr(pipeline.store, "append", broken_append)
    assert pipeline.run_cycle() is None
    monkeypatch.undo()

    assert pipeline.run_cycle() is not None
    stats = pipeline.get_stats()
    assert stats.total_records == 1
    assert stats.valid_records == 2
    assert _temperatures(pipeline.get_all_records()) == [21.0]


def test_source_fallback_keeps_pipeline_running() -> None:
    pipeline = _build_pipeline([])

    record = pipeline.run_cycle()

    assert record is not None
    assert record.temperature == 20.0


def test_start_pipeline_ticks_and_reset_returns_to_stopped() -> None:
    pipeline = _build_pipeline([20.0, 21.0, 22.0], repeat=True)

    task = pipeline.start_pipeline(20)
    assert pipeline.state is SchedulerState.running
    time.sleep(0.12)
    pipeline.reset_pipeline()

    assert task.cancelled is True
    assert pipeline.state is SchedulerState.stopped
    assert pipeline.get_all_records() == []
    assert pipeline.get_stats() == PipelineStats()

    try:
        restarted = pipeline.start_pipeline()
        assert restarted is not task
        assert restarted.interval_ms == 60_000
        assert pipeline.state is SchedulerState.running
        assert len(pipeline.get_all_records()) == 1
    finally:
        pipeline.shutdown()


def test_reset_during_first_cycle_waits_and_leaves_store_empty() -> None:
    entered = threading.Event()
    release = threading.Event()

    def blocking_read() -> float:
        entered.set()
        release.wait(timeout=5)
        return 21.0

    store = HistoryStore(capacity=10)
    pipeline = IngestionPipeline(
        source=DeviceSource(blocking_read),
        validator=ReadingValidator(store),
        store=store,
        polling_interval_ms=60_000,
    )

    starter = threading.Thread(target=pipeline.start_pipeline)
    starter.start()
    assert entered.wait(timeout=2)

    resetter = threading.Thread(target=pipeline.reset_pipeline)
    resetter.start()
    time.sleep(0.1)
    assert resetter.is_alive()

    release.set()
    resetter.join(timeout=5)
    starter.join(timeout=5)

    assert not resetter.is_alive()
    assert pipeline.state is SchedulerState.stopped
    assert pipeline.get_all_records() == []
    assert pipeline.get_stats() == PipelineStats()


def test_start_pipeline_twice_keeps_one_task() -> None:
    pipeline = _build_pipeline([20.0], repeat=True)
    try:
        first = pipeline.start_pipeline(60_000)
        second = pipeline.start_pipeline(10)
    finally:
        pipeline.shutdown()

    assert first is second
    assert pipeline.get_stats().total_records == 1


def test_build_default_pipeline_uses_settings(monkeypatch) -> None:
    from datastore.history_store import build_default_store
    from settings import get_settings

    monkeypatch.setenv("MAX_RECORDS", "7")
    monkeypatch.setenv("ETL_POLLING_INTERVAL_MS", "250")
    monkeypatch.setenv("SIM_MIN_TEMP", "1")
    monkeypatch.setenv("SIM_MAX_TEMP", "2")
    caches = (get_settings, build_default_store, build_default_pipeline)
    for cache in caches:
        cache.cache_clear()

    try:
        pipeline = build_default_pipeline()
        assert pipeline.store.capacity == 7
        assert pipeline.polling_interval_ms == 250
        record = pipeline.run_cycle()
        assert record is not None
        assert 1 <= record.temperature <= 2
        assert pipeline is build_default_pipeline()
    finally:
        for cache in caches:
            cache.cache_clear()


@pytest.mark.parametrize("limit", [None, 0, -3])
def test_non_positive_limit_returns_everything(limit) -> None:
    pipeline = _build_pipeline([20, 21, 22])
    for _ in range(3):
        pipeline.run_cycle()

    assert len(pipeline.get_all_records(limit=limit)) == 3
