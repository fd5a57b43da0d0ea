from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from functools import lru_cache
from threading import Lock
from typing import Deque, List, Optional

from models.records import PipelineStats, TemperatureRecord
from settings import get_settings

logger = logging.getLogger(__name__)


class HistoryStore:
    """Fixed-capacity FIFO of accepted records plus running statistics.

    Every read returns an independent copy taken under the store lock, so
    readers never see a half-applied ``append`` or ``reset``.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"History capacity must be positive, got {capacity}.")
        self._capacity = capacity
        self._records: Deque[TemperatureRecord] = deque(maxlen=capacity)
        self._stats = PipelineStats()
        self._lock = Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def append(self, record: TemperatureRecord) -> None:
        with self._lock:
            # deque(maxlen=...) drops the oldest entry once full
            self._records.append(record)
            self._stats.total_records += 1
            self._stats.last_processed = record.timestamp
            retained = len(self._records)
        logger.debug(
            "Record loaded",
            extra={
                "sensor_id": record.sensor_id,
                "temperature": record.temperature,
                "timestamp": record.timestamp,
                "record_count": retained,
            },
        )

    def record_validation(self, valid: bool) -> None:
        with self._lock:
            if valid:
                self._stats.valid_records += 1
            else:
                self._stats.invalid_records += 1

    def snapshot(self, limit: Optional[int] = None) -> List[TemperatureRecord]:
        """Return retained records oldest first, optionally only the newest ``limit``."""

        with self._lock:
            records = list(self._records)
        if limit is not None and 0 < limit < len(records):
            return records[-limit:]
        return records

    def latest(self) -> Optional[TemperatureRecord]:
        with self._lock:
            if not self._records:
                return None
            return self._records[-1]

    def in_range(self, start: int, end: int) -> List[TemperatureRecord]:
        with self._lock:
            return [record for record in self._records if start <= record.timestamp <= end]

    def stats_snapshot(self) -> PipelineStats:
        with self._lock:
            return replace(self._stats)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
            self._stats = PipelineStats()
        logger.info("History store reset")


@lru_cache
def build_default_store(capacity: Optional[int] = None) -> HistoryStore:
    settings = get_settings()
    max_records = settings.max_records if capacity is None else capacity
    return HistoryStore(capacity=max_records)
