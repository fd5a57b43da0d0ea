"""Read-only access to retained records and pipeline statistics."""

from __future__ import annotations

from typing import List, Optional

from datastore.history_store import HistoryStore
from models.records import PipelineStats, TemperatureRecord


class QueryService:
    """Façade over the history store used by the API layer; holds no state of its own."""

    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    def all_records(self, limit: Optional[int] = None) -> List[TemperatureRecord]:
        return self._store.snapshot(limit=limit)

    def latest_record(self) -> Optional[TemperatureRecord]:
        return self._store.latest()

    def stats(self) -> PipelineStats:
        return self._store.stats_snapshot()

    def records_in_range(self, start_ms: int, end_ms: int) -> List[TemperatureRecord]:
        return self._store.in_range(start_ms, end_ms)
