"""Extract, validate and load orchestration for the temperature sensor."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

from datastore.history_store import HistoryStore, build_default_store
from models.records import PipelineStats, TemperatureRecord
from services.query import QueryService
from services.scheduler import PeriodicTask, Scheduler, SchedulerState
from services.sources import ReadingSource, SimulatedSource
from services.validator import ReadingValidator
from settings import DEFAULT_POLLING_INTERVAL_MS, get_settings

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Coordinates the reading source, validator, history store and scheduler."""

    def __init__(
        self,
        source: ReadingSource,
        validator: ReadingValidator,
        store: HistoryStore,
        polling_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS,
    ) -> None:
        self.source = source
        self.validator = validator
        self.store = store
        self.polling_interval_ms = polling_interval_ms
        self.query = QueryService(store)
        self.scheduler = Scheduler(self.run_cycle)

    @property
    def state(self) -> SchedulerState:
        return self.scheduler.state

    def run_cycle(self) -> Optional[TemperatureRecord]:
        """Run a single extract, validate, load pass and return the stored record."""
        try:
            reading = self.source.produce()
            record = self.validator.transform(reading)
            if record is None:
                return None
            try:
                self.store.append(record)
            except Exception:
                logger.exception(
                    "Failed to load record, dropping it",
                    extra={"sensor_id": record.sensor_id, "temperature": record.temperature},
                )
                return None
            return record
        except Exception:
            logger.exception("Ingestion cycle failed")
            return None

    def start_pipeline(self, interval_ms: Optional[int] = None) -> PeriodicTask:
        interval = self.polling_interval_ms if interval_ms is None else interval_ms
        return self.scheduler.start(interval)

    def get_all_records(self, limit: Optional[int] = None) -> List[TemperatureRecord]:
        return self.query.all_records(limit=limit)

    def get_latest_record(self) -> Optional[TemperatureRecord]:
        return self.query.latest_record()

    def get_stats(self) -> PipelineStats:
        return self.query.stats()

    def get_records_in_range(self, start_ms: int, end_ms: int) -> List[TemperatureRecord]:
        return self.query.records_in_range(start_ms, end_ms)

    def reset_pipeline(self) -> None:
        """Stop ticking and return the store to its initial state."""
        self.scheduler.stop()
        self.store.reset()
        logger.info("Pipeline reset")

    def shutdown(self) -> None:
        self.scheduler.stop()


@lru_cache
def build_default_pipeline(
    interval_ms: Optional[int] = None,
) -> IngestionPipeline:
    """Factory that wires the pipeline with a simulated sensor."""
    settings = get_settings()
    store = build_default_store()
    source = SimulatedSource(
        min_temp=settings.sim_min_temp,
        max_temp=settings.sim_max_temp,
        sensor_id=settings.sensor_id,
        location=settings.sensor_location,
    )
    validator = ReadingValidator(
        store,
        min_temp=settings.validation_min_temp,
        max_temp=settings.validation_max_temp,
    )
    polling_interval = interval_ms or settings.polling_interval_ms
    return IngestionPipeline(
        source=source,
        validator=validator,
        store=store,
        polling_interval_ms=polling_interval,
    )
