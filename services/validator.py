"""Acceptance policy and normalization for raw readings."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

from datastore.history_store import HistoryStore
from models.records import RawReading, TemperatureRecord
from settings import DEFAULT_VALIDATION_RANGE

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class ReadingValidator:
    """Turns raw readings into records, counting every outcome on the store."""

    def __init__(
        self,
        store: HistoryStore,
        min_temp: float = DEFAULT_VALIDATION_RANGE[0],
        max_temp: float = DEFAULT_VALIDATION_RANGE[1],
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if min_temp > max_temp:
            raise ValueError(
                f"Acceptance bounds are inverted: min_temp={min_temp} > max_temp={max_temp}."
            )
        self.store = store
        self.min_temp = min_temp
        self.max_temp = max_temp
        self._clock = clock

    def transform(self, reading: RawReading) -> Optional[TemperatureRecord]:
        """Return a normalized record, or ``None`` when the reading is rejected."""
        try:
            temperature = float(reading.temperature)
            if not math.isfinite(temperature):
                raise ValueError(f"non-finite temperature {reading.temperature!r}")

            if temperature < self.min_temp or temperature > self.max_temp:
                logger.warning(
                    "Rejected out-of-range temperature reading",
                    extra={
                        "sensor_id": reading.sensor_id,
                        "temperature": temperature,
                        "reason": "out of range",
                    },
                )
                self.store.record_validation(valid=False)
                return None

            record = TemperatureRecord(
                temperature=round(temperature, 2),
                timestamp=self._clock(),
                sensor_id=reading.sensor_id,
                location=reading.location,
                processed=True,
            )
        except Exception:
            logger.exception(
                "Failed to transform reading",
                extra={"sensor_id": getattr(reading, "sensor_id", None), "reason": "malformed"},
            )
            self.store.record_validation(valid=False)
            return None

        self.store.record_validation(valid=True)
        return record
