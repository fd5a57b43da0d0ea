"""Reading sources that feed the ingestion pipeline one observation at a time."""

from __future__ import annotations

import logging
import random
from itertools import cycle
from typing import Callable, Iterable, Iterator, Optional, Union

from models.records import RawReading
from settings import DEFAULT_SENSOR_ID, DEFAULT_SENSOR_LOCATION

logger = logging.getLogger(__name__)

FALLBACK_TEMPERATURE = 20.0


class ReadingSource:
    """Base class for sources. Subclasses implement ``_read``.

    ``produce`` never raises: any failure while reading is replaced by a
    fallback reading at room temperature so the pipeline keeps ticking.
    """

    def __init__(
        self,
        sensor_id: str = DEFAULT_SENSOR_ID,
        location: str = DEFAULT_SENSOR_LOCATION,
    ) -> None:
        self.sensor_id = sensor_id
        self.location = location

    def produce(self) -> RawReading:
        try:
            return self._read()
        except Exception as exc:
            logger.warning(
                "Reading source failed, using fallback reading",
                extra={"sensor_id": self.sensor_id, "reason": str(exc) or type(exc).__name__},
            )
            return self.fallback_reading()

    def fallback_reading(self) -> RawReading:
        return RawReading(
            temperature=FALLBACK_TEMPERATURE,
            sensor_id=self.sensor_id,
            location=self.location,
        )

    def _read(self) -> RawReading:
        raise NotImplementedError


class SimulatedSource(ReadingSource):
    """Uniformly distributed temperatures within ``[min_temp, max_temp]``."""

    def __init__(
        self,
        min_temp: float,
        max_temp: float,
        sensor_id: str = DEFAULT_SENSOR_ID,
        location: str = DEFAULT_SENSOR_LOCATION,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(sensor_id=sensor_id, location=location)
        if min_temp > max_temp:
            raise ValueError(
                f"Simulated range is inverted: min_temp={min_temp} > max_temp={max_temp}."
            )
        self.min_temp = min_temp
        self.max_temp = max_temp
        self._rng = rng or random.Random()

    def _read(self) -> RawReading:
        temperature = round(self._rng.uniform(self.min_temp, self.max_temp), 2)
        # rounding can nudge a value just past either end of the interval
        temperature = min(max(temperature, self.min_temp), self.max_temp)
        return RawReading(temperature=temperature, sensor_id=self.sensor_id, location=self.location)


FixtureItem = Union[float, int, RawReading]


class FixtureSource(ReadingSource):
    """Replays a fixed sequence of temperatures or raw readings in order.

    A non-repeating fixture falls back like any failing source once exhausted.
    """

    def __init__(
        self,
        items: Iterable[FixtureItem],
        repeat: bool = False,
        sensor_id: str = DEFAULT_SENSOR_ID,
        location: str = DEFAULT_SENSOR_LOCATION,
    ) -> None:
        super().__init__(sensor_id=sensor_id, location=location)
        self._items = list(items)
        self._iterator: Iterator[FixtureItem] = cycle(self._items) if repeat else iter(self._items)
        self.produced = 0

    def _read(self) -> RawReading:
        self.produced += 1
        try:
            item = next(self._iterator)
        except StopIteration:
            raise LookupError("fixture exhausted") from None
        if isinstance(item, RawReading):
            return item
        return RawReading(temperature=item, sensor_id=self.sensor_id, location=self.location)


class DeviceSource(ReadingSource):
    """Adapts a device driver's read function into a reading source."""

    def __init__(
        self,
        read_temperature: Callable[[], float],
        read_humidity: Optional[Callable[[], float]] = None,
        sensor_id: str = DEFAULT_SENSOR_ID,
        location: str = DEFAULT_SENSOR_LOCATION,
    ) -> None:
        super().__init__(sensor_id=sensor_id, location=location)
        self._read_temperature = read_temperature
        self._read_humidity = read_humidity

    def _read(self) -> RawReading:
        temperature = float(self._read_temperature())
        humidity = float(self._read_humidity()) if self._read_humidity else None
        return RawReading(
            temperature=temperature,
            sensor_id=self.sensor_id,
            location=self.location,
            humidity=humidity,
        )
