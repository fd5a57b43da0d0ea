"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class RawReading:
    """A single observation as produced by a reading source."""

    temperature: float
    sensor_id: str
    location: str
    humidity: Optional[float] = None


@dataclass(frozen=True, slots=True)
class TemperatureRecord:
    """A validated, normalized reading retained by the history store."""

    temperature: float
    timestamp: int
    sensor_id: str
    location: str
    processed: bool = True


@dataclass(slots=True)
class PipelineStats:
    """Running quality counters for the ingestion pipeline."""

    total_records: int = 0
    valid_records: int = 0
    invalid_records: int = 0
    last_processed: int = 0
