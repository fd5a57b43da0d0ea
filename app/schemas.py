"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import PipelineStats, TemperatureRecord


class TemperatureRecordOut(BaseModel):
    """A stored temperature record as exposed over HTTP."""

    model_config = ConfigDict(from_attributes=True)

    temperature: float
    timestamp: int = Field(..., description="Milliseconds since the epoch.")
    sensor_id: str
    location: str
    processed: bool = True

    @classmethod
    def from_record(cls, record: TemperatureRecord) -> "TemperatureRecordOut":
        return cls.model_validate(record)


class StatsOut(BaseModel):
    """Pipeline quality counters."""

    model_config = ConfigDict(from_attributes=True)

    total_records: int = Field(..., ge=0)
    valid_records: int = Field(..., ge=0)
    invalid_records: int = Field(..., ge=0)
    last_processed: int = Field(
        ..., ge=0, description="Timestamp of the most recent load, 0 when nothing was loaded."
    )

    @classmethod
    def from_stats(cls, stats: PipelineStats) -> "StatsOut":
        return cls.model_validate(stats)


class RecordsResponse(BaseModel):
    success: bool = True
    data: List[TemperatureRecordOut] = Field(default_factory=list)
    count: int = Field(..., ge=0)
    timestamp: int


class LatestResponse(BaseModel):
    success: bool = True
    data: Optional[TemperatureRecordOut] = None


class StatsResponse(BaseModel):
    success: bool = True
    stats: StatsOut
