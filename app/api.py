"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    LatestResponse,
    RecordsResponse,
    StatsOut,
    StatsResponse,
    TemperatureRecordOut,
)
from services.pipeline import IngestionPipeline, build_default_pipeline
from services.validator import now_ms

router = APIRouter()


def get_pipeline() -> IngestionPipeline:
    return build_default_pipeline()


@router.get(
    "/temperature",
    response_model=Union[StatsResponse, LatestResponse, RecordsResponse],
    summary="Fetch retained temperature records, the latest record, or pipeline statistics.",
)
async def get_temperature(
    limit: Optional[int] = Query(
        None, description="Return only the most recent N records; non-positive values return all."
    ),
    latest: bool = Query(False, description="Return only the latest record."),
    stats: bool = Query(False, description="Return only the pipeline statistics."),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> Union[StatsResponse, LatestResponse, RecordsResponse]:
    if stats:
        return StatsResponse(stats=StatsOut.from_stats(pipeline.get_stats()))

    if latest:
        record = pipeline.get_latest_record()
        return LatestResponse(
            data=TemperatureRecordOut.from_record(record) if record is not None else None
        )

    records = pipeline.get_all_records(limit=limit)
    return RecordsResponse(
        data=[TemperatureRecordOut.from_record(record) for record in records],
        count=len(records),
        timestamp=now_ms(),
    )


@router.get(
    "/temperature/range",
    response_model=RecordsResponse,
    summary="Fetch records whose timestamp falls within an inclusive range.",
)
async def get_temperature_range(
    start: int = Query(..., description="Range start in milliseconds since the epoch."),
    end: int = Query(..., description="Range end in milliseconds since the epoch."),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> RecordsResponse:
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Range start {start} is after range end {end}.",
        )
    records = pipeline.get_records_in_range(start, end)
    return RecordsResponse(
        data=[TemperatureRecordOut.from_record(record) for record in records],
        count=len(records),
        timestamp=now_ms(),
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> dict[str, str]:
    return {"status": "ok", "pipeline": pipeline.state.value}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
