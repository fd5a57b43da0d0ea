from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_timestamp(value: Any) -> str:
    if not isinstance(value, int) or value <= 0:
        return "never"
    moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def render_record_line(record: Dict[str, Any]) -> None:
    typer.echo(
        f"  - {format_timestamp(record.get('timestamp'))} "
        f"{record.get('temperature')}°C "
        f"[{record.get('sensor_id')} @ {record.get('location')}]"
    )


def render_records(payload: Dict[str, Any]) -> None:
    records = payload.get("data") or []
    echo_heading(f"Records ({payload.get('count', len(records))})")
    if not records:
        typer.echo("No records retained.")
        return
    for record in records:
        render_record_line(record)


def render_latest(payload: Dict[str, Any]) -> None:
    echo_heading("Latest Record")
    record = payload.get("data")
    if not record:
        typer.echo("No records retained.")
        return
    echo_key_values(
        [
            ("temperature", record.get("temperature")),
            ("timestamp", format_timestamp(record.get("timestamp"))),
            ("sensor_id", record.get("sensor_id")),
            ("location", record.get("location")),
        ]
    )


def render_stats(payload: Dict[str, Any]) -> None:
    stats = payload.get("stats") or {}
    echo_heading("Pipeline Statistics")
    echo_key_values(
        [
            ("total_records", stats.get("total_records")),
            ("valid_records", stats.get("valid_records")),
            ("invalid_records", stats.get("invalid_records")),
            ("last_processed", format_timestamp(stats.get("last_processed"))),
        ]
    )
