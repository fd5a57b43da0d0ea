from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_POLLING_INTERVAL_ENV = "ETL_POLLING_INTERVAL_MS"
_MAX_RECORDS_ENV = "MAX_RECORDS"
_SIM_MIN_TEMP_ENV = "SIM_MIN_TEMP"
_SIM_MAX_TEMP_ENV = "SIM_MAX_TEMP"
_VALIDATION_MIN_TEMP_ENV = "VALIDATION_MIN_TEMP"
_VALIDATION_MAX_TEMP_ENV = "VALIDATION_MAX_TEMP"
_SENSOR_ID_ENV = "SENSOR_ID"
_SENSOR_LOCATION_ENV = "SENSOR_LOCATION"
_AUTOSTART_ENV = "PIPELINE_AUTOSTART"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_POLLING_INTERVAL_MS = 5000
DEFAULT_MAX_RECORDS = 100
DEFAULT_SIM_RANGE = (15.0, 30.0)
DEFAULT_VALIDATION_RANGE = (-50.0, 100.0)
DEFAULT_SENSOR_ID = "TEMP_001"
DEFAULT_SENSOR_LOCATION = "Office Building - Floor 1"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    polling_interval_ms: int
    max_records: int
    sim_min_temp: float
    sim_max_temp: float
    validation_min_temp: float
    validation_max_temp: float
    sensor_id: str
    sensor_location: str
    autostart: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return float(candidate)
    except ValueError:
        return default


def _read_range(min_name: str, max_name: str, default: Tuple[float, float]) -> Tuple[float, float]:
    low = _read_float(min_name, default[0])
    high = _read_float(max_name, default[1])
    if low > high:
        return default
    return low, high


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    sim_min, sim_max = _read_range(_SIM_MIN_TEMP_ENV, _SIM_MAX_TEMP_ENV, DEFAULT_SIM_RANGE)
    valid_min, valid_max = _read_range(
        _VALIDATION_MIN_TEMP_ENV, _VALIDATION_MAX_TEMP_ENV, DEFAULT_VALIDATION_RANGE
    )
    return Settings(
        polling_interval_ms=_read_positive_int(_POLLING_INTERVAL_ENV, DEFAULT_POLLING_INTERVAL_MS),
        max_records=_read_positive_int(_MAX_RECORDS_ENV, DEFAULT_MAX_RECORDS),
        sim_min_temp=sim_min,
        sim_max_temp=sim_max,
        validation_min_temp=valid_min,
        validation_max_temp=valid_max,
        sensor_id=_read_str_env(_SENSOR_ID_ENV, DEFAULT_SENSOR_ID),
        sensor_location=_read_str_env(_SENSOR_LOCATION_ENV, DEFAULT_SENSOR_LOCATION),
        autostart=_read_bool(_AUTOSTART_ENV, True),
        log_level=_read_log_level("INFO"),
    )
