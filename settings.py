from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_SERVICE_NAME_ENV = "FARM_REGISTRY_SERVICE_NAME"
_API_PREFIX_ENV = "FARM_REGISTRY_API_PREFIX"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    service_name: str
    api_prefix: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_api_prefix(default: str) -> str:
    value = os.getenv(_API_PREFIX_ENV)
    if value is None:
        return default
    candidate = value.strip().strip("/")
    if not candidate:
        return default
    return f"/{candidate}"


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
    return Settings(
        service_name=_read_str_env(_SERVICE_NAME_ENV, "Farm Registry"),
        api_prefix=_read_api_prefix("/api"),
        log_level=_read_log_level("INFO"),
    )
