from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - NOTES_DATA_FILE: path to the JSON data file. Default './data/notes.json'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - APP_ENV: deployment environment name reported by the health check (default: development)
    - LOG_LEVEL: logging level name (default: INFO)
    """

    data_file: str
    cors_allow_origins: List[str]
    environment: str
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return "INFO"
    return level


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        data_file=_get_env("NOTES_DATA_FILE", "./data/notes.json").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        environment=_get_env("APP_ENV", "development").strip(),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
