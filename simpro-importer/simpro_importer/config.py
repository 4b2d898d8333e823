from __future__ import annotations

import os
from dataclasses import dataclass


def _csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [s.strip() for s in (raw or "").split(",") if s.strip()]


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    rows_per_second: int = _int_env("SIMPRO_ROWS_PER_SECOND", 200)
    header_scan_lines: int = _int_env("SIMPRO_HEADER_SCAN_LINES", 10)
    max_upload_mb: int = _int_env("SIMPRO_MAX_UPLOAD_MB", 50)
    cors_origins: list[str] = None  # type: ignore[assignment]
    log_level: str = (os.getenv("SIMPRO_LOG_LEVEL") or "INFO").strip().upper()

    def __post_init__(self) -> None:
        object.__setattr__(self, "cors_origins", _csv_env("SIMPRO_API_CORS_ORIGINS", "*"))
        if self.rows_per_second <= 0:
            object.__setattr__(self, "rows_per_second", 200)


settings = Settings()
