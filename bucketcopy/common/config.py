from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

DEFAULT_REGION = "eu-central-1"


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if not value:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class Settings:
    AWS_REGION: str = DEFAULT_REGION
    AWS_S3_ENDPOINT: str | None = None
    AWS_S3_NO_SSL: bool = False
    AWS_S3_FORCE_PATH_STYLE: bool = False
    RETRY_BACKOFF_SECONDS: float = 1.0
    LOG_LEVEL: str = "INFO"

    def __post_init__(self) -> None:
        if self.RETRY_BACKOFF_SECONDS < 0:
            raise ValueError("RETRY_BACKOFF_SECONDS must not be negative.")

    @property
    def addressing_style(self) -> str:
        return "path" if self.AWS_S3_FORCE_PATH_STYLE else "auto"

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            AWS_REGION=_as_optional(os.environ.get("AWS_REGION")) or cls.AWS_REGION,
            AWS_S3_ENDPOINT=_as_optional(os.environ.get("AWS_S3_ENDPOINT")),
            AWS_S3_NO_SSL=_as_bool(os.environ.get("AWS_S3_NO_SSL"), cls.AWS_S3_NO_SSL),
            AWS_S3_FORCE_PATH_STYLE=_as_bool(
                os.environ.get("AWS_S3_FORCE_PATH_STYLE"), cls.AWS_S3_FORCE_PATH_STYLE
            ),
            RETRY_BACKOFF_SECONDS=float(
                os.environ.get("RETRY_BACKOFF_SECONDS") or cls.RETRY_BACKOFF_SECONDS
            ),
            LOG_LEVEL=(os.environ.get("LOG_LEVEL") or cls.LOG_LEVEL).upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
