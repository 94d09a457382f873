from __future__ import annotations

import json
import logging
from logging.config import dictConfig
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bucketcopy.common.config import Settings

STORAGE_LOGGER = "storage"

# Emitted on every storage record so log queries can filter without key checks
STORAGE_FIELDS = ("operation", "attempt", "budget")


def setup_logging(settings: "Settings") -> None:
    """Attach the JSON handler to the storage logger at ``settings.LOG_LEVEL``."""
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "storage_json": {
                    "()": StorageJsonFormatter,
                },
            },
            "handlers": {
                "storage_console": {
                    "class": "logging.StreamHandler",
                    "formatter": "storage_json",
                },
            },
            "loggers": {
                STORAGE_LOGGER: {
                    "handlers": ["storage_console"],
                    "level": settings.LOG_LEVEL,
                }
            },
        }
    )


class StorageJsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.name == STORAGE_LOGGER:
            payload.update(dict.fromkeys(STORAGE_FIELDS))
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            payload.update(record.extra)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)
