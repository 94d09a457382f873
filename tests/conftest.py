from __future__ import annotations

import logging

import pytest

from bucketcopy.common import config
from bucketcopy.common.config import get_settings

SETTINGS_ENV_VARS = (
    "AWS_REGION",
    "AWS_S3_ENDPOINT",
    "AWS_S3_NO_SSL",
    "AWS_S3_FORCE_PATH_STYLE",
    "RETRY_BACKOFF_SECONDS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "ENV_FILE", tmp_path / ".env")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]
    storage_logger = logging.getLogger("storage")
    for handler in storage_logger.handlers[:]:
        storage_logger.removeHandler(handler)
    storage_logger.setLevel(logging.NOTSET)


@pytest.fixture
def sleeps() -> list[float]:
    """Collects backoff delays instead of sleeping."""
    return []
