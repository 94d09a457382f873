"""S3-compatible storage backend.

This module provides the object-storage backend of the copy tool. It works
with AWS S3, MinIO, and other S3-compatible services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, BinaryIO, Callable, TypeVar

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config

from bucketcopy.common.logging import setup_logging
from bucketcopy.common.retry import DEFAULT_ATTEMPTS, with_retry
from bucketcopy.infra.storage.address import Address, resolve_address
from bucketcopy.infra.storage.client import StorageConnectionError, TransferError
from bucketcopy.infra.storage.stream import OffsetIgnoringWriter

if TYPE_CHECKING:
    from bucketcopy.common.config import Settings

T = TypeVar("T")

logger = logging.getLogger("storage")


def sequential_transfer_config() -> TransferConfig:
    """Transfer settings under which chunks are written strictly in order.

    Required by :class:`OffsetIgnoringWriter`. s3transfer's own chunk retry
    re-sends a chunk from its start offset, which the writer would append a
    second time, so failures are left to the backend's retry policy instead.
    """
    return TransferConfig(max_concurrency=1, use_threads=False, num_download_attempts=1)


def _sink_position(sink: BinaryIO) -> int | None:
    seekable = getattr(sink, "seekable", None)
    try:
        if seekable is not None and seekable():
            return sink.tell()
    except OSError:
        return None
    return None


class S3Backend:
    """Storage backend whose client handle is a boto3 S3 client.

    Every network call runs under the shared retry policy. Addresses are
    resolved before the first attempt, so malformed paths never consume the
    retry budget.
    """

    name = "s3"

    def __init__(
        self,
        *,
        settings: "Settings",
        attempts: int = DEFAULT_ATTEMPTS,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            settings: Settings holding region, endpoint and transport options.
            attempts: Attempt budget per network operation.
            sleep: Optional sleep function used between attempts.
        """
        self._settings = settings
        self._attempts = attempts
        self._sleep = sleep

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings.

        Without an explicit endpoint, botocore resolves it from the region.
        """
        config = Config(s3={"addressing_style": settings.addressing_style})
        return boto3.client(
            "s3",
            region_name=settings.AWS_REGION,
            endpoint_url=settings.AWS_S3_ENDPOINT,
            use_ssl=not settings.AWS_S3_NO_SSL,
            config=config,
        )

    def _retry(self, name: str, operation: Callable[[], T]) -> T:
        kwargs: dict[str, Any] = {
            "attempts": self._attempts,
            "backoff_seconds": self._settings.RETRY_BACKOFF_SECONDS,
            "name": name,
        }
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return with_retry(operation, **kwargs)

    def get_client(self, path: str) -> Any:
        """Build a client and probe the container named by ``path``."""
        address = resolve_address(path)

        def connect() -> Any:
            client = self._build_client(self._settings)
            client.list_objects_v2(Bucket=address.container, MaxKeys=0)
            return client

        try:
            client = self._retry("connect", connect)
        except Exception as exc:
            raise StorageConnectionError(
                f"Failed to connect to container {address.container}: {exc}"
            ) from exc

        logger.info(
            "storage_connected backend=%s container=%s region=%s endpoint=%s",
            self.name,
            address.container,
            self._settings.AWS_REGION,
            self._settings.AWS_S3_ENDPOINT or "-",
            extra={
                "extra": {
                    "backend": self.name,
                    "operation": "connect",
                    "container": address.container,
                    "region": self._settings.AWS_REGION,
                    "endpoint": self._settings.AWS_S3_ENDPOINT,
                }
            },
        )
        return client

    def list_files(self, client: Any, path: str) -> list[str]:
        """List keys under the prefix named by ``path``, relative to it."""
        address = resolve_address(path)

        def list_prefix() -> list[str]:
            paginator = client.get_paginator("list_objects_v2")
            files: list[str] = []
            for page in paginator.paginate(Bucket=address.container, Prefix=address.key):
                for item in page.get("Contents", []):
                    files.append(item["Key"].replace(address.key, "", 1))
            return files

        files = self._run_transfer("list", address, list_prefix)
        logger.debug(
            "storage_listed container=%s prefix=%s count=%s",
            address.container,
            address.key,
            len(files),
            extra={"extra": self._log_fields("list", address, count=len(files))},
        )
        return files

    def download(self, client: Any, path: str, sink: BinaryIO) -> None:
        """Download the item at ``path`` into the sequential ``sink``."""
        address = resolve_address(path)
        config = sequential_transfer_config()
        start = _sink_position(sink)

        def fetch() -> None:
            if start is not None:
                # Each attempt restarts the object, so drop a failed attempt's bytes.
                sink.seek(start)
                sink.truncate()
            client.download_fileobj(
                Bucket=address.container,
                Key=address.key,
                Fileobj=OffsetIgnoringWriter(sink),
                Config=config,
            )

        self._run_transfer("download", address, fetch)
        logger.debug(
            "storage_downloaded container=%s key=%s",
            address.container,
            address.key,
            extra={"extra": self._log_fields("download", address)},
        )

    def upload(
        self, client: Any, dest_path: str, source_hint: str, stream: BinaryIO
    ) -> None:
        """Upload ``stream`` to ``dest_path``, named after ``source_hint`` if needed."""
        address = resolve_address(dest_path).with_default_name(source_hint)

        def store() -> None:
            client.upload_fileobj(
                Fileobj=stream,
                Bucket=address.container,
                Key=address.key,
            )

        self._run_transfer("upload", address, store)
        logger.debug(
            "storage_uploaded container=%s key=%s",
            address.container,
            address.key,
            extra={"extra": self._log_fields("upload", address)},
        )

    def _log_fields(self, operation: str, address: Address, **fields: Any) -> dict[str, Any]:
        return {
            "backend": self.name,
            "operation": operation,
            "container": address.container,
            "key": address.key,
            **fields,
        }

    def _run_transfer(self, name: str, address: Address, operation: Callable[[], T]) -> T:
        try:
            return self._retry(name, operation)
        except Exception as exc:
            raise TransferError(name, address.container, address.key, str(exc)) from exc


def build_backend(settings: "Settings | None" = None) -> S3Backend:
    if settings is None:
        from bucketcopy.common.config import get_settings

        settings = get_settings()
    setup_logging(settings)
    return S3Backend(settings=settings)
