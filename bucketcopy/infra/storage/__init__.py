"""Object storage backend.

This package provides the protocol shared by all storage backends of the
copy tool and its S3-compatible implementation.
"""

from .address import Address, resolve_address
from .client import (
    AddressValidationError,
    StorageBackend,
    StorageConnectionError,
    StorageError,
    TransferError,
)
from .s3_client import S3Backend, build_backend
from .stream import OffsetIgnoringWriter

__all__ = [
    "Address",
    "AddressValidationError",
    "OffsetIgnoringWriter",
    "S3Backend",
    "StorageBackend",
    "StorageConnectionError",
    "StorageError",
    "TransferError",
    "build_backend",
    "resolve_address",
]
