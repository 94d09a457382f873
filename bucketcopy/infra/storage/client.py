"""Storage backend protocol and error types.

This module defines the contract every storage backend of the copy tool
implements: obtain a client handle, list a prefix, download one item into a
sequential sink and upload one item from a readable stream.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol, TypeVar, runtime_checkable

ClientT = TypeVar("ClientT")


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class AddressValidationError(StorageError, ValueError):
    """Raised when a path cannot be resolved into a container and key."""


class StorageConnectionError(StorageError):
    """Raised when a client cannot be built or the service is unreachable."""


class TransferError(StorageError):
    """Raised when a list, download or upload fails after all attempts."""

    def __init__(self, operation: str, container: str, key: str, message: str):
        self.operation = operation
        self.container = container
        self.key = key
        super().__init__(
            f"{operation} failed for container={container} key={key or '<root>'}: {message}"
        )


@runtime_checkable
class StorageBackend(Protocol[ClientT]):
    """Protocol implemented identically by every storage backend.

    Each backend owns the concrete type of its client handle. Handles are
    created once by :meth:`get_client` and reused across calls.
    """

    def get_client(self, path: str) -> ClientT:
        """Build a client and verify the container named by ``path`` is reachable.

        Args:
            path: Address whose first segment names the container to probe.

        Returns:
            A verified client handle.

        Raises:
            AddressValidationError: If ``path`` has no container segment.
            StorageConnectionError: If the client cannot be built or probed.
        """
        ...

    def list_files(self, client: ClientT, path: str) -> list[str]:
        """List item keys under ``path``, relative to the queried prefix.

        Args:
            client: Handle returned by :meth:`get_client`.
            path: Address naming a container and an optional key prefix.

        Returns:
            Keys with the prefix stripped, in the order the service returns them.

        Raises:
            AddressValidationError: If ``path`` has no container segment.
            TransferError: If listing fails on every attempt.
        """
        ...

    def download(self, client: ClientT, path: str, sink: BinaryIO) -> None:
        """Write the item at ``path`` into ``sink``.

        A retried download starts over and writes into ``sink`` again.

        Raises:
            AddressValidationError: If ``path`` has no container segment.
            TransferError: If the transfer fails on every attempt.
        """
        ...

    def upload(
        self, client: ClientT, dest_path: str, source_hint: str, stream: BinaryIO
    ) -> None:
        """Store the contents of ``stream`` at ``dest_path``.

        When ``dest_path`` names only a container, the item is stored under the
        base name of ``source_hint``. A retried upload reads ``stream`` from its
        current position.

        Raises:
            AddressValidationError: If ``dest_path`` has no container segment.
            TransferError: If the transfer fails on every attempt.
        """
        ...
