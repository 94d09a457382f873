"""Decomposition of ``<container>[/<key-segment>]*`` paths."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from bucketcopy.infra.storage.client import AddressValidationError


@dataclass(frozen=True, slots=True)
class Address:
    """A container and the key (or key prefix) inside it."""

    container: str
    key: str

    @property
    def is_container_root(self) -> bool:
        return not self.key

    def with_default_name(self, source_hint: str) -> "Address":
        """Name the item after ``source_hint`` when no key was given."""
        if not self.is_container_root:
            return self
        name = posixpath.basename(source_hint)
        if not name:
            raise AddressValidationError(
                f"cannot name an item in {self.container!r} after {source_hint!r}"
            )
        return Address(self.container, name)


def resolve_address(path: str) -> Address:
    segments = path.split("/") if path else []
    if not segments or not segments[0]:
        raise AddressValidationError(f"illegal path: {path!r}")
    return Address(container=segments[0], key="/".join(segments[1:]))
