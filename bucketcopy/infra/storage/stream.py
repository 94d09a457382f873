"""Random-access view over a sequential sink.

Managed S3 downloads position the destination before every chunk they
write. :class:`OffsetIgnoringWriter` accepts those positioning calls and
drops them, appending each chunk to the wrapped sink in delivery order.

Invariant: this is only correct while chunks arrive in ascending,
contiguous, non-overlapping order, i.e. while the transfer runs with a
single worker (see ``sequential_transfer_config`` in the S3 backend).
Allowing concurrent chunk delivery requires replacing this class with one
that buffers and reorders by offset.
"""

from __future__ import annotations

import io
from typing import BinaryIO


class OffsetIgnoringWriter:
    def __init__(self, sink: BinaryIO):
        self._sink = sink
        self._written = 0

    @property
    def bytes_written(self) -> int:
        return self._written

    def writable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        # Position is dictated by delivery order, not by the caller.
        return self._written

    def tell(self) -> int:
        return self._written

    def write(self, data) -> int:
        written = self._sink.write(data)
        if written is None:
            written = len(data)
        self._written += written
        return written

    def write_at(self, data: bytes, offset: int) -> int:
        return self.write(data)

    def flush(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()
