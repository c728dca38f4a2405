"""
Streaming writer for chunked uploads.

A StreamingWriter is a sequential upload session against one path. Bytes
passed to write() are buffered and committed to the backend in parts;
shutdown() commits the remainder and finalizes the object.

Caveats callers own:
- A writer is not safe for concurrent calls. Use it from one task at a time.
- Two writers on the same path race; the backend decides the outcome.
- A writer abandoned before shutdown() leaves an incomplete upload behind.
  Nothing is rolled back automatically.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..errors import InvalidState
from .base import BackendWriter
from .uri import ObjectPath

__all__ = ["WriterState", "StreamingWriter"]

logger = logging.getLogger(__name__)

# Part size doubles every PARTS_PER_SIZE_STEP committed parts, at most MAX_PART_SIZE_DOUBLINGS times
PARTS_PER_SIZE_STEP = 100
MAX_PART_SIZE_DOUBLINGS = 10


class WriterState(str, Enum):
    """Lifecycle of a StreamingWriter."""
    OPEN = "open"
    WRITING = "writing"
    FLUSHING = "flushing"
    CLOSED = "closed"
    ABORTED = "aborted"


class StreamingWriter:
    """
    Buffered, chunked upload handle.

    States: OPEN -> WRITING -> (FLUSHING)* -> CLOSED. A backend failure
    moves the writer to ABORTED; every later call raises InvalidState
    chained to that failure.

    Invariant: once shutdown() returns, the object size equals
    bytes_written, regardless of how writes were regrouped into parts.
    """

    def __init__(
        self,
        backend: BackendWriter,
        path: ObjectPath,
        *,
        initial_upload_size: int,
        use_constant_size_upload_parts: bool = False,
    ) -> None:
        if initial_upload_size <= 0:
            raise ValueError(f"initial_upload_size must be positive, got {initial_upload_size}")

        self.path = path
        self._backend = backend
        self._initial_upload_size = initial_upload_size
        self._constant_parts = use_constant_size_upload_parts
        self._buffer = bytearray()
        self._state = WriterState.OPEN
        self._bytes_written = 0
        self._bytes_committed = 0
        self._parts_committed = 0
        self._failure: Optional[BaseException] = None

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def bytes_written(self) -> int:
        """Total bytes accepted by write() since creation."""
        return self._bytes_written

    @property
    def bytes_committed(self) -> int:
        """Bytes already handed to the backend."""
        return self._bytes_committed

    @property
    def parts_committed(self) -> int:
        return self._parts_committed

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    @property
    def part_size(self) -> int:
        """Size of the next full part."""
        if self._constant_parts:
            return self._initial_upload_size
        step = min(self._parts_committed // PARTS_PER_SIZE_STEP, MAX_PART_SIZE_DOUBLINGS)
        return self._initial_upload_size * (2 ** step)

    def _check_usable(self, action: str) -> None:
        if self._state is WriterState.CLOSED:
            raise InvalidState(f"Cannot {action}: writer for {self.path} is closed")
        if self._state is WriterState.ABORTED:
            raise InvalidState(
                f"Cannot {action}: writer for {self.path} was aborted by a backend failure"
            ) from self._failure

    async def _commit(self, part: bytes) -> None:
        try:
            await self._backend.write(part)
        except BaseException as e:
            # Cancellation included: the part has already left the buffer
            self._state = WriterState.ABORTED
            self._failure = e
            logger.error(f"Upload to {self.path} aborted after {self._bytes_committed} bytes: {e!r}")
            raise
        self._bytes_committed += len(part)
        self._parts_committed += 1

    async def write(self, data: bytes) -> int:
        """
        Append data to the upload.

        Full parts are committed as soon as they are buffered; callers must
        not assume write() calls map 1:1 onto backend parts.

        Returns:
            Number of bytes accepted (always len(data))

        Raises:
            InvalidState: If the writer is closed or aborted
            BackendError: If committing a part fails (the writer is aborted)
        """
        self._check_usable("write")
        if not data:
            return 0

        self._state = WriterState.WRITING
        self._buffer += data
        self._bytes_written += len(data)

        while len(self._buffer) >= self.part_size:
            size = self.part_size
            part = bytes(self._buffer[:size])
            del self._buffer[:size]
            await self._commit(part)
        return len(data)

    async def flush(self) -> None:
        """
        Commit buffered bytes as an in-progress part without closing the upload.

        Raises:
            InvalidState: If the writer is closed or aborted
            BackendError: If committing fails (the writer is aborted)
        """
        self._check_usable("flush")
        if not self._buffer:
            return

        self._state = WriterState.FLUSHING
        part = bytes(self._buffer)
        self._buffer.clear()
        await self._commit(part)
        self._state = WriterState.WRITING

    async def shutdown(self) -> None:
        """
        Finalize the upload.

        Commits any buffered bytes and closes the backend upload so all
        written bytes become visible as one object. A writer shut down
        without writes produces an empty object.

        Raises:
            InvalidState: If the writer is already closed or aborted
            BackendError: If the final commit or close fails (the writer is aborted)
        """
        self._check_usable("shutdown")
        if self._buffer:
            part = bytes(self._buffer)
            self._buffer.clear()
            await self._commit(part)

        try:
            await self._backend.close()
        except BaseException as e:
            self._state = WriterState.ABORTED
            self._failure = e
            raise

        self._state = WriterState.CLOSED
        logger.debug(f"Finalized {self.path}: {self._bytes_written} bytes in {self._parts_committed} parts")

    async def __aenter__(self) -> "StreamingWriter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        # On error the upload is left unfinished; no rollback
        if exc_type is None and self._state not in (WriterState.CLOSED, WriterState.ABORTED):
            await self.shutdown()

    def __repr__(self) -> str:
        return f"StreamingWriter(path={str(self.path)!r}, state={self._state.value}, bytes_written={self._bytes_written})"
