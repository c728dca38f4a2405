"""
Configured object store.

An ObjectStore binds one backend handle to a base path and the tuning
knobs a provider resolved for it. It is shared by every reader and
writer opened against it and holds no mutable state besides the handle.
"""
from __future__ import annotations

import logging
from typing import AsyncIterator, Awaitable, Callable, Dict, Mapping, Optional, TypeVar

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from ..errors import BackendError, InvalidInput, InvalidState, NotFound
from ..settings import DEFAULT_INITIAL_UPLOAD_SIZE
from .base import BackendHandle, ObjectMeta
from .uri import ObjectPath, PathLike
from .writer import StreamingWriter

__all__ = ["ObjectStore"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_transient(e: BaseException) -> bool:
    """Backend failures other than a missing object are worth retrying."""
    return isinstance(e, BackendError) and not isinstance(e, NotFound)


class ObjectStore:
    """
    Store bound to one backend connection and base path.

    Only reads (get, get_range, get_stream) are retried, up to
    download_retry_count extra attempts with exponential backoff. Writes,
    deletes and existence checks surface the first failure.

    Paths are canonical absolute paths inside the backend namespace. Plain
    strings are parsed with ObjectPath.parse, so "data.bin" means "/data.bin".
    """

    def __init__(
        self,
        handle: BackendHandle,
        base_path: ObjectPath,
        *,
        scheme: str,
        block_size: int,
        use_constant_size_upload_parts: bool,
        io_parallelism: int,
        download_retry_count: int,
        storage_options: Optional[Mapping[str, str]] = None,
        initial_upload_size: int = DEFAULT_INITIAL_UPLOAD_SIZE,
        read_retry_backoff_s: float = 0.1,
    ) -> None:
        self.handle: Optional[BackendHandle] = handle
        self.base_path = base_path
        self.scheme = scheme
        self.block_size = block_size
        self.use_constant_size_upload_parts = use_constant_size_upload_parts
        self.io_parallelism = io_parallelism
        self.download_retry_count = download_retry_count
        self.storage_options: Optional[Dict[str, str]] = dict(storage_options) if storage_options is not None else None
        self.initial_upload_size = initial_upload_size
        self._read_retry_backoff_s = read_retry_backoff_s

    def _live_handle(self) -> BackendHandle:
        if self.handle is None:
            raise InvalidState(f"Store for {self.scheme}://{self.base_path} is closed")
        return self.handle

    async def _with_read_retry(self, action: str, path: ObjectPath, fn: Callable[[], Awaitable[T]]) -> T:
        attempts = self.download_retry_count + 1

        def log_retry(retry_state) -> None:
            logger.warning(
                f"{action} {path} failed (attempt {retry_state.attempt_number}/{attempts}), retrying: "
                f"{retry_state.outcome.exception()}"
            )

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self._read_retry_backoff_s, max=10),
            retry=retry_if_exception(_is_transient),
            before_sleep=log_retry,
            reraise=True,
        ):
            with attempt:
                return await fn()
        raise AssertionError("unreachable: AsyncRetrying re-raises the last failure")

    async def exists(self, path: PathLike) -> bool:
        p = ObjectPath.coerce(path)
        return await self._live_handle().exists(str(p))

    async def delete(self, path: PathLike) -> None:
        """Delete an object. Deleting a nonexistent path is a no-op."""
        p = ObjectPath.coerce(path)
        logger.debug(f"Deleting {p}")
        await self._live_handle().delete(str(p))

    async def head(self, path: PathLike) -> ObjectMeta:
        """
        Get object metadata.

        Raises:
            NotFound: If the object does not exist
        """
        p = ObjectPath.coerce(path)
        return await self._live_handle().stat(str(p))

    async def size(self, path: PathLike) -> int:
        return (await self.head(path)).size

    async def get(self, path: PathLike) -> bytes:
        """
        Read a whole object.

        Raises:
            NotFound: If the object does not exist (not retried)
            BackendError: After download_retry_count retries are exhausted
        """
        p = ObjectPath.coerce(path)
        handle = self._live_handle()
        return await self._with_read_retry("get", p, lambda: handle.read(str(p)))

    async def get_range(self, path: PathLike, start: int, end: int) -> bytes:
        """Read bytes [start, end) of an object, with read retries."""
        if start < 0 or end < start:
            raise InvalidInput(f"Invalid byte range [{start}, {end})", value=f"{start}-{end}")

        p = ObjectPath.coerce(path)
        handle = self._live_handle()
        if start == end:
            return b""
        return await self._with_read_retry("get_range", p, lambda: handle.read(str(p), start, end))

    async def get_stream(self, path: PathLike, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
        """
        Stream an object as chunks of chunk_size (default: block_size) bytes.

        Each chunk read is retried independently.
        """
        chunk_size = chunk_size or self.block_size
        if chunk_size <= 0:
            raise InvalidInput(f"chunk_size must be positive, got {chunk_size}", value=str(chunk_size))

        p = ObjectPath.coerce(path)
        total = await self.size(p)
        offset = 0
        while offset < total:
            end = min(offset + chunk_size, total)
            yield await self.get_range(p, offset, end)
            offset = end

    async def create(self, path: PathLike) -> StreamingWriter:
        """
        Open a streaming writer at path.

        The backend upload starts immediately, so a writer shut down without
        writes still produces an empty object.
        """
        p = ObjectPath.coerce(path)
        backend_writer = await self._live_handle().open_writer(str(p))
        logger.debug(f"Opened writer for {p} (part size {self.initial_upload_size})")
        return StreamingWriter(
            backend_writer,
            p,
            initial_upload_size=self.initial_upload_size,
            use_constant_size_upload_parts=self.use_constant_size_upload_parts,
        )

    async def put(self, path: PathLike, data: bytes) -> int:
        """Write data as a complete object and return its size."""
        writer = await self.create(path)
        await writer.write(data)
        await writer.shutdown()
        return writer.bytes_written

    async def close(self) -> None:
        """Release the backend handle. Later operations raise InvalidState."""
        if self.handle is None:
            return
        handle, self.handle = self.handle, None
        await handle.close()

    async def __aenter__(self) -> "ObjectStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"ObjectStore(scheme={self.scheme!r}, base_path={str(self.base_path)!r}, "
            f"block_size={self.block_size}, download_retry_count={self.download_retry_count})"
        )
