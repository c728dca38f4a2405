"""
Operator factory and backend handle for HDFS.

Builds a live opendal operator from backend options and adapts it to the
BackendHandle protocol. This module is the only place that touches the
native client: opendal exceptions are translated here into the store
error hierarchy and never leak past it.
"""
from __future__ import annotations

import logging
from typing import Optional

import opendal
from opendal import exceptions as opendal_exceptions

from ..errors import BackendError, InvalidInput, InvalidState, NotFound
from .base import BackendHandle, BackendWriter, ObjectMeta
from .options import BackendOptions

__all__ = ["Operator", "build_operator"]

logger = logging.getLogger(__name__)

OpendalNotFound = opendal_exceptions.NotFound

# Every opendal error class. They do not share a common opendal base in all
# releases, so a handler naming only opendal.exceptions.Error misses them.
OPENDAL_ERRORS = tuple(
    value
    for value in vars(opendal_exceptions).values()
    if isinstance(value, type) and issubclass(value, Exception)
)


def _translate(e: Exception, action: str, path: str) -> BackendError:
    """Map an opendal exception onto the store error hierarchy."""
    if isinstance(e, OpendalNotFound):
        return NotFound(f"Object not found: {path}", path=path)
    return BackendError(f"HDFS {action} failed for {path}: {e}", path=path)


def _key(path: str) -> str:
    # opendal addresses objects relative to the operator root
    return path.lstrip("/")


class _OpendalWriter(BackendWriter):
    """BackendWriter over an opendal AsyncFile opened for writing."""

    def __init__(self, file, path: str) -> None:
        self._file = file
        self._path = path

    async def write(self, data: bytes) -> None:
        try:
            await self._file.write(data)
        except OPENDAL_ERRORS as e:
            raise _translate(e, "write", self._path) from e

    async def close(self) -> None:
        try:
            await self._file.close()
        except OPENDAL_ERRORS as e:
            raise _translate(e, "close", self._path) from e


class Operator(BackendHandle):
    """
    BackendHandle adapter over an opendal AsyncOperator.

    Safe to share across concurrent tasks working on different paths; the
    native operator carries its own connection pool. No retries happen at
    this layer.
    """

    def __init__(self, native: "opendal.AsyncOperator", *, scheme: str, name_node: Optional[str] = None) -> None:
        self._native = native
        self.scheme = scheme
        self.name_node = name_node

    @property
    def native(self) -> "opendal.AsyncOperator":
        if self._native is None:
            raise InvalidState(f"Operator for {self.name_node} is closed")
        return self._native

    async def exists(self, path: str) -> bool:
        try:
            await self.native.stat(_key(path))
        except OpendalNotFound:
            return False
        except OPENDAL_ERRORS as e:
            raise _translate(e, "stat", path) from e
        return True

    async def delete(self, path: str) -> None:
        try:
            await self.native.delete(_key(path))
        except OpendalNotFound:
            # Deleting a missing object is a no-op
            pass
        except OPENDAL_ERRORS as e:
            raise _translate(e, "delete", path) from e

    async def stat(self, path: str) -> ObjectMeta:
        try:
            meta = await self.native.stat(_key(path))
        except OPENDAL_ERRORS as e:
            raise _translate(e, "stat", path) from e
        return ObjectMeta(
            path=path,
            size=int(meta.content_length),
            last_modified=getattr(meta, "last_modified", None),
        )

    async def read(self, path: str, start: int = 0, end: Optional[int] = None) -> bytes:
        try:
            if start == 0 and end is None:
                return bytes(await self.native.read(_key(path)))

            file = await self.native.open(_key(path), "rb")
            try:
                if start:
                    await file.seek(start)
                data = await file.read() if end is None else await file.read(end - start)
            finally:
                await file.close()
            return bytes(data)
        except OPENDAL_ERRORS as e:
            raise _translate(e, "read", path) from e

    async def open_writer(self, path: str) -> BackendWriter:
        try:
            file = await self.native.open(_key(path), "wb")
        except OPENDAL_ERRORS as e:
            raise _translate(e, "create", path) from e
        return _OpendalWriter(file, path)

    async def close(self) -> None:
        # opendal releases connections when the operator is dropped
        self._native = None


def build_operator(options: BackendOptions, *, scheme: str = "hdfs_native") -> Operator:
    """
    Construct a live backend operator from mapped backend options.

    Uses exactly options.config as the operator configuration. Construction
    may perform network I/O (name node handshake) and is never retried.

    Args:
        options: Output of build_backend_options()
        scheme: opendal service name

    Returns:
        Operator wrapping the native opendal operator

    Raises:
        InvalidInput: If the download retry option is malformed or the
            backend rejects its configuration; the native error description
            is kept verbatim
    """
    # Malformed retry counts surface here, before any connection attempt
    retry_count = options.download_retry_count

    logger.debug(
        f"Building {scheme} operator for {options.name_node} with keys={sorted(options.config)}, "
        f"download_retry_count={retry_count}"
    )
    try:
        native = opendal.AsyncOperator(scheme, **dict(options.config))
    except OPENDAL_ERRORS + (TypeError, ValueError) as e:
        logger.error(f"Failed to create HDFS native operator for {options.name_node}: {e}")
        raise InvalidInput(
            f"Failed to create HDFS native operator: {e}",
            value=options.name_node,
            cause=str(e),
        ) from e

    return Operator(native, scheme=scheme, name_node=options.name_node)
