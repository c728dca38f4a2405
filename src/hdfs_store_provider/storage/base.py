"""
Storage interfaces for the HDFS store provider.

These protocols define the boundary between the store layer and the
native backend client, enabling clean dependency injection and testing
with fakes. Paths crossing this boundary are canonical absolute strings
("/a/b"), produced from ObjectPath.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..models import ObjectStoreParams
    from .store import ObjectStore
    from .uri import ObjectPath


@dataclass(frozen=True)
class ObjectMeta:
    """
    Metadata for a stored object.

    Invariants:
    - path: canonical absolute path
    - size: exact byte length (>= 0)
    """
    path: str
    size: int
    last_modified: Optional[datetime] = None


__all__ = ["ObjectMeta", "BackendWriter", "BackendHandle", "ObjectStoreProvider"]


@runtime_checkable
class BackendWriter(Protocol):
    """Sequential upload handle returned by BackendHandle.open_writer()."""

    async def write(self, data: bytes) -> None:
        """
        Append data to the upload.

        Raises:
            BackendError: For I/O errors
        """
        ...

    async def close(self) -> None:
        """
        Finalize the upload, making every written byte visible as one object.

        Raises:
            BackendError: For I/O errors
        """
        ...


@runtime_checkable
class BackendHandle(Protocol):
    """Protocol for a live connection to the backend."""

    async def exists(self, path: str) -> bool:
        """Return True if an object exists at path."""
        ...

    async def delete(self, path: str) -> None:
        """
        Delete the object at path.

        Deleting a path that does not exist is a no-op.
        """
        ...

    async def stat(self, path: str) -> ObjectMeta:
        """
        Get metadata for an object without fetching content.

        Raises:
            NotFound: If object does not exist
            BackendError: For other I/O errors
        """
        ...

    async def read(self, path: str, start: int = 0, end: Optional[int] = None) -> bytes:
        """
        Read bytes [start, end) of an object; end=None reads to the end.

        Raises:
            NotFound: If object does not exist
            BackendError: For other I/O errors
        """
        ...

    async def open_writer(self, path: str) -> BackendWriter:
        """
        Start a new upload at path, replacing any existing object on close.

        Raises:
            BackendError: For I/O errors
        """
        ...

    async def close(self) -> None:
        """Release the connection."""
        ...


@runtime_checkable
class ObjectStoreProvider(Protocol):
    """
    Capability set of a store provider.

    Any object implementing new_store() and extract_path() can be
    registered for a scheme in an ObjectStoreRegistry.
    """

    async def new_store(self, base_uri: str, params: "Optional[ObjectStoreParams]" = None) -> "ObjectStore":
        """
        Build a fully configured store for base_uri.

        Raises:
            InvalidInput: If the URI, options or backend configuration are invalid
        """
        ...

    def extract_path(self, uri: str) -> "ObjectPath":
        """
        Convert a URI into the canonical backend path.

        Raises:
            InvalidInput: If the path cannot be parsed
        """
        ...
