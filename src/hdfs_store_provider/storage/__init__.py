# Storage layer: path normalization, option mapping, operator, store and writer

from .base import BackendHandle, BackendWriter, ObjectMeta, ObjectStoreProvider
from .options import BackendOptions, StorageOptions, build_backend_options
from .store import ObjectStore
from .uri import ObjectPath, extract_path
from .writer import StreamingWriter, WriterState

__all__ = [
    "BackendHandle",
    "BackendWriter",
    "ObjectMeta",
    "ObjectStoreProvider",
    "BackendOptions",
    "StorageOptions",
    "build_backend_options",
    "ObjectStore",
    "ObjectPath",
    "extract_path",
    "StreamingWriter",
    "WriterState",
]
