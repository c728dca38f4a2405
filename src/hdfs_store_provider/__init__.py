"""
HDFS object store provider.

Registers under a URI scheme in an ObjectStoreRegistry and turns
hdfs://namenode:port/path URIs into configured ObjectStores backed by the
opendal native HDFS client.
"""
from .errors import BackendError, InvalidInput, InvalidState, NotFound, StoreError
from .models import ObjectStoreParams
from .provider import HdfsStoreProvider
from .registry import ObjectStoreRegistry
from .settings import ProviderSettings, create_settings_from_env
from .storage.store import ObjectStore
from .storage.uri import ObjectPath, extract_path
from .storage.writer import StreamingWriter, WriterState

__all__ = [
    "HdfsStoreProvider",
    "ObjectStoreRegistry",
    "ObjectStoreParams",
    "ObjectStore",
    "ObjectPath",
    "StreamingWriter",
    "WriterState",
    "ProviderSettings",
    "create_settings_from_env",
    "extract_path",
    "StoreError",
    "InvalidInput",
    "InvalidState",
    "BackendError",
    "NotFound",
]
