"""
HDFS store provider.

The public factory: given a base URI such as hdfs://namenode:9000/warehouse
and ObjectStoreParams, it maps storage options, builds a live operator and
returns a fully configured ObjectStore.

Example:
    >>> registry = ObjectStoreRegistry()
    >>> registry.insert("hdfs", HdfsStoreProvider())
    >>> store = await registry.get_store("hdfs://127.0.0.1:9000/sample-dataset")
    >>> await store.put("part-0.bin", b"hello")
"""
from __future__ import annotations

import inspect
import logging
from functools import partial
from typing import Awaitable, Callable, Optional, Union

from .models import ObjectStoreParams
from .settings import ProviderSettings, create_settings_from_env
from .storage.base import BackendHandle, ObjectStoreProvider
from .storage.operator import build_operator
from .storage.options import BackendOptions, build_backend_options
from .storage.store import ObjectStore
from .storage.uri import ObjectPath, extract_path, uri_scheme

__all__ = ["HdfsStoreProvider", "OperatorFactory"]

logger = logging.getLogger(__name__)

OperatorFactory = Callable[[BackendOptions], Union[BackendHandle, Awaitable[BackendHandle]]]


class HdfsStoreProvider(ObjectStoreProvider):
    """
    ObjectStoreProvider for HDFS via the opendal native HDFS service.

    Stateless apart from its settings: every new_store() call builds an
    independent operator, nothing is cached.
    """

    def __init__(
        self,
        *,
        settings: Optional[ProviderSettings] = None,
        operator_factory: Optional[OperatorFactory] = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            settings: Tuning defaults (ProviderSettings() if not given)
            operator_factory: Builds a BackendHandle from BackendOptions;
                may return an awaitable. Defaults to build_operator() for
                settings.backend_scheme.
        """
        self._settings = settings or ProviderSettings()
        self._operator_factory = operator_factory or partial(build_operator, scheme=self._settings.backend_scheme)

    @classmethod
    def from_env(cls, **kwargs) -> "HdfsStoreProvider":
        """Create a provider with settings loaded from HDFS_STORE_* variables."""
        return cls(settings=create_settings_from_env(), **kwargs)

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    def extract_path(self, uri: str) -> ObjectPath:
        return extract_path(uri)

    async def new_store(self, base_uri: str, params: Optional[ObjectStoreParams] = None) -> ObjectStore:
        """
        Build a store for base_uri.

        Args:
            base_uri: Store URI, e.g. hdfs://namenode:9000/warehouse
            params: Caller parameters (defaults if not given)

        Returns:
            ObjectStore owning a fresh backend handle

        Raises:
            InvalidInput: If the URI path or download_retry_count is malformed,
                or the backend rejects its configuration. No handle is
                left open on failure.
        """
        params = params or ObjectStoreParams()
        settings = self._settings

        base_path = self.extract_path(base_uri)
        backend_options = build_backend_options(
            params.storage_options,
            base_uri,
            default_retry_count=settings.default_download_retry_count,
        )
        # Validate before connecting so a bad option never opens a handle
        download_retry_count = backend_options.download_retry_count

        handle = self._operator_factory(backend_options)
        if inspect.isawaitable(handle):
            handle = await handle

        try:
            store = ObjectStore(
                handle,
                base_path,
                scheme=uri_scheme(base_uri),
                block_size=params.block_size or settings.default_block_size,
                use_constant_size_upload_parts=params.use_constant_size_upload_parts,
                io_parallelism=settings.io_parallelism,
                download_retry_count=download_retry_count,
                storage_options=params.storage_options,
                initial_upload_size=settings.initial_upload_size,
                read_retry_backoff_s=settings.read_retry_backoff_s,
            )
        except Exception:
            await handle.close()
            raise

        logger.info(f"Opened store {backend_options.name_node}{base_path} (retries={download_retry_count})")
        return store
