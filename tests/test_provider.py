"""
Tests for HdfsStoreProvider.

Verifies option mapping, store wiring and failure behavior of new_store()
with an injected operator factory.
"""
from __future__ import annotations

from unittest.mock import patch

import pytest

from hdfs_store_provider.errors import InvalidInput
from hdfs_store_provider.models import ObjectStoreParams
from hdfs_store_provider.provider import HdfsStoreProvider
from hdfs_store_provider.settings import DEFAULT_BLOCK_SIZE, DEFAULT_IO_PARALLELISM, ProviderSettings
from hdfs_store_provider.storage.base import ObjectStoreProvider
from hdfs_store_provider.storage.options import NAME_NODE_KEY
from hdfs_store_provider.storage.store import ObjectStore
from hdfs_store_provider.storage.uri import ObjectPath
from tests.storage.fakes.fake_backend import FakeBackend


class TestNewStore:
    """Test new_store wiring."""

    @pytest.mark.asyncio
    async def test_store_configuration(self, provider, backend, built_options):
        store = await provider.new_store("hdfs://127.0.0.1:9000/sample-dataset")

        assert isinstance(store, ObjectStore)
        assert store.handle is backend
        assert store.base_path == ObjectPath(("sample-dataset",))
        assert store.scheme == "hdfs"
        assert store.block_size == DEFAULT_BLOCK_SIZE
        assert store.io_parallelism == DEFAULT_IO_PARALLELISM
        assert store.download_retry_count == 3
        assert store.use_constant_size_upload_parts is False
        assert store.storage_options is None

        assert len(built_options) == 1
        assert built_options[0].config[NAME_NODE_KEY] == "hdfs://127.0.0.1:9000"

    @pytest.mark.asyncio
    async def test_params_applied(self, provider):
        params = ObjectStoreParams(
            block_size=1024,
            storage_options={"download_retry_count": "5", "root": "/data"},
            use_constant_size_upload_parts=True,
        )
        store = await provider.new_store("hdfs://nn:9000/a", params)

        assert store.block_size == 1024
        assert store.download_retry_count == 5
        assert store.use_constant_size_upload_parts is True
        # Caller options are kept for introspection
        assert store.storage_options == {"download_retry_count": "5", "root": "/data"}

    @pytest.mark.asyncio
    async def test_stale_name_node_overwritten(self, provider, built_options):
        params = ObjectStoreParams(storage_options={NAME_NODE_KEY: "hdfs://stale:8020"})
        await provider.new_store("hdfs://fresh:9000/a", params)
        assert built_options[0].config[NAME_NODE_KEY] == "hdfs://fresh:9000"

    @pytest.mark.asyncio
    async def test_non_numeric_retry_count_fails(self, provider, built_options):
        """Test that a malformed retry count fails before any handle is built."""
        params = ObjectStoreParams(storage_options={"download_retry_count": "abc"})

        with pytest.raises(InvalidInput, match="download_retry_count"):
            await provider.new_store("hdfs://nn:9000/a", params)
        assert built_options == []

    @pytest.mark.asyncio
    async def test_negative_retry_count_fails(self, provider):
        params = ObjectStoreParams(storage_options={"download_retry_count": "-2"})
        with pytest.raises(InvalidInput, match="must be non-negative"):
            await provider.new_store("hdfs://nn:9000/a", params)

    @pytest.mark.asyncio
    async def test_invalid_path_fails_before_connecting(self, provider, built_options):
        with pytest.raises(InvalidInput, match="Failed to parse path"):
            await provider.new_store("hdfs://nn:9000/bad/%zz")
        assert built_options == []

    @pytest.mark.asyncio
    async def test_operator_failure_propagates(self, settings):
        def failing_factory(options):
            raise InvalidInput("Failed to create HDFS native operator: boom", value=options.name_node, cause="boom")

        provider = HdfsStoreProvider(settings=settings, operator_factory=failing_factory)
        with pytest.raises(InvalidInput, match="boom"):
            await provider.new_store("hdfs://nn:9000/a")

    @pytest.mark.asyncio
    async def test_async_operator_factory(self, settings):
        backend = FakeBackend()

        async def factory(options):
            return backend

        provider = HdfsStoreProvider(settings=settings, operator_factory=factory)
        store = await provider.new_store("hdfs://nn:9000/a")
        assert store.handle is backend

    @pytest.mark.asyncio
    async def test_independent_stores(self, settings):
        """Test that identical calls produce independent stores (no caching)."""
        provider = HdfsStoreProvider(settings=settings, operator_factory=lambda options: FakeBackend())

        first = await provider.new_store("hdfs://nn:9000/a")
        second = await provider.new_store("hdfs://nn:9000/a")

        assert first is not second
        assert first.handle is not second.handle
        await first.close()
        assert await second.exists("anything") is False

    @pytest.mark.asyncio
    async def test_settings_defaults_flow_into_store(self, backend):
        settings = ProviderSettings(
            default_download_retry_count=1,
            default_block_size=512,
            io_parallelism=8,
            initial_upload_size=16,
            read_retry_backoff_s=0.0,
        )
        provider = HdfsStoreProvider(settings=settings, operator_factory=lambda options: backend)
        store = await provider.new_store("hdfs://nn:9000/a")

        assert store.download_retry_count == 1
        assert store.block_size == 512
        assert store.io_parallelism == 8
        assert store.initial_upload_size == 16

    @pytest.mark.asyncio
    async def test_default_factory_builds_opendal_operator(self, settings):
        with patch("hdfs_store_provider.storage.operator.opendal") as mock_opendal:
            provider = HdfsStoreProvider(settings=settings)
            store = await provider.new_store("hdfs://nn:9000/warehouse", ObjectStoreParams(storage_options={"root": "/r"}))

        mock_opendal.AsyncOperator.assert_called_once_with("hdfs_native", name_node="hdfs://nn:9000", root="/r")
        assert store.handle.native is mock_opendal.AsyncOperator.return_value


class TestExtractPath:
    """Test provider path extraction."""

    def test_extract_path(self, provider):
        assert provider.extract_path("hdfs://hdfs-server/path/to/file") == ObjectPath.parse("/path/to/file")

    def test_extract_local_path(self, provider):
        assert str(provider.extract_path("file:///tmp/x")) == "/tmp/x"

    def test_is_a_provider(self, provider):
        assert isinstance(provider, ObjectStoreProvider)


class TestFromEnv:
    """Test provider construction from environment."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("HDFS_STORE_DOWNLOAD_RETRY_COUNT", "6")
        monkeypatch.setenv("HDFS_STORE_BACKEND_SCHEME", "memory")

        provider = HdfsStoreProvider.from_env()
        assert provider.settings.default_download_retry_count == 6
        assert provider.settings.backend_scheme == "memory"
