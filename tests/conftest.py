"""Root pytest configuration for hdfs-store-provider tests."""
import pytest

from hdfs_store_provider.provider import HdfsStoreProvider
from hdfs_store_provider.registry import ObjectStoreRegistry
from hdfs_store_provider.settings import ProviderSettings
from hdfs_store_provider.storage.store import ObjectStore
from hdfs_store_provider.storage.uri import ObjectPath
from .storage.fakes.fake_backend import FakeBackend


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires a running HDFS cluster)"
    )
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (may take significant time)"
    )


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Keep HDFS_STORE_* variables from the developer's shell out of tests."""
    for key in (
        "HDFS_STORE_DOWNLOAD_RETRY_COUNT",
        "HDFS_STORE_BLOCK_SIZE",
        "HDFS_STORE_IO_PARALLELISM",
        "HDFS_STORE_INITIAL_UPLOAD_SIZE",
        "HDFS_STORE_READ_RETRY_BACKOFF",
        "HDFS_STORE_BACKEND_SCHEME",
    ):
        monkeypatch.delenv(key, raising=False)


# Standardized test fixtures
@pytest.fixture
def settings():
    """Standard test settings (no backoff between read retries)."""
    return ProviderSettings(read_retry_backoff_s=0.0)


@pytest.fixture
def backend():
    """Standard fake backend for testing."""
    return FakeBackend()


@pytest.fixture
def built_options():
    """BackendOptions handed to the operator factory, in call order."""
    return []


@pytest.fixture
def provider(settings, backend, built_options):
    """Provider whose operator factory returns the fake backend."""
    def factory(options):
        built_options.append(options)
        return backend

    return HdfsStoreProvider(settings=settings, operator_factory=factory)


@pytest.fixture
def registry(provider):
    """Registry with the HDFS provider under the hdfs scheme."""
    registry = ObjectStoreRegistry()
    registry.insert("hdfs", provider)
    return registry


@pytest.fixture
def store(backend):
    """Store over the fake backend with a tiny part size."""
    return ObjectStore(
        backend,
        ObjectPath.parse("/"),
        scheme="hdfs",
        block_size=4,
        use_constant_size_upload_parts=False,
        io_parallelism=64,
        download_retry_count=3,
        initial_upload_size=4,
        read_retry_backoff_s=0.0,
    )
