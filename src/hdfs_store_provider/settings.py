"""
Settings and configuration for the HDFS store provider.

Centralizes process-level tuning defaults and provides validation with
fail-fast behavior. Per-store configuration travels in ObjectStoreParams;
these settings only supply the values a caller did not specify.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = [
    "DEFAULT_DOWNLOAD_RETRY_COUNT",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_IO_PARALLELISM",
    "DEFAULT_INITIAL_UPLOAD_SIZE",
    "ProviderSettings",
    "create_settings_from_env",
]

DEFAULT_DOWNLOAD_RETRY_COUNT = 3
DEFAULT_BLOCK_SIZE = 64 * 1024
DEFAULT_IO_PARALLELISM = 64
DEFAULT_INITIAL_UPLOAD_SIZE = 5 * 1024 * 1024


@dataclass(frozen=True)
class ProviderSettings:
    """
    Configuration settings for the store provider.

    Store Settings:
        default_download_retry_count: Read retries when download_retry_count is not set
        default_block_size: Read block size when ObjectStoreParams.block_size is unset
        io_parallelism: Parallelism hint exposed on every store

    Writer Settings:
        initial_upload_size: Size of the first committed parts (multipart threshold)

    Backend Settings:
        read_retry_backoff_s: Base delay of the exponential backoff between read retries
        backend_scheme: opendal service name used to build operators
    """
    default_download_retry_count: int = DEFAULT_DOWNLOAD_RETRY_COUNT
    default_block_size: int = DEFAULT_BLOCK_SIZE
    io_parallelism: int = DEFAULT_IO_PARALLELISM
    initial_upload_size: int = DEFAULT_INITIAL_UPLOAD_SIZE
    read_retry_backoff_s: float = 0.1
    backend_scheme: str = "hdfs_native"

    def __post_init__(self):
        """Validate settings on construction."""
        if self.default_download_retry_count < 0:
            raise ValueError(
                f"default_download_retry_count must be non-negative, got {self.default_download_retry_count}"
            )

        for name in ("default_block_size", "io_parallelism", "initial_upload_size"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        if self.read_retry_backoff_s < 0:
            raise ValueError(f"read_retry_backoff_s must be non-negative, got {self.read_retry_backoff_s}")

        if not self.backend_scheme:
            raise ValueError("backend_scheme is required")


def create_settings_from_env() -> ProviderSettings:
    """
    Load settings from environment variables.

    Environment Variables:
        - HDFS_STORE_DOWNLOAD_RETRY_COUNT (default: 3)
        - HDFS_STORE_BLOCK_SIZE (default: 65536)
        - HDFS_STORE_IO_PARALLELISM (default: 64)
        - HDFS_STORE_INITIAL_UPLOAD_SIZE (default: 5242880)
        - HDFS_STORE_READ_RETRY_BACKOFF (default: 0.1)
        - HDFS_STORE_BACKEND_SCHEME (default: hdfs_native)

    Returns:
        ProviderSettings object with validated configuration

    Raises:
        ValueError: If a variable is malformed or fails validation

    Note:
        Creates a fresh ProviderSettings instance every time (no caching).
    """
    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}") from None

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"{key} must be a number, got {value!r}") from None

    return ProviderSettings(
        default_download_retry_count=get_int("HDFS_STORE_DOWNLOAD_RETRY_COUNT", DEFAULT_DOWNLOAD_RETRY_COUNT),
        default_block_size=get_int("HDFS_STORE_BLOCK_SIZE", DEFAULT_BLOCK_SIZE),
        io_parallelism=get_int("HDFS_STORE_IO_PARALLELISM", DEFAULT_IO_PARALLELISM),
        initial_upload_size=get_int("HDFS_STORE_INITIAL_UPLOAD_SIZE", DEFAULT_INITIAL_UPLOAD_SIZE),
        read_retry_backoff_s=get_float("HDFS_STORE_READ_RETRY_BACKOFF", 0.1),
        backend_scheme=os.getenv("HDFS_STORE_BACKEND_SCHEME", "hdfs_native"),
    )
