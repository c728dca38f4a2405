"""
Data models for store construction.

These Pydantic models provide type safety and validation for the
parameters a caller hands to a provider when opening a store.
"""
from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .settings import DEFAULT_DOWNLOAD_RETRY_COUNT
from .storage.options import StorageOptions

__all__ = ["ObjectStoreParams"]


class ObjectStoreParams(BaseModel):
    """
    Caller-owned parameters for opening a store.

    Read-only to providers. download_retry_count is derived from
    storage_options and validated lazily, so a malformed value surfaces
    when the store is built.
    """
    model_config = ConfigDict(frozen=True)

    block_size: Optional[int] = Field(default=None, description="Read block size in bytes (backend default if unset)")
    storage_options: Optional[Dict[str, str]] = Field(default=None, description="Generic string-keyed backend options")
    use_constant_size_upload_parts: bool = Field(default=False, description="Keep upload part size constant")

    @field_validator("block_size")
    @classmethod
    def validate_block_size(cls, v):
        """Block size must be positive when given."""
        if v is not None and v <= 0:
            raise ValueError(f"block_size must be positive, got {v}")
        return v

    def options(self) -> StorageOptions:
        """Storage options as a StorageOptions bag (empty if unset)."""
        return StorageOptions(self.storage_options or {})

    @property
    def download_retry_count(self) -> int:
        """
        Read retries requested through storage options.

        Raises:
            InvalidInput: If the option is not a non-negative integer
        """
        return self.options().download_retry_count(DEFAULT_DOWNLOAD_RETRY_COUNT)
