"""
Storage option mapping.

Translates the generic, string-keyed storage options a caller passes for
any backend into the key/value configuration the HDFS native operator
understands.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from ..errors import InvalidInput
from ..settings import DEFAULT_DOWNLOAD_RETRY_COUNT
from .uri import uri_authority

__all__ = [
    "NAME_NODE_KEY",
    "DOWNLOAD_RETRY_COUNT_KEY",
    "StorageOptions",
    "BackendOptions",
    "build_backend_options",
    "parse_retry_count",
]

logger = logging.getLogger(__name__)

# Cluster address key of the HDFS native service
NAME_NODE_KEY = "name_node"

# Generic read-retry option; interpreted here and never forwarded to the backend
DOWNLOAD_RETRY_COUNT_KEY = "download_retry_count"


def parse_retry_count(raw: Optional[str], default: int = DEFAULT_DOWNLOAD_RETRY_COUNT) -> int:
    """
    Parse a download retry count option value.

    Args:
        raw: Option value, or None when the option is absent
        default: Value used when the option is absent

    Returns:
        Non-negative retry count

    Raises:
        InvalidInput: If the value is not a non-negative integer
    """
    if raw is None:
        return default

    text = str(raw).strip()
    if text.startswith("-") and _is_decimal(text[1:]):
        raise InvalidInput(
            f"Invalid {DOWNLOAD_RETRY_COUNT_KEY} '{raw}': must be non-negative",
            value=str(raw),
            cause="must be non-negative",
        )
    # Plain ASCII digits only: int() would also take "+5", "1_000" and "٥"
    if not _is_decimal(text):
        raise InvalidInput(
            f"Invalid {DOWNLOAD_RETRY_COUNT_KEY} '{raw}': not a decimal integer",
            value=str(raw),
            cause="not a decimal integer",
        )
    return int(text)


def _is_decimal(text: str) -> bool:
    return text.isascii() and text.isdigit()


class StorageOptions(dict):
    """
    Generic string-keyed configuration bag shared by all backends.

    Behaves as a plain dict with typed accessors for the options this
    provider interprets itself.
    """

    def download_retry_count(self, default: int = DEFAULT_DOWNLOAD_RETRY_COUNT) -> int:
        """Read retries requested by the caller, or default when unset."""
        return parse_retry_count(self.get(DOWNLOAD_RETRY_COUNT_KEY), default)


@dataclass(frozen=True)
class BackendOptions:
    """
    Backend-native configuration produced from StorageOptions.

    Attributes:
        config: Key/value pairs handed verbatim to the native operator
        retry_count_raw: Caller's download_retry_count value, if any;
            validated when the operator is built
        default_retry_count: Retry count used when the caller set none
    """
    config: Mapping[str, str] = field(default_factory=dict)
    retry_count_raw: Optional[str] = None
    default_retry_count: int = DEFAULT_DOWNLOAD_RETRY_COUNT

    @property
    def name_node(self) -> Optional[str]:
        return self.config.get(NAME_NODE_KEY)

    @property
    def download_retry_count(self) -> int:
        return parse_retry_count(self.retry_count_raw, self.default_retry_count)


def build_backend_options(
    existing: Optional[Mapping[str, str]],
    base_uri: str,
    *,
    default_retry_count: int = DEFAULT_DOWNLOAD_RETRY_COUNT,
) -> BackendOptions:
    """
    Build backend configuration from caller options and the store URI.

    The name node address derived from the URI always overwrites a caller
    value under the same key: a mismatched address would point the
    operator at the wrong cluster. The download retry option is removed
    from the forwarded configuration. All other keys pass through.

    Args:
        existing: Caller storage options (None means empty)
        base_uri: Store base URI, e.g. hdfs://namenode:9000/warehouse
        default_retry_count: Retry count used when the option is absent

    Returns:
        BackendOptions with at most len(existing) + 1 config entries

    Examples:
        >>> opts = build_backend_options({"name_node": "hdfs://old:1"}, "hdfs://nn:9000/x")
        >>> opts.config["name_node"]
        'hdfs://nn:9000'
    """
    config: Dict[str, str] = dict(existing or {})
    retry_count_raw = config.pop(DOWNLOAD_RETRY_COUNT_KEY, None)

    name_node = uri_authority(base_uri)
    previous = config.get(NAME_NODE_KEY)
    if previous is not None and previous != name_node:
        logger.debug(f"Overriding caller {NAME_NODE_KEY} {previous} with {name_node} derived from {base_uri}")
    config[NAME_NODE_KEY] = name_node

    # Log keys only: values may carry credentials
    logger.debug(f"Backend options for {name_node}: keys={sorted(config)}")

    return BackendOptions(
        config=MappingProxyType(config),
        retry_count_raw=retry_count_raw,
        default_retry_count=default_retry_count,
    )
