"""
Tests for storage option mapping.

Tests build_backend_options, StorageOptions and retry count parsing.
"""
from __future__ import annotations

import pytest

from hdfs_store_provider.errors import InvalidInput
from hdfs_store_provider.storage.options import (
    DOWNLOAD_RETRY_COUNT_KEY,
    NAME_NODE_KEY,
    StorageOptions,
    build_backend_options,
    parse_retry_count,
)


class TestBuildBackendOptions:
    """Test build_backend_options function."""

    def test_name_node_injected(self):
        options = build_backend_options(None, "hdfs://127.0.0.1:9000/sample-dataset")
        assert dict(options.config) == {NAME_NODE_KEY: "hdfs://127.0.0.1:9000"}
        assert options.name_node == "hdfs://127.0.0.1:9000"

    def test_stale_name_node_overwritten(self):
        """Test that the URI-derived address wins over a stale caller value."""
        options = build_backend_options(
            {NAME_NODE_KEY: "hdfs://old-cluster:8020"},
            "hdfs://new-cluster:9000/data",
        )
        assert options.config[NAME_NODE_KEY] == "hdfs://new-cluster:9000"

    def test_other_keys_pass_through(self):
        existing = {"root": "/warehouse", "enable_append": "true"}
        options = build_backend_options(existing, "hdfs://nn:9000/a")
        assert options.config["root"] == "/warehouse"
        assert options.config["enable_append"] == "true"
        assert len(options.config) == len(existing) + 1

    def test_caller_options_not_mutated(self):
        existing = {NAME_NODE_KEY: "hdfs://old:1", DOWNLOAD_RETRY_COUNT_KEY: "5"}
        build_backend_options(existing, "hdfs://nn:9000/a")
        assert existing == {NAME_NODE_KEY: "hdfs://old:1", DOWNLOAD_RETRY_COUNT_KEY: "5"}

    def test_config_is_read_only(self):
        options = build_backend_options({}, "hdfs://nn:9000/a")
        with pytest.raises(TypeError):
            options.config["root"] = "/x"  # type: ignore[index]

    def test_retry_key_removed_from_config(self):
        options = build_backend_options({DOWNLOAD_RETRY_COUNT_KEY: "5"}, "hdfs://nn:9000/a")
        assert DOWNLOAD_RETRY_COUNT_KEY not in options.config
        assert options.retry_count_raw == "5"
        assert options.download_retry_count == 5

    def test_retry_count_default(self):
        options = build_backend_options({}, "hdfs://nn:9000/a")
        assert options.download_retry_count == 3

    def test_retry_count_custom_default(self):
        options = build_backend_options({}, "hdfs://nn:9000/a", default_retry_count=7)
        assert options.download_retry_count == 7

    def test_malformed_retry_count_deferred(self):
        """Test that mapping succeeds and the error surfaces on access."""
        options = build_backend_options({DOWNLOAD_RETRY_COUNT_KEY: "many"}, "hdfs://nn:9000/a")
        with pytest.raises(InvalidInput, match="Invalid download_retry_count 'many'"):
            options.download_retry_count

    def test_scheme_less_uri_raises(self):
        with pytest.raises(InvalidInput, match="URI has no scheme"):
            build_backend_options({}, "/tmp/data")


class TestParseRetryCount:
    """Test parse_retry_count function."""

    def test_absent_uses_default(self):
        assert parse_retry_count(None) == 3
        assert parse_retry_count(None, default=0) == 0

    def test_numeric(self):
        assert parse_retry_count("0") == 0
        assert parse_retry_count("5") == 5
        assert parse_retry_count(" 12 ") == 12

    def test_non_numeric_raises(self):
        with pytest.raises(InvalidInput) as exc_info:
            parse_retry_count("three")
        assert exc_info.value.value == "three"
        assert exc_info.value.cause

    def test_negative_raises(self):
        with pytest.raises(InvalidInput, match="must be non-negative"):
            parse_retry_count("-1")

    def test_float_string_raises(self):
        with pytest.raises(InvalidInput):
            parse_retry_count("2.5")

    @pytest.mark.parametrize("raw", ["+5", "1_000", "٥", "", "0x10", "- 1"])
    def test_only_plain_decimal_digits_accepted(self, raw):
        """Test that int() extensions such as signs, underscores and non-ASCII digits are rejected."""
        with pytest.raises(InvalidInput, match="not a decimal integer"):
            parse_retry_count(raw)


class TestStorageOptions:
    """Test StorageOptions accessors."""

    def test_is_a_dict(self):
        options = StorageOptions({"a": "1"})
        assert options["a"] == "1"
        assert dict(options) == {"a": "1"}

    def test_download_retry_count(self):
        assert StorageOptions().download_retry_count() == 3
        assert StorageOptions({DOWNLOAD_RETRY_COUNT_KEY: "9"}).download_retry_count() == 9

    def test_download_retry_count_invalid(self):
        with pytest.raises(InvalidInput):
            StorageOptions({DOWNLOAD_RETRY_COUNT_KEY: "x"}).download_retry_count()
