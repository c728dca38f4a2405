"""
URI and path normalization for the store provider.

Turns the URIs callers hand to the registry into canonical absolute
backend paths. Two URI shapes are understood:

- local-file style: ``file:///tmp/data`` or a bare ``/tmp/data``, converted
  as a filesystem path
- everything else: ``scheme://authority/a/b``, whose path component is
  percent-decoded and parsed

Only the first ``scheme://authority`` pair of a URI is meaningful. Any
further ``scheme://`` text is treated as ordinary path content.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple, Union
from urllib.parse import unquote_to_bytes, urlsplit

from ..errors import InvalidInput

__all__ = ["ObjectPath", "PathLike", "extract_path", "uri_scheme", "uri_authority"]

_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_LOCAL_HOSTS = ("", "localhost")


@dataclass(frozen=True)
class ObjectPath:
    """
    Canonical absolute path inside the backend namespace.

    Invariants:
    - str(path) always begins with "/" and never carries a scheme or authority
    - parts contain no empty, "." or ".." segments and no "/"
    """
    parts: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for part in self.parts:
            _check_segment(part, "/".join(self.parts))

    @classmethod
    def parse(cls, raw: str) -> "ObjectPath":
        """
        Parse a percent-encoded, slash-separated path.

        Leading, trailing and repeated slashes are collapsed.

        Raises:
            InvalidInput: If the path has malformed escapes, invalid UTF-8,
                an encoded "/" inside a segment, or "." / ".." segments

        Examples:
            >>> str(ObjectPath.parse("/a//b/c%20d/"))
            '/a/b/c d'
        """
        _check_escapes(raw)

        parts = []
        for segment in raw.split("/"):
            if not segment:
                continue
            decoded = _decode(segment, raw)
            _check_segment(decoded, raw)
            parts.append(decoded)
        return cls(tuple(parts))

    @classmethod
    def from_local(cls, local_path: str) -> "ObjectPath":
        """Convert an absolute, already-decoded filesystem path."""
        if not local_path.startswith("/"):
            raise InvalidInput(
                f"Failed to parse path '{local_path}': not an absolute path",
                value=local_path,
                cause="not an absolute path",
            )
        return cls(tuple(segment for segment in local_path.split("/") if segment))

    @classmethod
    def coerce(cls, value: "PathLike") -> "ObjectPath":
        """Return value unchanged if it is already an ObjectPath, otherwise parse it."""
        if isinstance(value, ObjectPath):
            return value
        return cls.parse(value)

    @property
    def is_root(self) -> bool:
        return not self.parts

    @property
    def name(self) -> str:
        return self.parts[-1] if self.parts else ""

    def child(self, segment: str) -> "ObjectPath":
        return ObjectPath(self.parts + (segment,))

    def __str__(self) -> str:
        return "/" + "/".join(self.parts)


PathLike = Union[ObjectPath, str]


def _check_escapes(raw: str) -> None:
    if _BAD_ESCAPE_RE.search(raw):
        raise InvalidInput(
            f"Failed to parse path '{raw}': malformed percent escape",
            value=raw,
            cause="malformed percent escape",
        )


def _decode(text: str, raw: str) -> str:
    """Percent-decode text as strict UTF-8."""
    try:
        return unquote_to_bytes(text).decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidInput(f"Failed to parse path '{raw}': {e}", value=raw, cause=str(e)) from e


def _check_segment(segment: str, raw: str) -> None:
    if not segment:
        raise InvalidInput(f"Failed to parse path '{raw}': empty path segment", value=raw, cause="empty path segment")
    if segment in (".", ".."):
        raise InvalidInput(
            f"Failed to parse path '{raw}': relative segment '{segment}'",
            value=raw,
            cause=f"relative segment '{segment}'",
        )
    if "/" in segment:
        raise InvalidInput(
            f"Failed to parse path '{raw}': encoded delimiter in segment '{segment}'",
            value=raw,
            cause="encoded delimiter",
        )


def extract_path(uri: str) -> ObjectPath:
    """
    Convert a URI into the canonical backend path.

    Pure function: no I/O, identical input always yields identical output.

    Args:
        uri: Store URI (hdfs://namenode:9000/a/b), file URI or absolute path

    Returns:
        Canonical ObjectPath

    Raises:
        InvalidInput: If the path component cannot be parsed

    Examples:
        >>> str(extract_path("hdfs://namenode:9000/warehouse/events"))
        '/warehouse/events'

        >>> str(extract_path("file:///tmp/x"))
        '/tmp/x'
    """
    parts = _split(uri)

    # Local-file style: file:///abs/path, file://localhost/abs/path or /abs/path
    if parts.scheme in ("file", "") and parts.netloc in _LOCAL_HOSTS and parts.path.startswith("/"):
        _check_escapes(parts.path)
        return ObjectPath.from_local(_decode(parts.path, parts.path))

    return ObjectPath.parse(parts.path)


def uri_scheme(uri: str) -> str:
    """
    Return the first scheme token of a URI, lower-cased.

    Raises:
        InvalidInput: If the URI has no "scheme://" prefix
    """
    scheme, sep, _ = uri.partition("://")
    if not sep or not scheme or not re.fullmatch(r"[A-Za-z][A-Za-z0-9+.-]*", scheme):
        raise InvalidInput(f"URI has no scheme, expected scheme://authority/path: {uri}", value=uri)
    return scheme.lower()


def uri_authority(uri: str) -> str:
    """
    Return "<scheme>://<authority>" for a URI.

    Examples:
        >>> uri_authority("hdfs://127.0.0.1:9000/sample-dataset")
        'hdfs://127.0.0.1:9000'
    """
    parts = _split(uri)
    if not parts.scheme:
        raise InvalidInput(f"URI has no scheme, expected scheme://authority/path: {uri}", value=uri)
    return f"{parts.scheme}://{parts.netloc}"


def _split(uri: str):
    try:
        return urlsplit(uri)
    except ValueError as e:
        raise InvalidInput(f"Failed to parse URI '{uri}': {e}", value=uri, cause=str(e)) from e
