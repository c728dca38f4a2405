"""
Store error classes.

Provides a clear taxonomy of errors that can occur while opening stores
and moving bytes through them. Backend client exceptions are mapped onto
this hierarchy at the operator boundary so callers see one consistent
error interface regardless of the native client underneath.
"""
from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """Base class for all store provider errors."""
    pass


class InvalidInput(StoreError, ValueError):
    """
    Malformed caller input.

    Raised when:
    - A URI or path cannot be parsed into a canonical path
    - A storage option value is malformed (e.g. non-numeric retry count)
    - The backend rejects its configuration while the operator is built

    Carries the offending raw value and the underlying cause description.
    """

    def __init__(self, message: str, value: Optional[str] = None, cause: Optional[str] = None):
        super().__init__(message)
        self.value = value
        self.cause = cause


class InvalidState(StoreError, RuntimeError):
    """
    Operation attempted in a state that does not allow it.

    Raised when:
    - write()/flush()/shutdown() is called on a closed writer
    - A writer is used after a backend failure aborted it
    - A store is used after close()
    """
    pass


class BackendError(StoreError, OSError):
    """
    Failure reported by the native backend client.

    Wrapped but not reinterpreted: the native description is kept in the
    message and the native exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NotFound(BackendError, FileNotFoundError):
    """Object does not exist in the backend."""
    pass


__all__ = [
    "StoreError",
    "InvalidInput",
    "InvalidState",
    "BackendError",
    "NotFound",
]
