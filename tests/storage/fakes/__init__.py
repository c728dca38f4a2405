# Fake implementations for testing

from .fake_backend import FakeBackend, FakeBackendWriter

__all__ = ["FakeBackend", "FakeBackendWriter"]
