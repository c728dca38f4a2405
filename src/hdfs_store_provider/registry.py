"""
Caller-owned registry of store providers.

Maps URI schemes to providers. Registries are plain objects passed to
whoever opens stores, so several independently configured registries can
live in one process without global state.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .errors import InvalidInput
from .models import ObjectStoreParams
from .storage.base import ObjectStoreProvider
from .storage.store import ObjectStore
from .storage.uri import uri_scheme

__all__ = ["ObjectStoreRegistry"]

logger = logging.getLogger(__name__)


class ObjectStoreRegistry:
    """
    Scheme to provider mapping.

    Lookup uses only the first "scheme://" token of a URI. Stores are not
    cached: every get_store() call asks the provider for a new one.
    """

    def __init__(self) -> None:
        self._providers: Dict[str, ObjectStoreProvider] = {}

    def insert(self, scheme: str, provider: ObjectStoreProvider) -> None:
        """
        Register provider for scheme, replacing any previous provider.

        Raises:
            InvalidInput: If scheme is empty or provider lacks new_store/extract_path
        """
        if not scheme or "://" in scheme:
            raise InvalidInput(f"Invalid scheme: {scheme!r}", value=scheme)
        if not isinstance(provider, ObjectStoreProvider):
            raise InvalidInput(
                f"Provider for {scheme} must implement new_store() and extract_path()",
                value=type(provider).__name__,
            )

        key = scheme.lower()
        if key in self._providers:
            logger.debug(f"Replacing provider for scheme {key}")
        self._providers[key] = provider

    def remove(self, scheme: str) -> Optional[ObjectStoreProvider]:
        return self._providers.pop(scheme.lower(), None)

    def schemes(self) -> List[str]:
        return sorted(self._providers)

    def get_provider(self, uri: str) -> ObjectStoreProvider:
        """
        Find the provider registered for the scheme of uri.

        Raises:
            InvalidInput: If uri has no scheme or no provider is registered for it
        """
        scheme = uri_scheme(uri)
        try:
            return self._providers[scheme]
        except KeyError:
            raise InvalidInput(
                f"No object store provider registered for scheme '{scheme}' (known: {', '.join(self.schemes()) or 'none'})",
                value=uri,
            ) from None

    async def get_store(self, uri: str, params: Optional[ObjectStoreParams] = None) -> ObjectStore:
        """Open a new store for uri through its scheme's provider."""
        provider = self.get_provider(uri)
        return await provider.new_store(uri, params or ObjectStoreParams())

    def __contains__(self, scheme: str) -> bool:
        return scheme.lower() in self._providers

    def __len__(self) -> int:
        return len(self._providers)
