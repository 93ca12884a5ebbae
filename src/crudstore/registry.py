"""Store registry: one store per entity key.

The registry is an ordinary object owned by the application. Create it once
at the composition root and pass it to whatever declares stores::

    registry = StoreRegistry()
    users = registry.get_or_create("users", {"route": "/users", "transport": transport})
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from typing import Any

from crudstore.models.config import StoreConfig
from crudstore.state.store import CrudStore
from crudstore.validation import validate_config

_logger = logging.getLogger(__name__)


class StoreRegistry:
    """Lazily creates and caches :class:`CrudStore` instances by key.

    The first configuration registered for a key wins; later calls with the
    same key return the existing store and ignore their configuration.
    Creation is serialized with a lock so two threads racing on the first
    call still end up sharing one store.
    """

    def __init__(self) -> None:
        self._stores: dict[str, CrudStore[Any]] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: str, config: StoreConfig | Mapping[str, Any]) -> CrudStore[Any]:
        store = self._stores.get(key)
        if store is not None:
            _logger.debug("Store %r already registered; ignoring new configuration", key)
            return store

        with self._lock:
            store = self._stores.get(key)
            if store is None:
                store = CrudStore(key, validate_config(config))
                self._stores[key] = store
                _logger.debug(
                    "Created store %r (actions=%s, custom=%s)",
                    key,
                    ",".join(kind.value for kind in store.config.actions),
                    ",".join(store.config.custom_actions),
                )
        return store

    def get(self, key: str) -> CrudStore[Any] | None:
        return self._stores.get(key)

    def keys(self) -> list[str]:
        return list(self._stores)

    def __contains__(self, key: object) -> bool:
        return key in self._stores

    def __len__(self) -> int:
        return len(self._stores)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._stores))
