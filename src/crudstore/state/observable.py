"""Minimal observable cell.

Holds one immutable snapshot. ``set`` swaps in a new snapshot and notifies
current subscribers synchronously, before returning.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

S = TypeVar("S")

Listener = Callable[[S, S], None]
Partial = Mapping[str, Any] | Callable[[S], Mapping[str, Any]]


class ObservableCell(Generic[S]):
    """Observable container for a frozen dataclass snapshot.

    ``set`` accepts either a mapping of changed fields or an updater that
    receives the current snapshot and returns such a mapping. The
    read-modify-write runs under a lock so updaters always see the latest
    snapshot.
    """

    def __init__(self, initial: S) -> None:
        self._value = initial
        self._listeners: list[Listener[S]] = []
        self._lock = threading.RLock()

    def get(self) -> S:
        return self._value

    def set(self, partial: Partial[S]) -> S:
        with self._lock:
            old = self._value
            changes = partial(old) if callable(partial) else partial
            if not changes:
                return old
            new = dataclasses.replace(old, **changes)  # type: ignore[type-var]
            self._value = new
            listeners = list(self._listeners)
        for listener in listeners:
            listener(new, old)
        return new

    def subscribe(self, listener: Listener[S]) -> Callable[[], None]:
        """Register *listener*; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
