"""Caller-facing view of a store.

:func:`use_crud` binds a store to a :class:`CrudView`: the collection
accessors plus one awaitable :class:`ActionCallable` per enabled action.

Usage::

    users = use_crud(registry.get_or_create("users", config))
    await users.get_list(params={"page": 2})
    if users.get_list.error is not None:
        ...
    for user in users.list() or []:
        ...
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, TypeVar

from crudstore.dispatch import dispatch
from crudstore.models.actions import STANDARD_ACTIONS, ActionRef
from crudstore.models.loading import LoadingState
from crudstore.state.loading import get_loading_state
from crudstore.state.store import CrudStore

T = TypeVar("T")


class ActionCallable:
    """Awaitable bound to one action of one store.

    The current loading state of the action is readable as attributes
    (``is_loading``, ``error``, ``response``, ``id``, ``sequence``).
    ``side_effects`` may be set to a hook that runs after every success,
    before the configured and call-site callbacks.
    """

    def __init__(self, store: CrudStore[Any], action: ActionRef) -> None:
        self._store = store
        self.action = action
        self.side_effects: Callable[[Any], Any] | None = None

    def __repr__(self) -> str:
        return f"ActionCallable({self._store.key}.{self.action})"

    async def __call__(
        self,
        payload: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        args: Any = None,
        callback: Callable[[Any], Any] | None = None,
        on_error: Callable[[Any], Any] | None = None,
        request_options: Mapping[str, Any] | None = None,
    ) -> Any:
        return await dispatch(
            self._store,
            self.action,
            payload,
            params=params,
            args=args,
            callback=callback,
            on_error=on_error,
            request_options=request_options,
            side_effects=self.side_effects,
        )

    @property
    def loading_state(self) -> LoadingState:
        return get_loading_state(self._store, self.action.loading_key)

    @property
    def is_loading(self) -> bool:
        return self.loading_state.is_loading

    @property
    def error(self) -> Any:
        return self.loading_state.error

    @property
    def response(self) -> Any:
        return self.loading_state.response

    @property
    def id(self) -> Any:
        return self.loading_state.id

    @property
    def sequence(self) -> int:
        return self.loading_state.sequence


class CrudView(Generic[T]):
    """Collection accessors and action callables for one store.

    Standard actions are attributes (``view.get_list``); custom actions are
    reachable both as attributes and through ``view.actions[name]``. Only
    enabled actions exist. ``state``/``set_state`` exist only when the store
    was configured with an initial state, ``record`` only with
    ``include_record``, and the selection helpers only with ``select``.
    """

    def __init__(self, store: CrudStore[T]) -> None:
        self.store = store
        config = store.config
        self.actions: dict[str, ActionCallable] = {}
        for kind in STANDARD_ACTIONS:
            if config.is_enabled(kind):
                self.actions[kind.value] = ActionCallable(store, ActionRef(kind))
        for name in config.custom_actions:
            self.actions[name] = ActionCallable(store, ActionRef.custom(name))

    def __getattr__(self, name: str) -> ActionCallable:
        # Only reached when normal lookup fails: disabled actions and
        # unconfigured optional features surface as AttributeError.
        actions = self.__dict__.get("actions", {})
        if name in actions:
            return actions[name]
        raise AttributeError(f"{type(self).__name__} for {self.__dict__.get('store')!r} has no attribute {name!r}")

    def __dir__(self) -> Iterable[str]:
        return [*super().__dir__(), *self.actions]

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def list(self) -> list[T] | None:
        return self.store.list()

    def count(self) -> int:
        return self.store.count

    def set_list(self, records: Iterable[T]) -> None:
        self.store.set_list(records)

    def patch_list(self, records: Iterable[Any]) -> None:
        self.store.patch_list(records)

    @property
    def record(self) -> Mapping[Any, T] | None:
        if not self.store.config.include_record:
            raise AttributeError("record is only exposed with include_record=True")
        return self.store.record

    # ------------------------------------------------------------------
    # Local state
    # ------------------------------------------------------------------

    @property
    def state(self) -> Callable[[], Mapping[str, Any] | None]:
        if self.store.config.state is None:
            raise AttributeError("store has no local state; configure an initial state")
        return lambda: self.store.state

    @property
    def set_state(self) -> Callable[..., None]:
        if self.store.config.state is None:
            raise AttributeError("store has no local state; configure an initial state")
        return self.store.set_state

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def _require_select(self) -> None:
        if not self.store.config.select:
            raise AttributeError("selection is only available with actions.select set")

    @property
    def select(self) -> Callable[[Any], None]:
        self._require_select()
        return self.store.select

    @property
    def deselect(self) -> Callable[[Any], None]:
        self._require_select()
        return self.store.deselect

    @property
    def clear_selection(self) -> Callable[[], None]:
        self._require_select()
        return self.store.clear_selection

    @property
    def selected(self) -> Callable[[], list[T]]:
        self._require_select()
        return self.store.selected_records


def use_crud(store: CrudStore[T]) -> CrudView[T]:
    """Build the caller-facing view of *store*."""
    return CrudView(store)

