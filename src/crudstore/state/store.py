"""Per-entity synchronized store.

A :class:`CrudStore` owns the keyed collection, the server-reported count,
the per-action loading states, the local state blob and the selection for
one entity. Every field is changed through one of the setters below, each a
single read-modify-write on the underlying :class:`ObservableCell`, so
subscribers see every change exactly once.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from crudstore.models.config import ResolvedConfig
from crudstore.models.loading import DEFAULT_LOADING_STATE, LoadingState
from crudstore.state.observable import ObservableCell
from crudstore.state.records import merge_record, record_key, storage_key

T = TypeVar("T")

Collection = Mapping[Any, Any]


@dataclasses.dataclass(frozen=True, slots=True)
class CrudSnapshot:
    """Immutable view of a store at one point in time.

    ``record`` is ``None`` until the first fetch; ``{}`` means fetched and
    empty.
    """

    record: Collection | None = None
    count: int = 0
    loading_state: Mapping[str, LoadingState] = dataclasses.field(default_factory=dict)
    state: Mapping[str, Any] | None = None
    selected: tuple[Any, ...] = ()


class CrudStore(Generic[T]):
    """Synchronized collection, count and loading state for one entity key."""

    def __init__(self, key: str, config: ResolvedConfig) -> None:
        self.key = key
        self.config = config
        initial_state = dict(config.state) if config.state is not None else None
        self._cell: ObservableCell[CrudSnapshot] = ObservableCell(CrudSnapshot(state=initial_state))

    def __repr__(self) -> str:
        return f"CrudStore(key={self.key!r})"

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def snapshot(self) -> CrudSnapshot:
        return self._cell.get()

    @property
    def record(self) -> Collection | None:
        record = self._cell.get().record
        return MappingProxyType(dict(record)) if record is not None else None

    @property
    def count(self) -> int:
        return self._cell.get().count

    @property
    def state(self) -> Mapping[str, Any] | None:
        return self._cell.get().state

    @property
    def selected(self) -> tuple[Any, ...]:
        return self._cell.get().selected

    def list(self) -> list[T] | None:
        """Records in the collection, or ``None`` when never fetched."""
        record = self._cell.get().record
        return list(record.values()) if record is not None else None

    def loading_state(self, action: str) -> LoadingState:
        return self._cell.get().loading_state.get(action, DEFAULT_LOADING_STATE)

    def subscribe(self, listener: Callable[[CrudSnapshot, CrudSnapshot], None]) -> Callable[[], None]:
        return self._cell.subscribe(listener)

    def key_of(self, data: Any) -> Any:
        """Collection key for a record (or a bare key value)."""
        return storage_key(
            record_key(data, self.config.by_key),
            parse_id_to_int=self.config.parse_id_to_int,
        )

    def _require_key(self, data: Any) -> Any:
        key = self.key_of(data)
        if key is None:
            raise ValueError(f"{self.key} record has no {self.config.by_key!r} field: {data!r}")
        return key

    # ------------------------------------------------------------------
    # Collection setters
    # ------------------------------------------------------------------

    def set_list(self, records: Iterable[T], *, count: int | None = None) -> None:
        """Replace the whole collection; optionally set the count in the same step."""
        record = {self._require_key(item): item for item in records}
        changes: dict[str, Any] = {"record": record}
        if count is not None:
            changes["count"] = count
        self._cell.set(changes)

    def set_count(self, count: int) -> None:
        self._cell.set({"count": max(0, int(count))})

    def set_instance(self, instance: T, *, count_new: bool = False) -> None:
        """Upsert one record.

        With ``count_new`` the count grows by one when the key was not
        present before, so re-creating an existing record does not double
        count.
        """
        key = self._require_key(instance)

        def _upsert(snapshot: CrudSnapshot) -> dict[str, Any]:
            current = snapshot.record or {}
            changes: dict[str, Any] = {"record": {**current, key: instance}}
            if count_new and key not in current:
                changes["count"] = snapshot.count + 1
            return changes

        self._cell.set(_upsert)

    def update_instance(self, instance: Any) -> None:
        """Shallow-merge a partial record into the stored one, if present."""
        key = self.key_of(instance)

        def _merge(snapshot: CrudSnapshot) -> dict[str, Any]:
            if snapshot.record is None or key not in snapshot.record:
                return {}
            return {"record": {**snapshot.record, key: merge_record(snapshot.record[key], instance)}}

        self._cell.set(_merge)

    def delete_instance(self, instance: Any) -> None:
        """Remove the record with *instance*'s key; the count drops only if one was removed."""
        key = self.key_of(instance)

        def _delete(snapshot: CrudSnapshot) -> dict[str, Any]:
            if snapshot.record is None or key not in snapshot.record:
                return {}
            record = {k: v for k, v in snapshot.record.items() if k != key}
            changes: dict[str, Any] = {"record": record, "count": max(0, snapshot.count - 1)}
            if key in snapshot.selected:
                changes["selected"] = tuple(k for k in snapshot.selected if k != key)
            return changes

        self._cell.set(_delete)

    def patch_list(self, records: Iterable[Any]) -> None:
        """Merge partial records into existing ones by key; unknown keys are skipped."""
        patches = [(self.key_of(item), item) for item in records]

        def _patch(snapshot: CrudSnapshot) -> dict[str, Any]:
            if snapshot.record is None:
                return {}
            record = dict(snapshot.record)
            changed = False
            for key, item in patches:
                if key in record:
                    record[key] = merge_record(record[key], item)
                    changed = True
            return {"record": record} if changed else {}

        self._cell.set(_patch)

    # ------------------------------------------------------------------
    # Loading state
    # ------------------------------------------------------------------

    def set_loading_state(self, action: str, **changes: Any) -> LoadingState:
        """Merge *changes* over the action's entry and bump its sequence.

        The first write for an action leaves ``sequence`` at ``0``; every
        later write sets it to the previous entry's sequence plus one.
        """

        def _apply(snapshot: CrudSnapshot) -> dict[str, Any]:
            previous = snapshot.loading_state.get(action)
            if previous is None:
                entry = DEFAULT_LOADING_STATE.model_copy(update={**changes, "sequence": 0})
            else:
                entry = previous.model_copy(update={**changes, "sequence": previous.sequence + 1})
            return {"loading_state": {**snapshot.loading_state, action: entry}}

        return self._cell.set(_apply).loading_state[action]

    # ------------------------------------------------------------------
    # Local state and selection
    # ------------------------------------------------------------------

    def set_state(self, **changes: Any) -> None:
        """Shallow-merge *changes* into the local state blob."""
        self._cell.set(lambda snapshot: {"state": {**(snapshot.state or {}), **changes}} if changes else {})

    def select(self, key: Any) -> None:
        key = storage_key(key, parse_id_to_int=self.config.parse_id_to_int)
        mode = self.config.select

        def _select(snapshot: CrudSnapshot) -> dict[str, Any]:
            if mode == "multiple":
                if key in snapshot.selected:
                    return {}
                return {"selected": (*snapshot.selected, key)}
            return {"selected": (key,)}

        self._cell.set(_select)

    def deselect(self, key: Any) -> None:
        key = storage_key(key, parse_id_to_int=self.config.parse_id_to_int)
        self._cell.set(
            lambda snapshot: {"selected": tuple(k for k in snapshot.selected if k != key)}
            if key in snapshot.selected
            else {}
        )

    def clear_selection(self) -> None:
        self._cell.set(lambda snapshot: {"selected": ()} if snapshot.selected else {})

    def selected_records(self) -> list[T]:
        snapshot = self._cell.get()
        if snapshot.record is None:
            return []
        return [snapshot.record[k] for k in snapshot.selected if k in snapshot.record]
