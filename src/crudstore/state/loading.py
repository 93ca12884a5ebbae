"""Loading-state transitions.

``initiate_action``, ``finish_action`` and ``action_error`` are the only
transitions the dispatcher performs; each is a single
:meth:`CrudStore.set_loading_state` write.
"""

from __future__ import annotations

from typing import Any

from crudstore.models.loading import LoadingState
from crudstore.state.records import record_key
from crudstore.state.store import CrudStore


def get_loading_state(store: CrudStore[Any], action: str) -> LoadingState:
    """Current entry for *action*, or the default entry if it was never set."""
    return store.loading_state(action)


def set_loading_state(store: CrudStore[Any], action: str, **changes: Any) -> LoadingState:
    return store.set_loading_state(action, **changes)


def initiate_action(store: CrudStore[Any], action: str, **extra: Any) -> LoadingState:
    """Mark *action* as in flight; *extra* (e.g. the target ``id``) is overlaid."""
    return set_loading_state(
        store,
        action,
        **{
            "is_loading": True,
            "error": None,
            "response": None,
            "id": None,
            **extra,
        },
    )


def finish_action(store: CrudStore[Any], action: str, response: Any = None) -> LoadingState:
    """Mark *action* as done; ``id`` is taken from the response when it has one."""
    response_id = record_key(response, store.config.id) if not isinstance(response, (str, int, list)) else None
    return set_loading_state(
        store,
        action,
        is_loading=False,
        error=None,
        response=response,
        id=response_id,
    )


def action_error(store: CrudStore[Any], action: str, error: Any) -> LoadingState:
    """Mark *action* as failed. ``id`` keeps whatever the initiate step set."""
    return set_loading_state(
        store,
        action,
        is_loading=False,
        error=error,
        response=None,
    )
