"""Action dispatch.

:func:`dispatch` runs one action against a store:

1. drop the call if the same action is already in flight;
2. resolve the action's descriptor;
3. build method, URL, params and body;
4. mark the action as loading;
5. await the transport;
6. on success mutate the collection, mark the action finished and fire the
   success callbacks;
7. on failure record the error and fire the error handlers.

Failures from step 5 onwards, including exceptions raised by the success
callbacks, never propagate to the caller; they end up in the action's
loading state and in the error handlers. Configuration mistakes (unknown
actions, broken routes) do propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from crudstore._constants import ENVELOPE_COUNT_KEY, ENVELOPE_RESULTS_KEY
from crudstore.models.actions import (
    ActionDescriptor,
    ActionKind,
    ActionRef,
    CallOptions,
    CustomActionDescriptor,
)
from crudstore.state.loading import action_error, finish_action, get_loading_state, initiate_action
from crudstore.state.records import record_key
from crudstore.state.store import CrudStore
from crudstore.validation import resolve_descriptor

_logger = logging.getLogger(__name__)

Descriptor = ActionDescriptor | CustomActionDescriptor

# Actions whose loading state records which record they target.
_TARGETED_ACTIONS: frozenset[ActionKind] = frozenset({ActionKind.UPDATE, ActionKind.DELETE})

# Actions that send the payload as the request body.
_BODY_ACTIONS: frozenset[ActionKind] = frozenset({ActionKind.CREATE, ActionKind.UPDATE, ActionKind.CUSTOM})


def call_if_set(func: Callable[..., Any] | None, *params: Any) -> None:
    if callable(func):
        func(*params)


def build_url(route: Any, payload: Any, options: CallOptions) -> str:
    if callable(route):
        return str(route(payload, options))
    return str(route)


def build_body(action: ActionRef, descriptor: Descriptor, payload: Any, options: CallOptions) -> Any:
    """Request body for *action*, or ``None`` when it sends none.

    ``delete`` only sends a body when its descriptor has a ``prepare``
    transform; ``get`` and ``get_list`` never do.
    """
    if payload is None:
        return None
    if action.kind in _BODY_ACTIONS or (action.kind == ActionKind.DELETE and descriptor.prepare is not None):
        if descriptor.prepare is not None:
            return descriptor.prepare(payload, options)
        return payload
    return None


def _validate_record(store: CrudStore[Any], data: Any) -> Any:
    model = store.config.record_model
    if model is None or isinstance(data, model):
        return data
    return model.model_validate(data)


def normalize_response(
    store: CrudStore[Any],
    action: ActionRef,
    descriptor: Descriptor,
    raw: Any,
    options: CallOptions,
) -> tuple[Any, int | None]:
    """Turn a raw response body into the data handed to mutations and callbacks.

    Returns ``(data, count)``; ``count`` is only set for ``get_list``, where
    it comes from a ``{"results": [...], "count": N}`` envelope or, for a
    plain list, from its length.
    """
    prepare_response = getattr(descriptor, "prepare_response", None)

    if action.kind == ActionKind.GET_LIST:
        envelope = raw if isinstance(raw, Mapping) else None
        if prepare_response is not None:
            records = prepare_response(raw, options)
        elif envelope is not None and ENVELOPE_RESULTS_KEY in envelope:
            records = envelope[ENVELOPE_RESULTS_KEY]
        else:
            records = raw
        if not isinstance(records, (list, tuple)):
            raise TypeError(f"{store.key} list response is not a list: {type(records).__name__}")
        records = [_validate_record(store, item) for item in records]
        reported = envelope.get(ENVELOPE_COUNT_KEY) if envelope is not None else None
        count = int(reported) if reported is not None else len(records)
        return records, count

    data = prepare_response(raw, options) if prepare_response is not None else raw
    if action.kind in (ActionKind.GET, ActionKind.CREATE):
        data = _validate_record(store, data)
    return data, None


def apply_mutation(
    store: CrudStore[Any],
    action: ActionRef,
    data: Any,
    payload: Any,
    count: int | None,
) -> None:
    """Apply the collection change that follows a successful *action*."""
    if action.kind == ActionKind.GET:
        store.set_instance(data)
    elif action.kind == ActionKind.GET_LIST:
        store.set_list(data, count=count)
    elif action.kind == ActionKind.CREATE:
        store.set_instance(data, count_new=True)
    elif action.kind == ActionKind.UPDATE:
        store.update_instance(data)
    elif action.kind == ActionKind.DELETE:
        # The payload, not the (often empty) response, names the deleted record.
        store.delete_instance(payload)
    # Custom actions leave the collection to their callbacks.


async def dispatch(
    store: CrudStore[Any],
    action: ActionRef | ActionKind | str,
    payload: Any = None,
    *,
    params: Mapping[str, Any] | None = None,
    args: Any = None,
    callback: Callable[[Any], Any] | None = None,
    on_error: Callable[[Any], Any] | None = None,
    request_options: Mapping[str, Any] | None = None,
    side_effects: Callable[[Any], Any] | None = None,
) -> Any:
    """Run *action* on *store* and return the normalized response data.

    Returns ``None`` when the action is already in flight or when it fails;
    failures are visible through the loading state and the error handlers.
    """
    ref = ActionRef.parse(action)
    loading_key = ref.loading_key

    if get_loading_state(store, loading_key).is_loading:
        _logger.debug("%s.%s already in flight; dropping call", store.key, loading_key)
        return None

    descriptor = resolve_descriptor(store.config, ref, store_key=store.key)
    options = CallOptions(args=args, params=params, payload=payload)
    method = descriptor.method.value
    url = build_url(descriptor.route, payload, options)
    body = build_body(ref, descriptor, payload, options)

    extra: dict[str, Any] = {}
    if ref.kind in _TARGETED_ACTIONS:
        extra["id"] = record_key(payload, store.config.id)
    initiate_action(store, loading_key, **extra)

    _logger.debug("%s.%s: %s %s", store.key, loading_key, method.upper(), url)
    try:
        response = await store.config.transport.request(
            method,
            url,
            params=params,
            data=body,
            **dict(request_options or {}),
        )
        data, count = normalize_response(store, ref, descriptor, response.data, options)
        apply_mutation(store, ref, data, payload, count)
        finish_action(store, loading_key, data)
        _logger.debug("%s.%s finished", store.key, loading_key)
        call_if_set(side_effects, data)
        call_if_set(descriptor.callback, data)
        call_if_set(callback, data)
    except Exception as exc:
        action_error(store, loading_key, exc)
        _logger.warning("%s.%s failed: %s", store.key, loading_key, exc)
        call_if_set(descriptor.on_error, exc)
        call_if_set(on_error, exc)
        return None

    return data
