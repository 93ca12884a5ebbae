"""Configuration validation.

Turns a sparse :class:`StoreConfig` into a :class:`ResolvedConfig` in which
every enabled action carries a complete :class:`ActionDescriptor`. Defaults
are layered one level deep: a canonical descriptor per action, then the
fields the caller explicitly set on its override. Nothing is merged
recursively.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from crudstore.exceptions import CrudConfigError, UnknownActionError
from crudstore.models._base import HttpMethod
from crudstore.models.actions import (
    STANDARD_ACTIONS,
    ActionDescriptor,
    ActionKind,
    ActionOverride,
    ActionRef,
    CallOptions,
    CustomActionDescriptor,
    ErrorHandler,
    Route,
)
from crudstore.models.config import ActionsConfig, ResolvedConfig, StoreConfig
from crudstore.state.records import record_key

_DEFAULT_METHODS: dict[ActionKind, HttpMethod] = {
    ActionKind.GET: HttpMethod.GET,
    ActionKind.GET_LIST: HttpMethod.GET,
    ActionKind.CREATE: HttpMethod.POST,
    ActionKind.UPDATE: HttpMethod.PATCH,
    ActionKind.DELETE: HttpMethod.DELETE,
}

# Actions addressed at a single record use the detail route by default.
_DETAIL_ACTIONS: frozenset[ActionKind] = frozenset({ActionKind.GET, ActionKind.UPDATE, ActionKind.DELETE})

_ALL_ENABLED = ActionsConfig(get=True, get_list=True, create=True, update=True, delete=True)


def detail_route(route: Route, id_field: str) -> Callable[..., str]:
    """Build the route used for single-record actions.

    A callable route is returned unchanged; it is already parameterized by
    the record. A string route gets the record's key value appended as a
    path segment, keeping the trailing-slash style of the base route::

        detail_route("/users", "id")({"id": 3})   -> "/users/3"
        detail_route("/users/", "id")({"id": 3})  -> "/users/3/"
    """
    if callable(route):
        return route

    base = route
    trailing = base.endswith("/")

    def _route(data: Any, options: CallOptions | None = None) -> str:
        value = record_key(data, id_field)
        if trailing:
            return f"{base}{value}/"
        return f"{base}/{value}"

    return _route


def _resolve_action(
    kind: ActionKind,
    override: ActionOverride | None,
    *,
    route: Route,
    item_route: Callable[..., str],
    on_error: ErrorHandler | None,
) -> ActionDescriptor:
    defaults: dict[str, Any] = {
        "method": _DEFAULT_METHODS[kind],
        "route": item_route if kind in _DETAIL_ACTIONS else route,
        "prepare": None,
        "prepare_response": None,
        "callback": None,
        "on_error": on_error,
    }
    if override is not None:
        for name in override.model_fields_set:
            defaults[name] = getattr(override, name)
    return ActionDescriptor(**defaults)


def validate_config(raw: StoreConfig | Mapping[str, Any]) -> ResolvedConfig:
    """Normalize a store configuration into a fully resolved one.

    Raises :class:`CrudConfigError` when required fields (``route``,
    ``transport``) are missing or any field is malformed.
    """
    try:
        config = raw if isinstance(raw, StoreConfig) else StoreConfig.model_validate(raw)
    except ValidationError as exc:
        raise CrudConfigError(f"Invalid store configuration: {exc}") from exc

    actions_config = config.actions if config.actions is not None else _ALL_ENABLED
    item_route = detail_route(config.route, config.id)

    actions: dict[ActionKind, ActionDescriptor] = {}
    for kind in STANDARD_ACTIONS:
        setting = actions_config.setting(kind)
        if not setting:
            continue
        override = setting if isinstance(setting, ActionOverride) else None
        actions[kind] = _resolve_action(
            kind,
            override,
            route=config.route,
            item_route=item_route,
            on_error=config.on_error,
        )

    custom_actions = {
        name: CustomActionDescriptor(
            method=action.method,
            route=action.route,
            prepare=action.prepare,
            callback=action.callback,
            on_error=action.on_error or config.on_error,
        )
        for name, action in config.custom_actions.items()
    }
    clashes = sorted(name for name in custom_actions if ActionRef.parse(name).kind != ActionKind.CUSTOM)
    if clashes:
        raise CrudConfigError(f"Custom action names shadow standard actions: {', '.join(clashes)}")

    return ResolvedConfig(
        route=config.route,
        transport=config.transport,
        id=config.id,
        by_key=config.by_key or config.id,
        parse_id_to_int=config.parse_id_to_int,
        on_error=config.on_error,
        state=dict(config.state) if config.state is not None else None,
        include_record=config.include_record,
        record_model=config.record_model,
        select=actions_config.select,
        actions=actions,
        custom_actions=custom_actions,
    )


def resolve_descriptor(
    config: ResolvedConfig,
    action: ActionRef,
    *,
    store_key: str = "",
) -> ActionDescriptor | CustomActionDescriptor:
    """Look up the descriptor for *action*.

    Raises :class:`UnknownActionError` for disabled standard actions and
    unconfigured custom actions.
    """
    if action.is_custom:
        custom = config.custom_actions.get(action.name or "")
        if custom is None:
            raise UnknownActionError(
                f"Store {store_key!r} has no custom action {action.name!r}",
                store_key=store_key,
                action=action.loading_key,
            )
        return custom

    descriptor = config.actions.get(action.kind)
    if descriptor is None:
        raise UnknownActionError(
            f"Action {action.kind.value!r} is not enabled on store {store_key!r}",
            store_key=store_key,
            action=action.loading_key,
        )
    return descriptor
