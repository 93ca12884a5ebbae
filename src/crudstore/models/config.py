"""Store configuration models: what callers write and what validation produces."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from crudstore._constants import DEFAULT_ID_FIELD
from crudstore.models._base import CrudBaseModel
from crudstore.models.actions import (
    ActionDescriptor,
    ActionKind,
    ActionOverride,
    CustomActionConfig,
    CustomActionDescriptor,
    ErrorHandler,
    Route,
)

SelectMode = Literal[False, "single", "multiple"]

ActionSetting = bool | ActionOverride | None


class ActionsConfig(CrudBaseModel):
    """Which standard actions a store exposes.

    ``True`` enables an action with its defaults, an override object enables
    it with some fields replaced, ``False``/absent disables it. ``select``
    takes ``"single"`` or ``"multiple"``; ``True`` means ``"single"``.
    """

    get: ActionSetting = None
    get_list: ActionSetting = None
    create: ActionSetting = None
    update: ActionSetting = None
    delete: ActionSetting = None
    select: SelectMode = False

    @field_validator("select", mode="before")
    @classmethod
    def _normalize_select(cls, value: Any) -> Any:
        if value is True:
            return "single"
        if value is None:
            return False
        return value

    def setting(self, kind: ActionKind) -> ActionSetting:
        return getattr(self, kind.value)


class StoreConfig(CrudBaseModel):
    """Caller-supplied, partially optional store configuration.

    Parameters
    ----------
    route : str or callable
        Base collection route (``"/users"``) or ``route(payload, options)``.
    transport : Transport
        Object with an async ``request(method, url, *, params, data)``.
    id : str
        Field used to build detail routes and loading-state ids.
    by_key : str or None
        Field used to key the collection. Defaults to ``id``.
    parse_id_to_int : bool
        Store digit-string keys as ``int``.
    actions : ActionsConfig or None
        Standard action table. ``None`` enables all five standard actions.
    custom_actions : dict
        Named custom actions.
    on_error : callable or None
        Error handler inherited by every action that does not set its own.
    state : dict or None
        Initial local state. ``None`` means the store has no local state.
    include_record : bool
        Expose the raw keyed collection on the crud view.
    record_model : type[BaseModel] or None
        Validate fetched records into this pydantic model.
    """

    route: Route
    transport: Any
    id: str = DEFAULT_ID_FIELD
    by_key: str | None = None
    parse_id_to_int: bool = False
    actions: ActionsConfig | None = None
    custom_actions: dict[str, CustomActionConfig] = Field(default_factory=dict)
    on_error: ErrorHandler | None = None
    state: dict[str, Any] | None = None
    include_record: bool = False
    record_model: type[BaseModel] | None = None

    @field_validator("transport")
    @classmethod
    def _check_transport(cls, value: Any) -> Any:
        if value is None or not callable(getattr(value, "request", None)):
            raise ValueError("transport must provide an async request() method")
        return value

    @field_validator("route")
    @classmethod
    def _check_route(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            raise ValueError("route must be non-empty")
        return value


class ResolvedConfig(CrudBaseModel):
    """Validated configuration: every enabled action fully populated."""

    route: Route
    transport: Any
    id: str
    by_key: str
    parse_id_to_int: bool
    on_error: ErrorHandler | None
    state: dict[str, Any] | None
    include_record: bool
    record_model: type[BaseModel] | None
    select: SelectMode
    actions: dict[ActionKind, ActionDescriptor]
    custom_actions: dict[str, CustomActionDescriptor]

    def is_enabled(self, kind: ActionKind) -> bool:
        return kind in self.actions
