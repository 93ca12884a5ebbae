"""Action identifiers and descriptors.

Standard actions form a closed set (:class:`ActionKind`); custom actions are
named by the caller. :class:`ActionRef` wraps both so that dispatch resolves
a single tagged value instead of switching on loose strings.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import field_validator

from crudstore.models._base import CrudBaseModel, HttpMethod, normalize_method

Route = str | Callable[..., str]
Prepare = Callable[..., Any]
Callback = Callable[[Any], Any]
ErrorHandler = Callable[[Any], Any]


class ActionKind(StrEnum):
    GET = "get"
    GET_LIST = "get_list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CUSTOM = "custom"


STANDARD_ACTIONS: tuple[ActionKind, ...] = (
    ActionKind.GET,
    ActionKind.GET_LIST,
    ActionKind.CREATE,
    ActionKind.UPDATE,
    ActionKind.DELETE,
)

# camelCase spellings accepted wherever an action is named by string.
_ACTION_ALIASES: dict[str, ActionKind] = {"getList": ActionKind.GET_LIST}


@dataclasses.dataclass(frozen=True, slots=True)
class ActionRef:
    """A standard action, or a custom action identified by ``name``."""

    kind: ActionKind
    name: str | None = None

    def __post_init__(self) -> None:
        if (self.kind == ActionKind.CUSTOM) != bool(self.name):
            raise ValueError("custom actions need a name; standard actions must not have one")

    @classmethod
    def custom(cls, name: str) -> ActionRef:
        return cls(ActionKind.CUSTOM, name)

    @classmethod
    def parse(cls, value: ActionRef | ActionKind | str) -> ActionRef:
        """Turn an action name into a reference.

        Standard action names (``"get_list"`` or ``"getList"``) map to their
        kind; any other string names a custom action.
        """
        if isinstance(value, ActionRef):
            return value
        if isinstance(value, ActionKind):
            return cls(value) if value != ActionKind.CUSTOM else cls.custom(value.value)
        kind = _ACTION_ALIASES.get(value)
        if kind is None and value in STANDARD_ACTIONS:
            kind = ActionKind(value)
        return cls(kind) if kind is not None else cls.custom(value)

    @property
    def is_custom(self) -> bool:
        return self.kind == ActionKind.CUSTOM

    @property
    def loading_key(self) -> str:
        """Key under which this action's loading state is tracked."""
        return self.name if self.name else self.kind.value

    def __str__(self) -> str:
        return self.loading_key


@dataclasses.dataclass(frozen=True, slots=True)
class CallOptions:
    """Call-time context passed to routes and transforms."""

    args: Any = None
    params: Any = None
    payload: Any = None


class ActionOverride(CrudBaseModel):
    """Partial per-action configuration.

    Only fields the caller actually supplied (``model_fields_set``) replace
    the defaults; an explicit ``None`` therefore clears a default.
    """

    method: HttpMethod | None = None
    route: Route | None = None
    prepare: Prepare | None = None
    prepare_response: Prepare | None = None
    callback: Callback | None = None
    on_error: ErrorHandler | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        return normalize_method(value)


class CustomActionConfig(CrudBaseModel):
    """Caller-supplied configuration of a custom action."""

    route: Route
    method: HttpMethod = HttpMethod.GET
    prepare: Prepare | None = None
    callback: Callback | None = None
    on_error: ErrorHandler | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        return normalize_method(value)


class ActionDescriptor(CrudBaseModel):
    """Fully resolved configuration of a standard action."""

    method: HttpMethod
    route: Route
    prepare: Prepare | None
    prepare_response: Prepare | None
    callback: Callback | None
    on_error: ErrorHandler | None


class CustomActionDescriptor(CrudBaseModel):
    """Fully resolved configuration of a custom action.

    Custom actions make no assumption about the response shape; reacting to
    the response (usually via ``patch_list``) is up to the callbacks.
    """

    method: HttpMethod
    route: Route
    prepare: Prepare | None
    callback: Callback | None
    on_error: ErrorHandler | None
