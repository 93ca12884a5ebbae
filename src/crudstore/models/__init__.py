"""Configuration, action and loading-state models."""

from crudstore.models._base import CrudBaseModel, HttpMethod
from crudstore.models.actions import (
    STANDARD_ACTIONS,
    ActionDescriptor,
    ActionKind,
    ActionOverride,
    ActionRef,
    CallOptions,
    CustomActionConfig,
    CustomActionDescriptor,
)
from crudstore.models.config import ActionsConfig, ResolvedConfig, SelectMode, StoreConfig
from crudstore.models.loading import DEFAULT_LOADING_STATE, LoadingState

__all__ = [
    "DEFAULT_LOADING_STATE",
    "STANDARD_ACTIONS",
    "ActionDescriptor",
    "ActionKind",
    "ActionOverride",
    "ActionRef",
    "ActionsConfig",
    "CallOptions",
    "CrudBaseModel",
    "CustomActionConfig",
    "CustomActionDescriptor",
    "HttpMethod",
    "LoadingState",
    "ResolvedConfig",
    "SelectMode",
    "StoreConfig",
]
