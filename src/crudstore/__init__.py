"""crudstore - Async entity-synchronization stores backed by HTTP resources."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("crudstore")
except PackageNotFoundError:
    __version__ = "0+local"
from crudstore._transport import HttpTransport, Transport, TransportResponse
from crudstore.config import HttpConfig
from crudstore.crud import ActionCallable, CrudView, use_crud
from crudstore.dispatch import dispatch
from crudstore.exceptions import (
    CrudConfigError,
    CrudStoreError,
    CrudTransportError,
    UnknownActionError,
)
from crudstore.models import (
    ActionDescriptor,
    ActionKind,
    ActionOverride,
    ActionRef,
    ActionsConfig,
    CallOptions,
    CustomActionConfig,
    CustomActionDescriptor,
    HttpMethod,
    LoadingState,
    ResolvedConfig,
    StoreConfig,
)
from crudstore.registry import StoreRegistry
from crudstore.state.loading import (
    action_error,
    finish_action,
    get_loading_state,
    initiate_action,
    set_loading_state,
)
from crudstore.state.observable import ObservableCell
from crudstore.state.store import CrudSnapshot, CrudStore
from crudstore.validation import detail_route, resolve_descriptor, validate_config

__all__ = [
    "__version__",
    "ActionCallable",
    "ActionDescriptor",
    "ActionKind",
    "ActionOverride",
    "ActionRef",
    "ActionsConfig",
    "CallOptions",
    "CrudConfigError",
    "CrudSnapshot",
    "CrudStore",
    "CrudStoreError",
    "CrudTransportError",
    "CrudView",
    "CustomActionConfig",
    "CustomActionDescriptor",
    "HttpConfig",
    "HttpMethod",
    "HttpTransport",
    "LoadingState",
    "ObservableCell",
    "ResolvedConfig",
    "StoreConfig",
    "StoreRegistry",
    "Transport",
    "TransportResponse",
    "UnknownActionError",
    "action_error",
    "detail_route",
    "dispatch",
    "finish_action",
    "get_loading_state",
    "initiate_action",
    "resolve_descriptor",
    "set_loading_state",
    "use_crud",
    "validate_config",
]
