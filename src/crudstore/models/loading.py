"""Per-action loading state."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict

from crudstore.models._base import CrudBaseModel


class LoadingState(CrudBaseModel):
    """Execution state of one action on one store.

    ``sequence`` counts how many times the entry has been overwritten: the
    first write leaves it at ``0``. Subscribers use it to tell two
    structurally equal states apart.
    """

    model_config = ConfigDict(extra="ignore")

    is_loading: bool = False
    error: Any = None
    response: Any = None
    id: str | int | None = None
    sequence: int = 0


DEFAULT_LOADING_STATE = LoadingState()
