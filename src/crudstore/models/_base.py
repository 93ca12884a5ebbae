"""Base model for crudstore configuration and state models.

Every crudstore model inherits from :class:`CrudBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase configuration keys
  (``getList``, ``byKey``, ``onError``) map to snake_case fields, while
  ``populate_by_name`` keeps snake_case keys working.
* ``frozen=True``; resolved configuration is immutable metadata.
* ``arbitrary_types_allowed`` so callables, transports and record model
  classes can be stored as field values.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class HttpMethod(StrEnum):
    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


def normalize_method(value: Any) -> Any:
    """Lowercase string methods so ``"PUT"`` and ``"put"`` both validate."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


class CrudBaseModel(BaseModel):
    """Base for crudstore models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
        arbitrary_types_allowed=True,
    )
