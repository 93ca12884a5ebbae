"""Record helpers: key extraction and shallow merging.

Records are either plain mappings (decoded JSON) or pydantic models.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

_MISSING = object()

_INT_KEY = re.compile(r"-?[0-9]+")


def record_key(data: Any, field: str, default: Any = None) -> Any:
    """Return the value of *field* on *data*.

    Scalars (``str``/``int``) are taken to be the key value itself, so
    callers can pass either a record or a bare id.
    """
    if data is None:
        return default
    if isinstance(data, (str, int)) and not isinstance(data, bool):
        return data
    if isinstance(data, Mapping):
        return data.get(field, default)
    value = getattr(data, field, _MISSING)
    return default if value is _MISSING else value


def storage_key(value: Any, *, parse_id_to_int: bool = False) -> Any:
    """Normalize a key value for use in the collection."""
    if parse_id_to_int and isinstance(value, str):
        stripped = value.strip()
        if _INT_KEY.fullmatch(stripped):
            return int(stripped)
    return value


def as_patch(data: Any) -> dict[str, Any]:
    """Fields carried by a partial record."""
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    if isinstance(data, Mapping):
        return dict(data)
    raise TypeError(f"cannot merge record of type {type(data).__name__}")


def merge_record(existing: Any, patch: Any) -> Any:
    """Shallow-merge *patch* over *existing*; fields not in the patch are kept."""
    fields = as_patch(patch)
    if isinstance(existing, BaseModel):
        return existing.model_copy(update=fields)
    return {**as_patch(existing), **fields}
