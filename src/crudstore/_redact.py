"""Helpers for safe debug logging.

Request and response bodies flowing through crudstore are caller data and
may carry credentials. This module redacts sensitive fields before they are
emitted in DEBUG traces.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "accesstoken",
        "refreshtoken",
        "apikey",
        "authorization",
        "cookie",
        "setcookie",
    }
)


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if _normalize_key(key) in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        return redact_for_log(model_dump(), max_string=max_string, _depth=_depth + 1)

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
