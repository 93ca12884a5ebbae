"""Custom exception hierarchy for crudstore."""

from __future__ import annotations

from typing import Any


class CrudStoreError(Exception):
    """Base exception for all crudstore errors."""


class CrudConfigError(CrudStoreError):
    """Invalid or missing store configuration."""


class UnknownActionError(CrudConfigError):
    """Dispatched an action that is disabled or was never configured.

    Raised instead of being absorbed into loading state: calling an action
    the store was not configured with is a caller bug, not a request failure.
    """

    def __init__(self, message: str, *, store_key: str = "", action: str = "") -> None:
        self.store_key = store_key
        self.action = action
        super().__init__(message)


class CrudTransportError(CrudStoreError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(message)
