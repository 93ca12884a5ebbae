"""HTTP configuration for the bundled crudstore transport."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from crudstore._constants import DEFAULT_TIMEOUT_S, USER_AGENT


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class HttpConfig:
    """Configuration for :class:`crudstore._transport.HttpTransport`.

    Parameters
    ----------
    base_url : str
        Prefix joined to relative routes (``"/users"``). Absolute routes
        (``"https://..."``) are used unchanged. Empty means routes are
        already absolute.
    timeout : float
        Total request timeout in seconds.
    headers : dict[str, str]
        Extra headers sent with every request.
    auth_token : str or None
        Sent as ``Authorization: Bearer <token>`` when set.
    user_agent : str
        ``User-Agent`` header value.
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    """

    base_url: str = ""
    timeout: float = DEFAULT_TIMEOUT_S
    headers: dict[str, str] = dataclasses.field(default_factory=dict)
    auth_token: str | None = None
    user_agent: str = USER_AGENT
    api_trace_enabled: bool = False

    def default_headers(self) -> dict[str, str]:
        """Headers applied to every request before per-call overrides."""
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": self.user_agent,
        }
        if self.auth_token:
            headers["authorization"] = f"Bearer {self.auth_token}"
        headers.update({k.lower(): v for k, v in self.headers.items()})
        return headers

    @classmethod
    def from_env(cls, **overrides: Any) -> HttpConfig:
        """Create configuration from ``CRUDSTORE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CRUDSTORE_BASE_URL": "base_url",
            "CRUDSTORE_AUTH_TOKEN": "auth_token",
            "CRUDSTORE_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # timeout is numeric, handle separately
        timeout_env = env.get("CRUDSTORE_TIMEOUT")
        if timeout_env is not None and "timeout" not in overrides:
            config_kwargs["timeout"] = float(timeout_env)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("CRUDSTORE_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
