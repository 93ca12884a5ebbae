"""HTTP transport: the protocol the dispatcher calls and an aiohttp implementation."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from crudstore._redact import redact_for_log
from crudstore.config import HttpConfig
from crudstore.exceptions import CrudStoreError, CrudTransportError

_logger = logging.getLogger(__name__)


class TransportResponse(BaseModel):
    """Decoded response handed back to the dispatcher."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: Any = None
    status: int = 200
    headers: dict[str, str] = Field(default_factory=dict)


class Transport(Protocol):
    """Structural transport interface used by the dispatcher.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete. Implementations
    raise on failure; the dispatcher absorbs whatever they raise.
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
        **options: Any,
    ) -> TransportResponse:
        ...


def encode_params(params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten query params into the string pairs aiohttp accepts.

    ``None`` values are dropped, booleans become ``"true"``/``"false"`` and
    list/tuple values repeat the key.
    """
    if not params:
        return []
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if item is None:
                continue
            if isinstance(item, bool):
                pairs.append((str(key), "true" if item else "false"))
            else:
                pairs.append((str(key), str(item)))
    return pairs


def _jsonable(data: Any) -> Any:
    """Convert pydantic models (top-level or in lists) into plain JSON values."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [_jsonable(item) for item in data]
    return data


class HttpTransport:
    """aiohttp-backed :class:`Transport`.

    Usage::

        async with HttpTransport(HttpConfig(base_url="https://api.example.com")) as transport:
            response = await transport.request("get", "/users")
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or HttpConfig()
        self._external_session = session is not None
        self._http_session = session

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> HttpTransport:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise CrudStoreError("Transport not initialized. Use 'async with HttpTransport(...) as transport:'")
        return self._http_session

    def build_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")) or not self._config.base_url:
            return url
        return f"{self._config.base_url.rstrip('/')}/{url.lstrip('/')}"

    # ------------------------------------------------------------------
    # Transport protocol
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
        **options: Any,
    ) -> TransportResponse:
        """Send one JSON request and decode the JSON reply.

        Extra *options* are handed to :meth:`aiohttp.ClientSession.request`;
        a ``headers`` option is merged over the configured default headers.
        """
        session = self._require_session()
        full_url = self.build_url(url)
        verb = str(method).upper()

        headers = self._config.default_headers()
        headers.update({k.lower(): v for k, v in (options.pop("headers", None) or {}).items()})

        request_kwargs: dict[str, Any] = {
            "params": encode_params(params),
            "headers": headers,
            "timeout": aiohttp.ClientTimeout(total=self._config.timeout),
        }
        if data is not None:
            request_kwargs["json"] = _jsonable(data)
        request_kwargs.update(options)

        _logger.debug("%s %s", verb, full_url)
        if self._config.api_trace_enabled:
            _logger.debug(
                "Request trace %s %s params=%s body=%s",
                verb,
                full_url,
                redact_for_log(dict(params or {})),
                redact_for_log(data),
            )

        try:
            async with session.request(verb, full_url, **request_kwargs) as resp:
                text = await resp.text()
                status = resp.status
                response_headers = {k.lower(): v for k, v in resp.headers.items()}
        except aiohttp.ClientError as exc:
            raise CrudTransportError(
                f"{verb} {full_url} failed: {exc}",
                url=full_url,
            ) from exc
        except asyncio.TimeoutError as exc:
            raise CrudTransportError(
                f"{verb} {full_url} timed out after {self._config.timeout}s",
                url=full_url,
            ) from exc

        body = self._decode_body(text, full_url, strict=200 <= status < 300)

        if self._config.api_trace_enabled:
            _logger.debug("Response trace %s %s status=%d body=%s", verb, full_url, status, redact_for_log(body))

        if not 200 <= status < 300:
            raise CrudTransportError(
                f"HTTP {status} from {verb} {full_url}: {text[:200]}",
                status_code=status,
                url=full_url,
                body=body,
            )

        return TransportResponse(data=body, status=status, headers=response_headers)

    @staticmethod
    def _decode_body(text: str, url: str, *, strict: bool) -> Any:
        """Decode a JSON body; empty bodies (e.g. ``204``) decode to ``None``.

        Error responses are allowed to carry non-JSON bodies; those are kept
        as text so they still reach the error handlers.
        """
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            if not strict:
                return text
            raise CrudTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                url=url,
            ) from exc
