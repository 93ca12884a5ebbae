from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from crudstore._transport import HttpTransport, encode_params
from crudstore.config import HttpConfig
from crudstore.crud import use_crud
from crudstore.exceptions import CrudStoreError, CrudTransportError
from crudstore.registry import StoreRegistry


@dataclass
class FakeApi:
    """In-process REST backend for a ``users`` collection."""

    users: dict[int, dict[str, Any]] = field(default_factory=dict)
    requests: list[dict[str, Any]] = field(default_factory=list)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/users", self._list)
        app.router.add_post("/users", self._create)
        app.router.add_patch("/users/{id}", self._update)
        app.router.add_delete("/users/{id}", self._delete)
        app.router.add_get("/broken", self._broken)
        app.router.add_get("/teapot", self._teapot)
        return app

    async def _record(self, request: web.Request) -> dict[str, Any] | None:
        body = await request.json() if request.can_read_body else None
        self.requests.append(
            {
                "method": request.method,
                "path": request.path,
                "query": list(request.query.items()),
                "headers": request.headers.copy(),
                "body": body,
            }
        )
        return body

    async def _list(self, request: web.Request) -> web.Response:
        await self._record(request)
        return web.json_response({"results": list(self.users.values()), "count": len(self.users)})

    async def _create(self, request: web.Request) -> web.Response:
        body = await self._record(request) or {}
        user = {"id": max(self.users, default=0) + 1, **body}
        self.users[user["id"]] = user
        return web.json_response(user, status=201)

    async def _update(self, request: web.Request) -> web.Response:
        body = await self._record(request) or {}
        user_id = int(request.match_info["id"])
        if user_id not in self.users:
            return web.json_response({"detail": "not found"}, status=404)
        self.users[user_id] = {**self.users[user_id], **body}
        return web.json_response(self.users[user_id])

    async def _delete(self, request: web.Request) -> web.Response:
        await self._record(request)
        self.users.pop(int(request.match_info["id"]), None)
        return web.Response(status=204)

    async def _broken(self, request: web.Request) -> web.Response:
        await self._record(request)
        return web.Response(text="<html>oops</html>", content_type="text/html")

    async def _teapot(self, request: web.Request) -> web.Response:
        await self._record(request)
        return web.Response(status=418, text="short and stout")


def test_encode_params() -> None:
    assert encode_params(None) == []
    assert encode_params({"page": 2, "active": True, "deleted": False, "q": None, "tag": ["a", "b"]}) == [
        ("page", "2"),
        ("active", "true"),
        ("deleted", "false"),
        ("tag", "a"),
        ("tag", "b"),
    ]


@pytest.mark.asyncio
async def test_get_sends_params_and_default_headers() -> None:
    api = FakeApi(users={1: {"id": 1, "name": "Ada"}})
    async with TestServer(api.app()) as server:
        config = HttpConfig(base_url=str(server.make_url("/")), auth_token="tok")
        async with HttpTransport(config) as transport:
            response = await transport.request("get", "/users", params={"page": 2, "active": True})

    assert response.status == 200
    assert response.data == {"results": [{"id": 1, "name": "Ada"}], "count": 1}
    sent = api.requests[0]
    assert sent["query"] == [("page", "2"), ("active", "true")]
    assert sent["headers"]["Authorization"] == "Bearer tok"
    assert sent["headers"]["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_post_sends_json_body_and_per_call_headers() -> None:
    api = FakeApi()
    async with TestServer(api.app()) as server:
        async with HttpTransport(HttpConfig(base_url=str(server.make_url("/")))) as transport:
            response = await transport.request(
                "post",
                "/users",
                data={"name": "Grace"},
                headers={"X-Request-Id": "r-1"},
            )

    assert response.status == 201
    assert response.data == {"id": 1, "name": "Grace"}
    assert api.requests[0]["body"] == {"name": "Grace"}
    assert api.requests[0]["headers"]["X-Request-Id"] == "r-1"


@pytest.mark.asyncio
async def test_empty_body_decodes_to_none() -> None:
    api = FakeApi(users={1: {"id": 1}})
    async with TestServer(api.app()) as server:
        async with HttpTransport(HttpConfig(base_url=str(server.make_url("/")))) as transport:
            response = await transport.request("delete", "/users/1")

    assert response.status == 204
    assert response.data is None


@pytest.mark.asyncio
async def test_error_status_raises_with_decoded_body() -> None:
    api = FakeApi()
    async with TestServer(api.app()) as server:
        async with HttpTransport(HttpConfig(base_url=str(server.make_url("/")))) as transport:
            with pytest.raises(CrudTransportError) as not_found:
                await transport.request("patch", "/users/9", data={"name": "x"})
            with pytest.raises(CrudTransportError) as teapot:
                await transport.request("get", "/teapot")

    assert not_found.value.status_code == 404
    assert not_found.value.body == {"detail": "not found"}
    assert teapot.value.status_code == 418
    assert teapot.value.body == "short and stout"


@pytest.mark.asyncio
async def test_invalid_json_on_success_raises() -> None:
    api = FakeApi()
    async with TestServer(api.app()) as server:
        async with HttpTransport(HttpConfig(base_url=str(server.make_url("/")))) as transport:
            with pytest.raises(CrudTransportError, match="Invalid JSON"):
                await transport.request("get", "/broken")


@pytest.mark.asyncio
async def test_connection_failure_raises_transport_error() -> None:
    config = HttpConfig(base_url=f"http://127.0.0.1:{unused_port()}", timeout=2.0)
    async with HttpTransport(config) as transport:
        with pytest.raises(CrudTransportError) as excinfo:
            await transport.request("get", "/users")

    assert excinfo.value.status_code is None
    assert excinfo.value.url.endswith("/users")


@pytest.mark.asyncio
async def test_request_outside_context_manager_raises() -> None:
    with pytest.raises(CrudStoreError, match="not initialized"):
        await HttpTransport().request("get", "https://api.example.com/users")


@pytest.mark.asyncio
async def test_injected_session_is_not_closed() -> None:
    async with aiohttp.ClientSession() as session:
        async with HttpTransport(session=session):
            pass
        assert session.closed is False


def test_build_url_joins_base_and_keeps_absolute_routes() -> None:
    transport = HttpTransport(HttpConfig(base_url="https://api.example.com/v1/"))

    assert transport.build_url("/users") == "https://api.example.com/v1/users"
    assert transport.build_url("users/1/") == "https://api.example.com/v1/users/1/"
    assert transport.build_url("http://other.example.com/x") == "http://other.example.com/x"
    assert HttpTransport().build_url("/users") == "/users"


@pytest.mark.asyncio
async def test_store_round_trip_against_http_backend() -> None:
    api = FakeApi(users={1: {"id": 1, "name": "Ada", "active": True}})
    errors: list[BaseException] = []

    async with TestServer(api.app()) as server:
        async with HttpTransport(HttpConfig(base_url=str(server.make_url("/")))) as transport:
            users = use_crud(
                StoreRegistry().get_or_create(
                    "users",
                    {"route": "/users", "transport": transport, "on_error": errors.append},
                )
            )

            await users.get_list()
            assert users.list() == [{"id": 1, "name": "Ada", "active": True}]
            assert users.count() == 1

            await users.create({"name": "Grace", "active": True})
            assert users.count() == 2

            await users.update({"id": 2, "active": False})
            await users.delete({"id": 1})

            assert users.list() == [{"id": 2, "name": "Grace", "active": False}]
            assert users.count() == 1

            assert await users.update({"id": 9, "name": "ghost"}) is None
            assert isinstance(users.update.error, CrudTransportError)
            assert users.update.id == 9

    assert [type(exc) for exc in errors] == [CrudTransportError]
    assert [(r["method"], r["path"]) for r in api.requests] == [
        ("GET", "/users"),
        ("POST", "/users"),
        ("PATCH", "/users/2"),
        ("DELETE", "/users/1"),
        ("PATCH", "/users/9"),
    ]
