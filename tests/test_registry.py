from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest

from crudstore._transport import TransportResponse
from crudstore.exceptions import CrudConfigError
from crudstore.models.actions import STANDARD_ACTIONS, ActionKind
from crudstore.models.loading import LoadingState
from crudstore.registry import StoreRegistry


class _Transport:
    async def request(self, method: str, url: str, **_kwargs: Any) -> TransportResponse:
        return TransportResponse()


def test_same_key_returns_same_store_and_first_config_wins() -> None:
    registry = StoreRegistry()
    transport = _Transport()

    first = registry.get_or_create("users", {"route": "/users", "transport": transport})
    second = registry.get_or_create(
        "users",
        {"route": "/people", "transport": transport, "actions": {"get": True}},
    )

    assert first is second
    assert second.config.route == "/users"
    assert set(second.config.actions) == set(STANDARD_ACTIONS)


def test_new_store_starts_empty() -> None:
    registry = StoreRegistry()
    store = registry.get_or_create("users", {"route": "/users", "transport": _Transport()})

    assert store.key == "users"
    assert store.record is None
    assert store.list() is None
    assert store.count == 0
    assert store.loading_state("get_list") == LoadingState()
    assert store.state is None


def test_local_state_initialized_from_config() -> None:
    registry = StoreRegistry()
    initial = {"filter": "", "page": 1}
    store = registry.get_or_create("users", {"route": "/users", "transport": _Transport(), "state": initial})

    assert store.state == {"filter": "", "page": 1}

    store.set_state(page=2)
    # The caller's dict is never mutated by the store.
    assert initial == {"filter": "", "page": 1}


def test_different_keys_get_different_stores() -> None:
    registry = StoreRegistry()
    users = registry.get_or_create("users", {"route": "/users", "transport": _Transport()})
    posts = registry.get_or_create(
        "posts",
        {"route": "/posts", "transport": _Transport(), "actions": {"getList": True}},
    )

    assert users is not posts
    assert set(posts.config.actions) == {ActionKind.GET_LIST}
    assert sorted(registry.keys()) == ["posts", "users"]
    assert len(registry) == 2
    assert "users" in registry
    assert registry.get("posts") is posts
    assert registry.get("comments") is None


def test_registries_are_independent() -> None:
    config = {"route": "/users", "transport": _Transport()}

    assert StoreRegistry().get_or_create("users", config) is not StoreRegistry().get_or_create("users", config)


def test_invalid_config_is_not_registered() -> None:
    registry = StoreRegistry()

    with pytest.raises(CrudConfigError):
        registry.get_or_create("users", {"route": "/users"})

    assert "users" not in registry

    store = registry.get_or_create("users", {"route": "/users", "transport": _Transport()})
    assert registry.get("users") is store


def test_concurrent_first_calls_share_one_store() -> None:
    registry = StoreRegistry()
    barrier = threading.Barrier(8)

    def _create(index: int) -> int:
        barrier.wait()
        store = registry.get_or_create("users", {"route": f"/users-{index}", "transport": _Transport()})
        return id(store)

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = set(pool.map(_create, range(8)))

    assert len(ids) == 1
    assert len(registry) == 1
