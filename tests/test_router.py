"""Tests for app.router: route composition by variant, mount order and prefixes."""

from __future__ import annotations

import asyncio
from typing import NamedTuple

import pytest
from fastapi import APIRouter, Depends, FastAPI
from fastapi.testclient import TestClient

from app.auth import require_api_key
from app.manifest import ModuleManifest, NoRoutes, SingleRoutes, SplitRoutes
from app.router import compose_router, mount_prefix
from app.server import install_error_handlers
from app.tasks import run_module_tasks


def _router(tag: str, path: str = "/ping") -> APIRouter:
    router = APIRouter()

    @router.get(path)
    async def handler():
        return {"from": tag}

    return router


def _client(manifests) -> TestClient:
    app = FastAPI()
    install_error_handlers(app)
    app.include_router(compose_router(manifests), prefix="/api")
    return TestClient(app)


@pytest.mark.parametrize(
    "base_path,expected",
    [(None, ""), ("/", ""), ("/leagues", "/leagues"), ("leagues", "/leagues"), ("/x/", "/x")],
)
def test_mount_prefix(base_path, expected) -> None:
    assert mount_prefix(base_path) == expected


def test_compose_router_empty_has_no_routes() -> None:
    assert compose_router([]).routes == []


def test_single_routes_mounted_at_base_path() -> None:
    client = _client([ModuleManifest(name="a", base_path="/a", routes=SingleRoutes(_router("a")))])
    r = client.get("/api/a/ping")
    assert r.status_code == 200
    assert r.json() == {"from": "a"}


def test_missing_base_path_mounts_at_root() -> None:
    client = _client([ModuleManifest(name="root", routes=SingleRoutes(_router("root")))])
    assert client.get("/api/ping").json() == {"from": "root"}


def test_split_routes_mounts_public_and_private() -> None:
    private = APIRouter(dependencies=[Depends(require_api_key("k"))])

    @private.post("/ping")
    async def create():
        return {"from": "private"}

    manifest = ModuleManifest(
        name="b", base_path="/b", routes=SplitRoutes(public=_router("public"), private=private)
    )
    client = _client([manifest])
    assert client.get("/api/b/ping").json() == {"from": "public"}
    assert client.post("/api/b/ping").status_code == 401
    assert client.post("/api/b/ping", headers={"x-api-key": "k"}).json() == {"from": "private"}


def test_split_routes_public_only() -> None:
    client = _client(
        [ModuleManifest(name="p", base_path="/p", routes=SplitRoutes(public=_router("p")))]
    )
    assert client.get("/api/p/ping").status_code == 200


def test_no_routes_and_falsy_manifests_are_skipped() -> None:
    router = compose_router([None, ModuleManifest(name="quiet", routes=NoRoutes())])
    assert router.routes == []


def test_first_mounted_wins_on_overlap() -> None:
    client = _client(
        [
            ModuleManifest(name="first", base_path="/x", routes=SingleRoutes(_router("first"))),
            ModuleManifest(name="second", base_path="/x", routes=SingleRoutes(_router("second"))),
        ]
    )
    assert client.get("/api/x/ping").json() == {"from": "first"}


def test_unknown_route_contribution_raises() -> None:
    class Weird(NamedTuple):
        stuff: int = 1

    with pytest.raises(TypeError, match="unsupported route contribution"):
        compose_router([ModuleManifest(name="weird", routes=Weird())])


def test_two_module_application_routes_and_tasks() -> None:
    ran: list[str] = []

    async def task_a() -> None:
        ran.append("a")

    private_b = APIRouter(dependencies=[Depends(require_api_key("k"))])

    @private_b.delete("/item")
    async def delete_item():
        return {"deleted": True}

    manifests = [
        ModuleManifest(
            name="A", base_path="/a", routes=SingleRoutes(_router("A")), tasks=(task_a,)
        ),
        ModuleManifest(
            name="B",
            base_path="/b",
            routes=SplitRoutes(public=_router("B", "/item"), private=private_b),
        ),
    ]
    client = _client(manifests)
    assert client.get("/api/a/ping").json() == {"from": "A"}
    assert client.get("/api/b/item").json() == {"from": "B"}
    assert client.delete("/api/b/item").status_code == 401
    assert client.delete("/api/b/item", headers={"x-api-key": "k"}).json() == {"deleted": True}
    assert client.get("/api/c/ping").status_code == 404

    assert asyncio.run(run_module_tasks(manifests)) == 1
    assert ran == ["a"]
