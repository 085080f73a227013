from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

from curator.app import dependencies
from curator.app.dependencies import reset_cached_dependencies
from curator.app.services.remote_client import RemoteClient

TEST_SERVER_URL = "http://curator.test"

_ENTITY_TAGS_PATH = re.compile(r"^/(connections|feeds|articles|persons|uris)/(\d+)/tags$")
_ENTITY_TAG_PATH = re.compile(r"^/(connections|feeds|articles|persons|uris)/(\d+)/tags/(\d+)$")
_CONTENT_PATH = re.compile(r"^/(articles|uris)/(\d+)/content$")


class FakeCuratorServer:
    """In-memory stand-in for the curator HTTP API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.catalog: dict[int, str] = {}
        self.associations: dict[tuple[str, int], set[int]] = {}
        self.content: dict[tuple[str, int], httpx.Response] = {}
        self.pages: dict[str, httpx.Response] = {}
        self.failing: dict[tuple[str, str], int] = {}
        self.overrides: dict[tuple[str, str], httpx.Response] = {}
        self.unreachable: set[str] = set()
        self.requests: list[tuple[str, str]] = []

    def seed_catalog(self, **tags_by_name: int) -> None:
        for name, tag_id in tags_by_name.items():
            self.catalog[tag_id] = name

    def fail(self, method: str, path: str, status_code: int = 500) -> None:
        self.failing[(method, path)] = status_code

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        self.requests.append((method, path))

        if request.url.host != "curator.test":
            return self._handle_page(request)
        if path in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if (method, path) in self.overrides:
            return self.overrides[(method, path)]
        if (method, path) in self.failing:
            status_code = self.failing[(method, path)]
            return httpx.Response(status_code, json={"error": f"simulated {status_code}"})

        if method == "GET" and path == "/tags":
            return self._handle_catalog(request)

        match = _ENTITY_TAGS_PATH.match(path)
        if method == "GET" and match:
            key = (match.group(1), int(match.group(2)))
            tag_ids = sorted(self.associations.get(key, set()))
            rows = [
                {"id": tag_id, "name": self.catalog.get(tag_id, f"tag-{tag_id}")}
                for tag_id in tag_ids
            ]
            return httpx.Response(200, json=rows)

        match = _ENTITY_TAG_PATH.match(path)
        if match and method in {"POST", "DELETE"}:
            key = (match.group(1), int(match.group(2)))
            tag_id = int(match.group(3))
            current = self.associations.setdefault(key, set())
            if method == "POST":
                current.add(tag_id)
            else:
                current.discard(tag_id)
            return httpx.Response(204)

        match = _CONTENT_PATH.match(path)
        if method == "GET" and match:
            key = (match.group(1), int(match.group(2)))
            if key in self.content:
                return self.content[key]
            return httpx.Response(404, json={"error": "content not found"})

        return httpx.Response(404, json={"error": f"no route for {method} {path}"})

    def _handle_catalog(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        per_page = int(request.url.params.get("per_page", "20"))
        query = (request.url.params.get("query") or "").lower()
        rows = [
            {"id": tag_id, "name": name}
            for tag_id, name in sorted(self.catalog.items())
            if query in name.lower()
        ]
        total_pages = (len(rows) + per_page - 1) // per_page
        start = (page - 1) * per_page
        return httpx.Response(
            200,
            json={
                "data": rows[start : start + per_page],
                "page": page,
                "per_page": per_page,
                "total": len(rows),
                "total_pages": total_pages,
            },
        )

    def _handle_page(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in self.unreachable:
            raise httpx.ConnectError("name resolution failed", request=request)
        if url in self.pages:
            return self.pages[url]
        return httpx.Response(404, text="missing")


def html_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=body.encode("utf-8"),
        headers={"Content-Type": "text/html; charset=utf-8"},
    )


def json_response(payload: object, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture(autouse=True)
def _isolated_environment(  # pyright: ignore[reportUnusedFunction]
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("CURATOR_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("CURATOR_CONFIG_FILE", str(tmp_path / "absent-config.yaml"))
    monkeypatch.chdir(tmp_path)
    reset_cached_dependencies()

    yield

    reset_cached_dependencies()
    curator_logger = logging.getLogger("curator")
    for handler in list(curator_logger.handlers):
        curator_logger.removeHandler(handler)
        handler.close()
    curator_logger.propagate = True
    curator_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_server() -> FakeCuratorServer:
    return FakeCuratorServer()


@pytest.fixture
def client_factory(fake_server: FakeCuratorServer) -> Callable[[], RemoteClient]:
    def _build() -> RemoteClient:
        return RemoteClient(
            base_url=TEST_SERVER_URL,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake_server.handle)),
        )

    return _build


@pytest.fixture
def remote_client(client_factory: Callable[[], RemoteClient]) -> RemoteClient:
    return client_factory()


@pytest.fixture
def patched_remote_client(
    monkeypatch: pytest.MonkeyPatch,
    client_factory: Callable[[], RemoteClient],
) -> None:
    monkeypatch.setattr(dependencies, "build_remote_client", client_factory)
