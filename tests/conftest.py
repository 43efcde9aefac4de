from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBilibili:
    """Path-routed stand-in for api.bilibili.com, recording every request."""

    def __init__(self) -> None:
        self.routes: dict[str, Handler] = {}
        self.requests: list[httpx.Request] = []

    def json(self, path: str, body: Any, status: int = 200) -> None:
        self.routes[path] = lambda _req: httpx.Response(status, json=body)

    def route(self, path: str, handler: Handler) -> None:
        self.routes[path] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"code": -404, "message": "not found"})
        return handler(request)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def api() -> FakeBilibili:
    return FakeBilibili()


def rank_envelope(count: int, prefix: str = "show") -> dict[str, Any]:
    return {
        "code": 0,
        "result": {
            "list": [
                {"title": f"{prefix} {i}", "season_id": 1000 + i, "new_ep": {"index_show": "全12话"}}
                for i in range(count)
            ]
        },
    }


def follow_envelope(count: int, prefix: str) -> dict[str, Any]:
    return {
        "code": 0,
        "result": {
            "list": [
                {"title": f"{prefix} {i}", "season_id": i, "progress": f"看到第{i + 1}话"}
                for i in range(count)
            ]
        },
    }
