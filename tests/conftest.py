"""Shared fixtures for all tests."""

import json

import httpx
import pytest

from ragpilot.core.transport import HttpTransport

BASE_URL = "http://backend.test/api"


class FakeBackend:
    """Canned backend behind httpx.MockTransport that records every request.

    Routes are keyed by (method, path relative to the API root). A route can
    be an httpx.Response, an exception to raise, or a callable taking the
    request (sync or async) for anything more involved.
    """

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, route=None, *, json=None, status: int = 200):
        if route is None:
            route = httpx.Response(status, json=json)
        self.routes[(method, path)] = route

    def handler(self, request: httpx.Request):
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": f"No route for {request.method} {path}"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.removeprefix("/api") == path
        ]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def transport(backend) -> HttpTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
    return HttpTransport(BASE_URL, timeout=5, client=client)
