"""
Shared fixtures for binding-tool tests.

No test touches the network: HTTP goes through FakeSession, which serves canned
bodies and records every requested URL.
"""

import threading

import pytest
import requests

from binding_tool.binding_tool_config import BindingToolConfig


class FakeResponse:
    def __init__(self, url: str, body: bytes = b"", status_code: int = 200):
        self.url = url
        self.body = body
        self.status_code = status_code
        self.closed = False

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error for url: {self.url}")

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """
    Thread-safe stand-in for requests.Session.

    `routes` maps a URL to bytes (200 response), an int (empty response with that
    status) or an exception instance (raised from get). Unknown URLs return 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requested = []
        self.timeouts = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, stream=False, timeout=None):
        with self._lock:
            self.requested.append(url)
            self.timeouts.append(timeout)
        route = self.routes.get(url, 404)
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, int):
            return FakeResponse(url, b"", route)
        return FakeResponse(url, route)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def bindings_root(tmp_path):
    root = tmp_path / "bindings"
    root.mkdir()
    return root


@pytest.fixture
def config(bindings_root):
    return BindingToolConfig(bindings_root=bindings_root, max_simultaneous=3)


@pytest.fixture
def make_session():
    """Factory for FakeSession instances, given a URL -> response mapping."""
    return FakeSession
