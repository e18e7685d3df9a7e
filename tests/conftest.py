"""
Shared pytest fixtures for qbt tests.

FakeWebUI stands in for a qBittorrent WebUI behind an httpx.MockTransport:
it answers from a per-path route table and records every request it sees.
"""

import os
import sys
from urllib.parse import parse_qsl

import httpx
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from qbt import QBittorrentClient, resolve_target


class FakeWebUI:
    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, path, status=200, text="", headers=None):
        self.routes[path] = (status, text, headers or {})

    def fail_with(self, exc_class):
        """Every request raises exc_class before a response is produced."""
        def handler(request):
            self.requests.append(request)
            raise exc_class("mocked transport failure", request=request)
        self._handler = handler

    def _handler(self, request):
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v2")
        status, text, headers = self.routes.get(path, (404, "Not Found", {}))
        return httpx.Response(status, text=text, headers=headers)

    @property
    def transport(self):
        return httpx.MockTransport(lambda request: self._handler(request))

    def form(self, index=-1) -> dict:
        """Form-decodes the body of a recorded request."""
        body = self.requests[index].content.decode("ascii")
        return dict(parse_qsl(body, keep_blank_values=True))

    def paths(self) -> list:
        return [r.url.path for r in self.requests]


@pytest.fixture
def webui():
    return FakeWebUI()


@pytest.fixture
def client(webui):
    """A client that is already logged in with SID=abc123."""
    return QBittorrentClient(resolve_target("box"), "SID=abc123", transport=webui.transport)
