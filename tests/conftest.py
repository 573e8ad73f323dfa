from typing import Callable

import httpx
import pytest

from scholar_mcp import fetch


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose every request is answered by handler."""
    return fetch.new_client(transport=httpx.MockTransport(handler))


@pytest.fixture
def use_shared_client(monkeypatch):
    """Install a mock-transport client as the server's shared client."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = mock_client(handler)
        monkeypatch.setattr(fetch, "_client", client)
        return client

    return install
