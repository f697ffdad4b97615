import json
import os
import sys
from typing import Callable

import httpx
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from backend.app.utils.global_state import GlobalState


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"Content-Type": "application/json"})


class RecordingHandler:
    """MockTransport handler that records every request and replies via `reply`."""

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response]):
        self.reply = reply
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)


@pytest.fixture
def mock_http():
    """Factory: mock_http(reply) -> (AsyncClient, RecordingHandler)."""

    def _make(reply):
        handler = RecordingHandler(reply)
        return httpx.AsyncClient(transport=httpx.MockTransport(handler)), handler

    return _make


@pytest.fixture
def shared_http(mock_http):
    """Installs a mocked client as the shared singleton for the duration of a test."""
    def _install(reply):
        client, handler = mock_http(reply)
        GlobalState.set_http_client(client)
        return handler

    yield _install
    GlobalState.set_http_client(None)
