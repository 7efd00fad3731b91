"""Shared fixtures for Fluxez SDK tests.

HTTP is served by ``httpx.MockTransport``; every request the SDK sends is
recorded so tests can assert on method, path, headers and body.
"""

import inspect
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from fluxez import FluxezClient
from fluxez.logging_utils import SDKLogger

TEST_API_KEY = "cgx_1234567890abcd"
API_PREFIX = "/api/v1"


class RequestRecorder:
    """Mock transport handler that records requests and replays queued responses.

    Queued entries are ``httpx.Response`` objects or callables taking the
    request (sync or async, may raise). Once the queue is empty every
    request gets an empty success envelope.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list[Any] = []

    def queue(self, *responses: Any) -> None:
        self._responses.extend(responses)

    def queue_json(self, *bodies: Any, status_code: int = 200) -> None:
        self.queue(*(httpx.Response(status_code, json=body) for body in bodies))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(200, json={"success": True, "data": {}})
        response = self._responses.pop(0)
        if callable(response):
            response = response(request)
            if inspect.isawaitable(response):
                response = await response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def json(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    def path(self, index: int = -1) -> str:
        """Request path relative to the API base URL."""
        path = self.requests[index].url.path
        return path[len(API_PREFIX):] if path.startswith(API_PREFIX) else path


@pytest.fixture
def recorder() -> RequestRecorder:
    return RequestRecorder()


@pytest.fixture
def make_client(recorder: RequestRecorder) -> Callable[..., FluxezClient]:
    """Factory for clients wired to the recorder, with zero backoff delay."""

    def _make(api_key: str = TEST_API_KEY, **kwargs: Any) -> FluxezClient:
        kwargs.setdefault("retry_delay", 0)
        return FluxezClient(
            api_key, transport=httpx.MockTransport(recorder.handler), **kwargs
        )

    return _make


@pytest.fixture
def client(make_client) -> FluxezClient:
    return make_client()


@pytest.fixture(autouse=True)
def _reset_debug_logging():
    """Debug mode attaches a handler to the shared ``fluxez`` logger."""
    yield
    SDKLogger.disable_debug()
