import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest
from starlette.datastructures import Headers

from trello_mcp.config import Settings
from trello_mcp.models import TenantCredentials
from trello_mcp.trello_client import TrelloClient

TEST_API_URL = "https://api.trello.test/1"


class FakeTrelloAPI:
    """Records outgoing requests and answers them with queued responses (200 {} by default)."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[httpx.Response] = []
        self.transport = httpx.MockTransport(self._handle)

    def reply(self, status_code: int = 200, json_body: Any = None, text: Optional[str] = None,
              headers: Optional[Dict[str, str]] = None) -> None:
        if json_body is not None:
            response = httpx.Response(status_code, json=json_body, headers=headers)
        elif text is not None:
            response = httpx.Response(status_code, text=text, headers=headers)
        else:
            response = httpx.Response(status_code, headers=headers)
        self._responses.append(response)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200, json={})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_path(self) -> str:
        # Path relative to the API base, e.g. "/boards/b1"
        return self.last.url.path[len("/1"):]

    @property
    def last_params(self) -> Dict[str, str]:
        return dict(self.last.url.params)

    @property
    def last_json(self) -> Any:
        return json.loads(self.last.content) if self.last.content else None


@pytest.fixture
def credentials():
    """A tenant's API key and token."""
    return TenantCredentials(api_key="test-key", token="test-token")


@pytest.fixture
def test_settings():
    """Settings pointing at a fake API host, with no stdio credentials."""
    return Settings(TRELLO_API_URL=TEST_API_URL, TRELLO_API_KEY=None, TRELLO_TOKEN=None)


@pytest.fixture
def trello_api():
    """Fake Trello API behind an httpx.MockTransport."""
    return FakeTrelloAPI()


@pytest.fixture
def trello_client(credentials, test_settings, trello_api):
    """A TrelloClient wired to the fake API."""
    return TrelloClient(credentials, settings=test_settings, transport=trello_api.transport)


def make_context(headers: Optional[Dict[str, str]] = None):
    """A stand-in for the FastMCP Context of a tool call.

    With headers, the call looks like it arrived over HTTP; without, like stdio.
    """
    ctx = MagicMock()
    if headers is None:
        ctx.request_context.request = None
    else:
        ctx.request_context.request.headers = Headers(headers=headers)
    return ctx


@pytest.fixture
def make_ctx():
    """Factory for tool call contexts; pass headers for HTTP or None for stdio."""
    return make_context


@pytest.fixture
def tenant_ctx():
    """Context of an HTTP tool call carrying both credential headers."""
    return make_context({"X-Trello-API-Key": "test-key", "X-Trello-Token": "test-token"})


@pytest.fixture
def server_client(monkeypatch, test_settings, trello_api):
    """Makes every tool in trello_mcp.server talk to the fake API."""
    from trello_mcp import server

    def _factory(creds):
        return TrelloClient(creds, settings=test_settings, transport=trello_api.transport)

    monkeypatch.setattr(server, "TrelloClient", _factory)
    return trello_api
