import json
from unittest.mock import patch

import pytest
from starlette.testclient import TestClient

from trello_mcp import server
from trello_mcp.models import UNSET


def _payload(result):
    return json.loads(result.content[0].text)


class TestToolRegistration:
    """Tests for the registered tool surface."""

    @pytest.mark.asyncio
    async def test_every_tool_is_registered(self):
        names = {tool.name for tool in await server.mcp.list_tools()}

        for expected in [
            "trello_test_connection", "trello_list_boards", "trello_update_card", "trello_get_card_custom_fields",
            "trello_set_card_custom_field", "trello_update_check_item", "trello_search", "trello_list_webhooks",
            "trello_add_board_member", "trello_get_board_checklists", "trello_get_card_actions",
            "trello_update_comment", "trello_delete_comment", "trello_get_check_items", "trello_get_action",
        ]:
            assert expected in names
        assert all(name.startswith("trello_") for name in names)
        assert len(names) == 83

    @pytest.mark.asyncio
    async def test_schema_defaults(self):
        tools = {tool.name: tool for tool in await server.mcp.list_tools()}

        list_boards = tools["trello_list_boards"].inputSchema["properties"]
        assert list_boards["filter"]["default"] == "open"
        assert list_boards["format"]["default"] == "json"
        assert "ctx" not in list_boards

        update_card = tools["trello_update_card"].inputSchema
        assert update_card["required"] == ["card_id"]

        search_members = tools["trello_search_members"].inputSchema["properties"]["limit"]
        assert search_members["maximum"] == 20
        assert search_members["default"] == 8


class TestTools:
    """Tests for the tool handlers against a fake Trello API."""

    @pytest.mark.asyncio
    async def test_list_boards_markdown(self, tenant_ctx, server_client):
        # Arrange
        server_client.reply(json_body=[{"id": "b1", "name": "Roadmap", "closed": False}])

        # Act
        result = await server.list_boards(tenant_ctx, filter="all", format="markdown")

        # Assert
        assert not result.isError
        assert "| Roadmap | `b1` | Open |" in result.content[0].text
        assert server_client.last_params["filter"] == "all"
        assert server_client.last_params["key"] == "test-key"

    @pytest.mark.asyncio
    async def test_get_board_json(self, tenant_ctx, server_client):
        server_client.reply(json_body={"id": "b1", "name": "Roadmap"})

        result = await server.get_board(tenant_ctx, "b1")

        assert _payload(result) == {"id": "b1", "name": "Roadmap"}

    @pytest.mark.asyncio
    async def test_create_card_envelope(self, tenant_ctx, server_client):
        server_client.reply(json_body={"id": "c1", "name": "Ship"})

        result = await server.create_card(tenant_ctx, "l1", "Ship", id_labels=["lab1"])

        assert _payload(result) == {"success": True, "message": "Card created", "card": {"id": "c1", "name": "Ship"}}
        assert server_client.last_params["idLabels"] == "lab1"
        assert "desc" not in server_client.last_params

    @pytest.mark.asyncio
    async def test_update_card_omitted_due_is_not_sent(self, tenant_ctx, server_client):
        await server.update_card(tenant_ctx, "c1", name="Renamed")

        assert "due" not in server_client.last_params
        assert "start" not in server_client.last_params

    @pytest.mark.asyncio
    async def test_update_card_null_due_is_cleared(self, tenant_ctx, server_client):
        await server.update_card(tenant_ctx, "c1", due=None)

        assert server_client.last_params["due"] == ""

    @pytest.mark.asyncio
    async def test_update_label_defaults_leave_color_alone(self, tenant_ctx, server_client):
        await server.update_label(tenant_ctx, "lab1", name="Bug", color=UNSET)

        assert "color" not in server_client.last_params

    @pytest.mark.asyncio
    async def test_delete_board_message(self, tenant_ctx, server_client):
        server_client.reply(200)

        result = await server.delete_board(tenant_ctx, "b1")

        assert _payload(result) == {"success": True, "message": "Board b1 deleted"}

    @pytest.mark.asyncio
    async def test_add_custom_field_option_envelope(self, tenant_ctx, server_client):
        server_client.reply(json_body={"id": "opt1"})

        result = await server.add_custom_field_option(tenant_ctx, "cf1", "High", color="red")

        assert _payload(result) == {"success": True, "message": "Option added", "option": {"id": "opt1"}}
        assert server_client.last_json == {"value": {"text": "High"}, "color": "red"}

    @pytest.mark.asyncio
    async def test_checklist_markdown(self, tenant_ctx, server_client):
        server_client.reply(json_body={"id": "cl1", "name": "QA", "checkItems": [
            {"name": "Smoke", "state": "complete"}, {"name": "Load", "state": "incomplete"}]})

        result = await server.get_checklist(tenant_ctx, "cl1", format="markdown")

        text = result.content[0].text
        assert "### QA (1/2)" in text
        assert "- [ ] Load" in text

    @pytest.mark.asyncio
    async def test_test_connection(self, tenant_ctx, server_client):
        server_client.reply(json_body={"fullName": "Alice", "username": "alice"})

        result = await server.check_connection(tenant_ctx)

        assert _payload(result) == {"connected": True, "message": "Connected as Alice (@alice)"}


class TestToolErrors:
    """Tests for the error envelope returned by tools."""

    @pytest.mark.asyncio
    async def test_api_error_becomes_error_envelope(self, tenant_ctx, server_client):
        server_client.reply(404, text="board not found")

        result = await server.get_board(tenant_ctx, "missing")

        assert result.isError is True
        payload = _payload(result)
        assert payload["error"] == "Error: Trello API error: board not found"
        assert payload["details"]["status_code"] == 404

    @pytest.mark.asyncio
    async def test_rate_limit_is_retryable(self, tenant_ctx, server_client):
        server_client.reply(429, text="", headers={"Retry-After": "3"})

        result = await server.list_boards(tenant_ctx)

        payload = _payload(result)
        assert payload["error"].endswith("(retryable)")
        assert payload["details"]["retry_after"] == 3

    @pytest.mark.asyncio
    async def test_missing_headers_become_error_envelope(self, make_ctx, server_client):
        ctx = make_ctx({"X-Trello-API-Key": "k"})

        result = await server.get_me(ctx)

        assert result.isError is True
        assert "X-Trello-Token" in _payload(result)["error"]
        assert server_client.requests == []

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_caught(self, tenant_ctx, server_client):
        with patch.object(server, "format_response", side_effect=RuntimeError("render failed")):
            result = await server.get_me(tenant_ctx)

        assert result.isError is True
        assert _payload(result)["details"]["name"] == "RuntimeError"


class TestHttpSurface:
    """Tests for the health, info and auth behaviour of the HTTP app."""

    @pytest.fixture
    def http_client(self):
        return TestClient(server.create_app())

    def test_health(self, http_client):
        response = http_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "server": "trello-mcp-bridge"}

    def test_info_document(self, http_client):
        body = http_client.get("/").json()

        assert body["name"] == "trello-mcp-bridge"
        assert body["version"] == "1.0.0"
        assert "X-Trello-API-Key" in body["authentication"]["required_headers"]
        assert "trello_list_boards" in body["available_tools"]

    def test_unknown_paths_return_info(self, http_client):
        response = http_client.get("/anything/else")

        assert response.status_code == 200
        assert response.json()["name"] == "trello-mcp-bridge"

    def test_mcp_without_credentials_is_unauthorized(self, http_client):
        response = http_client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"


class TestCommandLine:
    """Tests for command line parsing."""

    def test_defaults_follow_settings(self):
        args = server.parse_args([])

        assert args.host == server.settings.HOST
        assert args.port == server.settings.PORT
        assert server.select_transport(args) == server.settings.TRANSPORT_MODE

    def test_transport_flags(self):
        assert server.select_transport(server.parse_args(["--stdio"])) == "stdio"
        assert server.select_transport(server.parse_args(["--sse"])) == "sse"

    def test_main_runs_stdio(self):
        with patch.object(server.mcp, "run") as mock_run, patch.object(server.uvicorn, "run") as mock_uvicorn:
            server.main(["--stdio"])

        mock_run.assert_called_once_with()
        mock_uvicorn.assert_not_called()

    def test_main_serves_sse_with_uvicorn(self):
        with patch.object(server.uvicorn, "run") as mock_uvicorn, \
                patch.object(server, "create_app", return_value="app") as mock_create:
            server.main(["--sse", "--host", "0.0.0.0", "--port", "9000"])

        mock_create.assert_called_once_with("sse")
        mock_uvicorn.assert_called_once()
        assert mock_uvicorn.call_args.kwargs["host"] == "0.0.0.0"
        assert mock_uvicorn.call_args.kwargs["port"] == 9000
