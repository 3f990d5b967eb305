import pytest


class TestSearch:
    """Tests for search, member search and single actions."""

    @pytest.mark.asyncio
    async def test_search(self, trello_client, trello_api):
        # Arrange
        trello_api.reply(json_body={"cards": [{"id": "c1"}], "boards": []})

        # Act
        results = await trello_client.search("is:open due:week", model_types=["cards", "boards"],
                                             cards_limit=20, partial=True, id_boards=None)

        # Assert
        assert results["cards"] == [{"id": "c1"}]
        assert trello_api.last_path == "/search"
        params = trello_api.last_params
        assert params["query"] == "is:open due:week"
        assert params["modelTypes"] == "cards,boards"
        assert params["cards_limit"] == "20"
        assert params["partial"] == "true"
        assert "idBoards" not in params

    @pytest.mark.asyncio
    async def test_search_members_default_limit(self, trello_client, trello_api):
        await trello_client.search_members("ali")

        assert trello_api.last_path == "/search/members"
        assert trello_api.last_params["query"] == "ali"
        assert trello_api.last_params["limit"] == "8"

    @pytest.mark.asyncio
    async def test_get_action(self, trello_client, trello_api):
        await trello_client.get_action("a1")

        assert trello_api.last_path == "/actions/a1"


class TestWebhooks:
    """Tests for webhook operations."""

    @pytest.mark.asyncio
    async def test_list_webhooks_for_token(self, trello_client, trello_api):
        trello_api.reply(json_body=[{"id": "w1"}])

        webhooks = await trello_client.get_webhooks()

        assert webhooks == [{"id": "w1"}]
        assert trello_api.last_path == "/tokens/test-token/webhooks"

    @pytest.mark.asyncio
    async def test_create_webhook(self, trello_client, trello_api):
        await trello_client.create_webhook("https://hooks.example.com/trello", "b1", active=True)

        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/webhooks"
        params = trello_api.last_params
        assert params["callbackURL"] == "https://hooks.example.com/trello"
        assert params["idModel"] == "b1"
        assert params["active"] == "true"
        assert "description" not in params

    @pytest.mark.asyncio
    async def test_update_webhook(self, trello_client, trello_api):
        await trello_client.update_webhook("w1", active=False, callback_url="https://hooks.example.com/v2")

        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/webhooks/w1"
        assert trello_api.last_params["active"] == "false"
        assert trello_api.last_params["callbackURL"] == "https://hooks.example.com/v2"

    @pytest.mark.asyncio
    async def test_get_and_delete_webhook(self, trello_client, trello_api):
        await trello_client.get_webhook("w1")
        assert trello_api.last_path == "/webhooks/w1"

        await trello_client.delete_webhook("w1")
        assert trello_api.last.method == "DELETE"
