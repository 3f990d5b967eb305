import pytest


class TestBoardReads:
    """Tests for board read operations."""

    @pytest.mark.asyncio
    async def test_list_boards_defaults_to_open(self, trello_client, trello_api):
        # Arrange
        trello_api.reply(json_body=[{"id": "b1", "name": "Roadmap"}])

        # Act
        boards = await trello_client.list_boards()

        # Assert
        assert boards == [{"id": "b1", "name": "Roadmap"}]
        assert trello_api.last_path == "/members/me/boards"
        assert trello_api.last_params["filter"] == "open"

    @pytest.mark.asyncio
    async def test_list_boards_passes_all_through(self, trello_client, trello_api):
        await trello_client.list_boards("all")

        assert trello_api.last_params["filter"] == "all"

    @pytest.mark.asyncio
    async def test_get_board(self, trello_client, trello_api):
        trello_api.reply(json_body={"id": "b1", "name": "Roadmap", "closed": False})

        board = await trello_client.get_board("b1")

        assert board["name"] == "Roadmap"
        assert trello_api.last.method == "GET"
        assert trello_api.last_path == "/boards/b1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, path", [
        ("get_board_members", "/boards/b1/members"),
        ("get_board_labels", "/boards/b1/labels"),
        ("get_board_checklists", "/boards/b1/checklists"),
        ("get_board_custom_fields", "/boards/b1/customFields"),
    ])
    async def test_board_collections(self, trello_client, trello_api, method, path):
        trello_api.reply(json_body=[])

        assert await getattr(trello_client, method)("b1") == []
        assert trello_api.last_path == path

    @pytest.mark.asyncio
    async def test_board_lists_and_cards_use_filter(self, trello_client, trello_api):
        await trello_client.get_board_lists("b1")
        assert trello_api.last_path == "/boards/b1/lists"
        assert trello_api.last_params["filter"] == "open"

        await trello_client.get_board_cards("b1", "closed")
        assert trello_api.last_path == "/boards/b1/cards"
        assert trello_api.last_params["filter"] == "closed"

    @pytest.mark.asyncio
    async def test_board_actions_limit(self, trello_client, trello_api):
        await trello_client.get_board_actions("b1")
        assert trello_api.last_params["limit"] == "50"

        await trello_client.get_board_actions("b1", limit=5)
        assert trello_api.last_params["limit"] == "5"


class TestBoardWrites:
    """Tests for board create/update/delete and membership."""

    @pytest.mark.asyncio
    async def test_create_board_sends_only_supplied_fields(self, trello_client, trello_api):
        # Arrange
        trello_api.reply(json_body={"id": "b2", "name": "Launch"})

        # Act
        board = await trello_client.create_board("Launch", desc="Q3 launch", prefs_permission_level="org",
                                                 default_lists=True, id_organization=None)

        # Assert
        assert board["id"] == "b2"
        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/boards"
        params = trello_api.last_params
        assert params["name"] == "Launch"
        assert params["desc"] == "Q3 launch"
        assert params["prefs_permissionLevel"] == "org"
        assert params["defaultLists"] == "true"
        assert "idOrganization" not in params

    @pytest.mark.asyncio
    async def test_update_board_uses_slash_wire_names(self, trello_client, trello_api):
        await trello_client.update_board("b1", closed=True, prefs_voting="members", label_names_green="Done")

        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/boards/b1"
        params = trello_api.last_params
        assert params["closed"] == "true"
        assert params["prefs/voting"] == "members"
        assert params["labelNames/green"] == "Done"
        assert "name" not in params

    @pytest.mark.asyncio
    async def test_update_board_rejects_unknown_fields(self, trello_client, trello_api):
        with pytest.raises(TypeError):
            await trello_client.update_board("b1", colour="red")
        assert trello_api.requests == []

    @pytest.mark.asyncio
    async def test_delete_board(self, trello_client, trello_api):
        trello_api.reply(200)

        await trello_client.delete_board("b1")

        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/boards/b1"

    @pytest.mark.asyncio
    async def test_add_member_to_board_defaults_to_normal(self, trello_client, trello_api):
        await trello_client.add_member_to_board("b1", "m1")

        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/boards/b1/members/m1"
        assert trello_api.last_params["type"] == "normal"

    @pytest.mark.asyncio
    async def test_remove_member_from_board(self, trello_client, trello_api):
        await trello_client.remove_member_from_board("b1", "m1")

        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/boards/b1/members/m1"
