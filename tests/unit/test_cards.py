import pytest

from trello_mcp.models import UNSET


class TestCardReads:
    """Tests for card read operations."""

    @pytest.mark.asyncio
    async def test_get_card_includes_checklists_and_attachments(self, trello_client, trello_api):
        trello_api.reply(json_body={"id": "c1", "name": "Write docs"})

        card = await trello_client.get_card("c1")

        assert card["name"] == "Write docs"
        assert trello_api.last_path == "/cards/c1"
        assert trello_api.last_params["checklists"] == "all"
        assert trello_api.last_params["attachments"] == "true"

    @pytest.mark.asyncio
    async def test_card_actions_and_comments(self, trello_client, trello_api):
        await trello_client.get_card_actions("c1", limit=10)
        assert trello_api.last_path == "/cards/c1/actions"
        assert trello_api.last_params["limit"] == "10"

        await trello_client.get_card_comments("c1")
        assert trello_api.last_path == "/cards/c1/actions"
        assert trello_api.last_params["filter"] == "commentCard"

    @pytest.mark.asyncio
    async def test_custom_field_items(self, trello_client, trello_api):
        await trello_client.get_card_custom_field_items("c1")

        assert trello_api.last_path == "/cards/c1/customFieldItems"


class TestCardWrites:
    """Tests for card create/update and the nullable date fields."""

    @pytest.mark.asyncio
    async def test_create_card(self, trello_client, trello_api):
        # Arrange
        trello_api.reply(json_body={"id": "c2", "name": "Ship it"})

        # Act
        card = await trello_client.create_card("l1", "Ship it", due="2025-06-01T12:00:00.000Z",
                                               id_members=["m1", "m2"], id_labels=[], pos="top")

        # Assert
        assert card["id"] == "c2"
        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/cards"
        params = trello_api.last_params
        assert params["idList"] == "l1"
        assert params["name"] == "Ship it"
        assert params["due"] == "2025-06-01T12:00:00.000Z"
        assert params["idMembers"] == "m1,m2"
        assert params["pos"] == "top"
        assert "idLabels" not in params
        assert "desc" not in params

    @pytest.mark.asyncio
    async def test_update_card_sends_only_supplied_fields(self, trello_client, trello_api):
        await trello_client.update_card("c1", name="Renamed")

        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/cards/c1"
        params = trello_api.last_params
        assert params["name"] == "Renamed"
        assert "due" not in params
        assert "start" not in params
        assert "closed" not in params

    @pytest.mark.asyncio
    async def test_update_card_explicit_null_due_clears_it(self, trello_client, trello_api):
        await trello_client.update_card("c1", due=None)

        assert "due" in trello_api.last_params
        assert trello_api.last_params["due"] == ""
        assert "due=" in str(trello_api.last.url)

    @pytest.mark.asyncio
    async def test_update_card_unset_due_is_omitted(self, trello_client, trello_api):
        await trello_client.update_card("c1", due=UNSET, start=None, desc=None)

        params = trello_api.last_params
        assert "due" not in params
        assert params["start"] == ""
        assert "desc" not in params

    @pytest.mark.asyncio
    async def test_archive_unarchive(self, trello_client, trello_api):
        await trello_client.archive_card("c1")
        assert trello_api.last_params["closed"] == "true"

        await trello_client.unarchive_card("c1")
        assert trello_api.last_params["closed"] == "false"

    @pytest.mark.asyncio
    async def test_move_card_within_board(self, trello_client, trello_api):
        await trello_client.move_card("c1", "l2")

        assert trello_api.last_params["idList"] == "l2"
        assert "idBoard" not in trello_api.last_params

    @pytest.mark.asyncio
    async def test_move_card_across_boards(self, trello_client, trello_api):
        await trello_client.move_card("c1", "l2", "b2")

        assert trello_api.last_params["idList"] == "l2"
        assert trello_api.last_params["idBoard"] == "b2"

    @pytest.mark.asyncio
    async def test_delete_card(self, trello_client, trello_api):
        trello_api.reply(200)

        await trello_client.delete_card("c1")

        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/cards/c1"


class TestCardRelations:
    """Tests for comments, labels, members, attachments and custom field values on cards."""

    @pytest.mark.asyncio
    async def test_comment_lifecycle(self, trello_client, trello_api):
        await trello_client.add_comment_to_card("c1", "Looks good")
        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/cards/c1/actions/comments"
        assert trello_api.last_params["text"] == "Looks good"

        await trello_client.update_comment("c1", "a1", "Looks great")
        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/cards/c1/actions/a1/comments"
        assert trello_api.last_params["text"] == "Looks great"

        await trello_client.delete_comment("c1", "a1")
        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/cards/c1/actions/a1/comments"

    @pytest.mark.asyncio
    async def test_labels_on_card(self, trello_client, trello_api):
        await trello_client.add_label_to_card("c1", "lab1")
        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/cards/c1/idLabels"
        assert trello_api.last_params["value"] == "lab1"

        await trello_client.remove_label_from_card("c1", "lab1")
        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/cards/c1/idLabels/lab1"

    @pytest.mark.asyncio
    async def test_members_on_card(self, trello_client, trello_api):
        await trello_client.add_member_to_card("c1", "m1")
        assert trello_api.last_path == "/cards/c1/idMembers"
        assert trello_api.last_params["value"] == "m1"

        await trello_client.remove_member_from_card("c1", "m1")
        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/cards/c1/idMembers/m1"

    @pytest.mark.asyncio
    async def test_attachments(self, trello_client, trello_api):
        await trello_client.add_attachment_to_card("c1", url="https://example.com/plan.pdf", name="Plan",
                                                   set_cover=False)
        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/cards/c1/attachments"
        assert trello_api.last_params["url"] == "https://example.com/plan.pdf"
        assert trello_api.last_params["name"] == "Plan"
        assert trello_api.last_params["setCover"] == "false"
        assert "mimeType" not in trello_api.last_params

        await trello_client.get_card_attachments("c1")
        assert trello_api.last_path == "/cards/c1/attachments"

        await trello_client.delete_attachment("c1", "att1")
        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/cards/c1/attachments/att1"

    @pytest.mark.asyncio
    async def test_set_custom_field_value_sends_json_body(self, trello_client, trello_api):
        # Act
        await trello_client.set_card_custom_field_value("c1", "cf1", {"value": {"number": "42"}})

        # Assert
        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/cards/c1/customField/cf1/item"
        assert trello_api.last_json == {"value": {"number": "42"}}
        assert set(trello_api.last_params) == {"key", "token"}
