import pytest


class TestChecklists:
    """Tests for checklist and check item operations."""

    @pytest.mark.asyncio
    async def test_get_checklist_with_items(self, trello_client, trello_api):
        trello_api.reply(json_body={"id": "cl1", "name": "Release", "checkItems": []})

        checklist = await trello_client.get_checklist("cl1")

        assert checklist["name"] == "Release"
        assert trello_api.last_path == "/checklists/cl1"
        assert trello_api.last_params["checkItems"] == "all"

    @pytest.mark.asyncio
    async def test_create_checklist(self, trello_client, trello_api):
        await trello_client.create_checklist("c1", name="QA")

        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/checklists"
        assert trello_api.last_params["idCard"] == "c1"
        assert trello_api.last_params["name"] == "QA"
        assert "pos" not in trello_api.last_params

    @pytest.mark.asyncio
    async def test_update_and_delete_checklist(self, trello_client, trello_api):
        await trello_client.update_checklist("cl1", "Renamed")
        assert trello_api.last.method == "PUT"
        assert trello_api.last_params["name"] == "Renamed"

        await trello_client.delete_checklist("cl1")
        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/checklists/cl1"

    @pytest.mark.asyncio
    async def test_card_checklists_and_items(self, trello_client, trello_api):
        await trello_client.get_card_checklists("c1")
        assert trello_api.last_path == "/cards/c1/checklists"

        await trello_client.get_check_items("cl1")
        assert trello_api.last_path == "/checklists/cl1/checkItems"

    @pytest.mark.asyncio
    async def test_create_check_item(self, trello_client, trello_api):
        await trello_client.create_check_item("cl1", "Run smoke tests", checked=True, pos="top")

        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/checklists/cl1/checkItems"
        assert trello_api.last_params["name"] == "Run smoke tests"
        assert trello_api.last_params["checked"] == "true"
        assert trello_api.last_params["pos"] == "top"

    @pytest.mark.asyncio
    async def test_update_check_item_goes_through_card(self, trello_client, trello_api):
        # Act
        await trello_client.update_check_item("c1", "ci1", state="complete")

        # Assert
        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/cards/c1/checkItem/ci1"
        assert trello_api.last_params["state"] == "complete"
        assert "due" not in trello_api.last_params
        assert "idMember" not in trello_api.last_params

    @pytest.mark.asyncio
    async def test_update_check_item_clears_due_and_member(self, trello_client, trello_api):
        await trello_client.update_check_item("c1", "ci1", due=None, id_member=None)

        assert trello_api.last_params["due"] == ""
        assert trello_api.last_params["idMember"] == ""

    @pytest.mark.asyncio
    async def test_delete_check_item(self, trello_client, trello_api):
        await trello_client.delete_check_item("cl1", "ci1")

        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/checklists/cl1/checkItems/ci1"
