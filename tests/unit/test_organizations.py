import pytest


class TestOrganizations:
    """Tests for workspace (organization) operations."""

    @pytest.mark.asyncio
    async def test_create_organization(self, trello_client, trello_api):
        trello_api.reply(json_body={"id": "o1", "displayName": "Acme"})

        org = await trello_client.create_organization("Acme", name="acme", website=None)

        assert org["displayName"] == "Acme"
        assert trello_api.last.method == "POST"
        assert trello_api.last_path == "/organizations"
        assert trello_api.last_params["displayName"] == "Acme"
        assert trello_api.last_params["name"] == "acme"
        assert "website" not in trello_api.last_params

    @pytest.mark.asyncio
    async def test_update_organization_clears_website(self, trello_client, trello_api):
        await trello_client.update_organization("o1", website=None, desc="Widgets")

        assert trello_api.last.method == "PUT"
        assert trello_api.last_path == "/organizations/o1"
        assert trello_api.last_params["website"] == ""
        assert trello_api.last_params["desc"] == "Widgets"

    @pytest.mark.asyncio
    async def test_update_organization_prefs(self, trello_client, trello_api):
        await trello_client.update_organization("o1", prefs_permission_level="private",
                                                prefs_board_visibility_restrict_public="admin")

        params = trello_api.last_params
        assert params["prefs/permissionLevel"] == "private"
        assert params["prefs/boardVisibilityRestrict/public"] == "admin"
        assert "website" not in params

    @pytest.mark.asyncio
    async def test_members_and_boards(self, trello_client, trello_api):
        await trello_client.get_organization_members("o1")
        assert trello_api.last_path == "/organizations/o1/members"

        await trello_client.get_organization_boards("o1")
        assert trello_api.last_path == "/organizations/o1/boards"
        assert trello_api.last_params["filter"] == "open"

    @pytest.mark.asyncio
    async def test_get_and_delete(self, trello_client, trello_api):
        await trello_client.get_organization("acme")
        assert trello_api.last_path == "/organizations/acme"

        await trello_client.delete_organization("o1")
        assert trello_api.last.method == "DELETE"
        assert trello_api.last_path == "/organizations/o1"
