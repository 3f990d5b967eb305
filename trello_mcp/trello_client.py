# trello_client.py
"""
Async client for the Trello REST API.

One TrelloClient is built per inbound tool call from that tenant's credentials
and closed when the call finishes. Every request carries the key and token as
query parameters; create/update fields go out as query parameters too, except
for the two custom-field endpoints that only accept a JSON body.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional

import httpx

from trello_mcp.config import Settings, settings as default_settings
from trello_mcp.errors import (
    DEFAULT_RETRY_AFTER,
    ApiError,
    AuthenticationError,
    CredentialsError,
    RateLimitError,
)
from trello_mcp.models import (
    UNSET,
    Action,
    Attachment,
    Board,
    Card,
    CheckItem,
    Checklist,
    Comment,
    CustomField,
    CustomFieldItem,
    CustomFieldOption,
    Label,
    Member,
    Organization,
    SearchResult,
    TenantCredentials,
    TrelloList,
    Webhook,
)

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("all", "open", "closed")


class Param(NamedTuple):
    """How one optional keyword argument maps onto the wire.

    `clear` fields send an explicit None as an empty string, which Trello reads
    as "remove this value". Every other field leaves None out entirely.
    """
    field: str
    wire: str
    clear: bool = False


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def build_params(table: Iterable[Param], values: Mapping[str, Any]) -> Dict[str, str]:
    """Builds the query parameters for the fields the caller actually supplied.

    Raises TypeError for keyword arguments the operation does not accept.
    """
    table = list(table)
    unknown = set(values) - {p.field for p in table}
    if unknown:
        raise TypeError(f"Unexpected field(s): {', '.join(sorted(unknown))}")

    params: Dict[str, str] = {}
    for param in table:
        value = values.get(param.field, UNSET)
        if value is UNSET:
            continue
        if value is None:
            if param.clear:
                params[param.wire] = ""
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue
        params[param.wire] = _encode(value)
    return params


def _check_filter(filter: str) -> str:
    if filter not in STATUS_FILTERS:
        raise ValueError(f"Invalid filter: {filter}. Must be one of {list(STATUS_FILTERS)}")
    return filter


def _parse_retry_after(value: Optional[str]) -> int:
    if not value:
        return DEFAULT_RETRY_AFTER
    try:
        return int(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER


# --- Parameter tables ---

BOARD_CREATE_PARAMS = (
    Param("desc", "desc"),
    Param("id_organization", "idOrganization"),
    Param("id_board_source", "idBoardSource"),
    Param("keep_from_source", "keepFromSource"),
    Param("power_ups", "powerUps"),
    Param("prefs_permission_level", "prefs_permissionLevel"),
    Param("prefs_voting", "prefs_voting"),
    Param("prefs_comments", "prefs_comments"),
    Param("prefs_invitations", "prefs_invitations"),
    Param("prefs_self_join", "prefs_selfJoin"),
    Param("prefs_card_covers", "prefs_cardCovers"),
    Param("prefs_background", "prefs_background"),
    Param("prefs_card_aging", "prefs_cardAging"),
    Param("default_labels", "defaultLabels"),
    Param("default_lists", "defaultLists"),
)

BOARD_UPDATE_PARAMS = (
    Param("name", "name"),
    Param("desc", "desc"),
    Param("closed", "closed"),
    Param("subscribed", "subscribed"),
    Param("id_organization", "idOrganization"),
    Param("prefs_permission_level", "prefs/permissionLevel"),
    Param("prefs_self_join", "prefs/selfJoin"),
    Param("prefs_card_covers", "prefs/cardCovers"),
    Param("prefs_hide_votes", "prefs/hideVotes"),
    Param("prefs_invitations", "prefs/invitations"),
    Param("prefs_voting", "prefs/voting"),
    Param("prefs_comments", "prefs/comments"),
    Param("prefs_background", "prefs/background"),
    Param("prefs_card_aging", "prefs/cardAging"),
    Param("prefs_calendar_feed_enabled", "prefs/calendarFeedEnabled"),
    Param("label_names_green", "labelNames/green"),
    Param("label_names_yellow", "labelNames/yellow"),
    Param("label_names_orange", "labelNames/orange"),
    Param("label_names_red", "labelNames/red"),
    Param("label_names_purple", "labelNames/purple"),
    Param("label_names_blue", "labelNames/blue"),
)

LIST_CREATE_PARAMS = (
    Param("id_list_source", "idListSource"),
    Param("pos", "pos"),
)

LIST_UPDATE_PARAMS = (
    Param("name", "name"),
    Param("closed", "closed"),
    Param("id_board", "idBoard"),
    Param("pos", "pos"),
    Param("subscribed", "subscribed"),
)

CARD_CREATE_PARAMS = (
    Param("desc", "desc"),
    Param("pos", "pos"),
    Param("due", "due"),
    Param("start", "start"),
    Param("due_complete", "dueComplete"),
    Param("id_members", "idMembers"),
    Param("id_labels", "idLabels"),
    Param("url_source", "urlSource"),
    Param("id_card_source", "idCardSource"),
    Param("keep_from_source", "keepFromSource"),
    Param("address", "address"),
    Param("location_name", "locationName"),
    Param("coordinates", "coordinates"),
)

CARD_UPDATE_PARAMS = (
    Param("name", "name"),
    Param("desc", "desc"),
    Param("closed", "closed"),
    Param("id_list", "idList"),
    Param("id_board", "idBoard"),
    Param("pos", "pos"),
    Param("due", "due", clear=True),
    Param("start", "start", clear=True),
    Param("due_complete", "dueComplete"),
    Param("subscribed", "subscribed"),
)

ATTACHMENT_CREATE_PARAMS = (
    Param("name", "name"),
    Param("url", "url"),
    Param("mime_type", "mimeType"),
    Param("set_cover", "setCover"),
)

LABEL_CREATE_PARAMS = (
    Param("color", "color"),
)

LABEL_UPDATE_PARAMS = (
    Param("name", "name"),
    Param("color", "color", clear=True),
)

CHECKLIST_CREATE_PARAMS = (
    Param("name", "name"),
    Param("pos", "pos"),
    Param("id_checklist_source", "idChecklistSource"),
)

CHECK_ITEM_CREATE_PARAMS = (
    Param("pos", "pos"),
    Param("checked", "checked"),
    Param("due", "due"),
    Param("id_member", "idMember"),
)

CHECK_ITEM_UPDATE_PARAMS = (
    Param("name", "name"),
    Param("state", "state"),
    Param("pos", "pos"),
    Param("due", "due", clear=True),
    Param("id_member", "idMember", clear=True),
)

CUSTOM_FIELD_CREATE_PARAMS = (
    Param("pos", "pos"),
    Param("display_card_front", "display_cardFront"),
)

CUSTOM_FIELD_UPDATE_PARAMS = (
    Param("name", "name"),
    Param("pos", "pos"),
    Param("display_card_front", "display/cardFront"),
)

ORGANIZATION_CREATE_PARAMS = (
    Param("desc", "desc"),
    Param("name", "name"),
    Param("website", "website"),
)

ORGANIZATION_UPDATE_PARAMS = (
    Param("name", "name"),
    Param("display_name", "displayName"),
    Param("desc", "desc"),
    Param("website", "website", clear=True),
    Param("prefs_permission_level", "prefs/permissionLevel"),
    Param("prefs_org_invite_restrict", "prefs/orgInviteRestrict"),
    Param("prefs_board_visibility_restrict_private", "prefs/boardVisibilityRestrict/private"),
    Param("prefs_board_visibility_restrict_org", "prefs/boardVisibilityRestrict/org"),
    Param("prefs_board_visibility_restrict_public", "prefs/boardVisibilityRestrict/public"),
)

SEARCH_PARAMS = (
    Param("id_boards", "idBoards"),
    Param("id_organizations", "idOrganizations"),
    Param("model_types", "modelTypes"),
    Param("cards_limit", "cards_limit"),
    Param("boards_limit", "boards_limit"),
    Param("partial", "partial"),
)

WEBHOOK_CREATE_PARAMS = (
    Param("description", "description"),
    Param("active", "active"),
)

WEBHOOK_UPDATE_PARAMS = (
    Param("description", "description"),
    Param("callback_url", "callbackURL"),
    Param("id_model", "idModel"),
    Param("active", "active"),
)


class TrelloClient:
    """
    Typed operations over the Trello REST API for a single tenant.

    Use it as an async context manager so the underlying connection pool is
    closed once the tool call is done:

        async with TrelloClient(credentials) as client:
            boards = await client.list_boards()
    """

    def __init__(self, credentials: TenantCredentials, settings: Optional[Settings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        if not credentials.api_key or not credentials.token:
            raise CredentialsError("Trello API key and token are both required.")
        self.credentials = credentials
        self.settings = settings or default_settings
        self.http_client = httpx.AsyncClient(
            base_url=self.settings.TRELLO_API_URL,
            timeout=self.settings.REQUEST_TIMEOUT,
            limits=httpx.Limits(
                max_connections=self.settings.MAX_CONNECTIONS,
                max_keepalive_connections=self.settings.MAX_KEEPALIVE_CONNECTIONS,
            ),
            transport=transport,
        )

    async def __aenter__(self) -> "TrelloClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http_client.aclose()

    # --- HTTP ---

    def _auth_params(self) -> Dict[str, str]:
        return {"key": self.credentials.api_key, "token": self.credentials.token}

    async def _request(self, method: str, path: str, params: Optional[Mapping[str, str]] = None,
                       json_body: Any = None) -> Any:
        query = self._auth_params()
        if params:
            query.update(params)
        logger.debug(f"Trello {method} {self._redact(path)} params={sorted(params or {})}")

        if json_body is not None:
            response = await self.http_client.request(method, path, params=query, json=json_body)
        else:
            response = await self.http_client.request(method, path, params=query)
        return self._handle_response(method, path, response)

    def _redact(self, path: str) -> str:
        # The webhooks listing path embeds the token
        return path.replace(self.credentials.token, "***")

    def _handle_response(self, method: str, path: str, response: httpx.Response) -> Any:
        path = self._redact(path)
        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(f"Trello rate limit hit on {method} {path}, retry after {retry_after}s")
            raise RateLimitError("Rate limit exceeded", retry_after=retry_after, body=response.text)

        if response.status_code == 401:
            logger.warning(f"Trello rejected credentials on {method} {path}")
            raise AuthenticationError(body=response.text)

        if not response.is_success:
            logger.warning(f"Trello API error {response.status_code} on {method} {path}")
            raise ApiError(f"Trello API error: {response.text}", response.status_code, response.text)

        if not response.content:
            return None
        return response.json()

    # --- Connection ---

    async def test_connection(self) -> Dict[str, Any]:
        """Checks the credentials by fetching the current member. Never raises."""
        try:
            member = await self.get_me()
        except Exception as e:
            logger.info(f"Connection test failed: {e}")
            return {"connected": False, "message": str(e) or "Connection failed"}
        return {
            "connected": True,
            "message": f"Connected as {member.get('fullName')} (@{member.get('username')})",
        }

    # --- Members ---

    async def get_me(self) -> Member:
        return await self._request("GET", "/members/me")

    async def get_member(self, id_or_username: str) -> Member:
        return await self._request("GET", f"/members/{id_or_username}")

    async def get_member_boards(self, id_or_username: str, filter: str = "open") -> List[Board]:
        return await self._request("GET", f"/members/{id_or_username}/boards",
                                   {"filter": _check_filter(filter)})

    async def get_member_cards(self, id_or_username: str) -> List[Card]:
        return await self._request("GET", f"/members/{id_or_username}/cards")

    async def get_member_organizations(self, id_or_username: str) -> List[Organization]:
        return await self._request("GET", f"/members/{id_or_username}/organizations")

    # --- Boards ---

    async def list_boards(self, filter: str = "open") -> List[Board]:
        """Boards of the authenticated member."""
        return await self.get_member_boards("me", filter)

    async def get_board(self, board_id: str) -> Board:
        return await self._request("GET", f"/boards/{board_id}")

    async def create_board(self, name: str, **options: Any) -> Board:
        params = {"name": name}
        params.update(build_params(BOARD_CREATE_PARAMS, options))
        return await self._request("POST", "/boards", params)

    async def update_board(self, board_id: str, **changes: Any) -> Board:
        return await self._request("PUT", f"/boards/{board_id}", build_params(BOARD_UPDATE_PARAMS, changes))

    async def delete_board(self, board_id: str) -> None:
        await self._request("DELETE", f"/boards/{board_id}")

    async def get_board_members(self, board_id: str) -> List[Member]:
        return await self._request("GET", f"/boards/{board_id}/members")

    async def get_board_lists(self, board_id: str, filter: str = "open") -> List[TrelloList]:
        return await self._request("GET", f"/boards/{board_id}/lists", {"filter": _check_filter(filter)})

    async def get_board_cards(self, board_id: str, filter: str = "open") -> List[Card]:
        return await self._request("GET", f"/boards/{board_id}/cards", {"filter": _check_filter(filter)})

    async def get_board_labels(self, board_id: str) -> List[Label]:
        return await self._request("GET", f"/boards/{board_id}/labels")

    async def get_board_actions(self, board_id: str, limit: int = 50) -> List[Action]:
        return await self._request("GET", f"/boards/{board_id}/actions", {"limit": str(limit)})

    async def get_board_checklists(self, board_id: str) -> List[Checklist]:
        return await self._request("GET", f"/boards/{board_id}/checklists")

    async def get_board_custom_fields(self, board_id: str) -> List[CustomField]:
        return await self._request("GET", f"/boards/{board_id}/customFields")

    async def add_member_to_board(self, board_id: str, member_id: str, type: str = "normal") -> Member:
        return await self._request("PUT", f"/boards/{board_id}/members/{member_id}", {"type": type})

    async def remove_member_from_board(self, board_id: str, member_id: str) -> None:
        await self._request("DELETE", f"/boards/{board_id}/members/{member_id}")

    # --- Lists ---

    async def get_list(self, list_id: str) -> TrelloList:
        return await self._request("GET", f"/lists/{list_id}")

    async def create_list(self, name: str, id_board: str, **options: Any) -> TrelloList:
        params = {"name": name, "idBoard": id_board}
        params.update(build_params(LIST_CREATE_PARAMS, options))
        return await self._request("POST", "/lists", params)

    async def update_list(self, list_id: str, **changes: Any) -> TrelloList:
        return await self._request("PUT", f"/lists/{list_id}", build_params(LIST_UPDATE_PARAMS, changes))

    async def archive_list(self, list_id: str) -> TrelloList:
        return await self.update_list(list_id, closed=True)

    async def unarchive_list(self, list_id: str) -> TrelloList:
        return await self.update_list(list_id, closed=False)

    async def get_list_cards(self, list_id: str, filter: str = "open") -> List[Card]:
        return await self._request("GET", f"/lists/{list_id}/cards", {"filter": _check_filter(filter)})

    async def archive_all_cards_in_list(self, list_id: str) -> None:
        await self._request("POST", f"/lists/{list_id}/archiveAllCards")

    async def move_all_cards_in_list(self, list_id: str, id_board: str, id_list: str) -> None:
        await self._request("POST", f"/lists/{list_id}/moveAllCards", {"idBoard": id_board, "idList": id_list})

    # --- Cards ---

    async def get_card(self, card_id: str) -> Card:
        """Fetches a card together with its checklists and attachments."""
        return await self._request("GET", f"/cards/{card_id}", {"checklists": "all", "attachments": "true"})

    async def create_card(self, id_list: str, name: str, **options: Any) -> Card:
        params = {"idList": id_list, "name": name}
        params.update(build_params(CARD_CREATE_PARAMS, options))
        return await self._request("POST", "/cards", params)

    async def update_card(self, card_id: str, **changes: Any) -> Card:
        """Updates only the supplied fields. `due=None` / `start=None` remove the date."""
        return await self._request("PUT", f"/cards/{card_id}", build_params(CARD_UPDATE_PARAMS, changes))

    async def delete_card(self, card_id: str) -> None:
        await self._request("DELETE", f"/cards/{card_id}")

    async def archive_card(self, card_id: str) -> Card:
        return await self.update_card(card_id, closed=True)

    async def unarchive_card(self, card_id: str) -> Card:
        return await self.update_card(card_id, closed=False)

    async def move_card(self, card_id: str, id_list: str, id_board: Optional[str] = None) -> Card:
        if id_board:
            return await self.update_card(card_id, id_list=id_list, id_board=id_board)
        return await self.update_card(card_id, id_list=id_list)

    async def get_card_actions(self, card_id: str, limit: int = 50) -> List[Action]:
        return await self._request("GET", f"/cards/{card_id}/actions", {"limit": str(limit)})

    async def get_card_attachments(self, card_id: str) -> List[Attachment]:
        return await self._request("GET", f"/cards/{card_id}/attachments")

    async def add_attachment_to_card(self, card_id: str, **attachment: Any) -> Attachment:
        return await self._request("POST", f"/cards/{card_id}/attachments",
                                   build_params(ATTACHMENT_CREATE_PARAMS, attachment))

    async def delete_attachment(self, card_id: str, attachment_id: str) -> None:
        await self._request("DELETE", f"/cards/{card_id}/attachments/{attachment_id}")

    async def get_card_checklists(self, card_id: str) -> List[Checklist]:
        return await self._request("GET", f"/cards/{card_id}/checklists")

    async def add_comment_to_card(self, card_id: str, text: str) -> Comment:
        return await self._request("POST", f"/cards/{card_id}/actions/comments", {"text": text})

    async def get_card_comments(self, card_id: str) -> List[Action]:
        return await self._request("GET", f"/cards/{card_id}/actions", {"filter": "commentCard"})

    async def update_comment(self, card_id: str, action_id: str, text: str) -> Action:
        return await self._request("PUT", f"/cards/{card_id}/actions/{action_id}/comments", {"text": text})

    async def delete_comment(self, card_id: str, action_id: str) -> None:
        await self._request("DELETE", f"/cards/{card_id}/actions/{action_id}/comments")

    async def add_label_to_card(self, card_id: str, label_id: str) -> None:
        await self._request("POST", f"/cards/{card_id}/idLabels", {"value": label_id})

    async def remove_label_from_card(self, card_id: str, label_id: str) -> None:
        await self._request("DELETE", f"/cards/{card_id}/idLabels/{label_id}")

    async def add_member_to_card(self, card_id: str, member_id: str) -> None:
        await self._request("POST", f"/cards/{card_id}/idMembers", {"value": member_id})

    async def remove_member_from_card(self, card_id: str, member_id: str) -> None:
        await self._request("DELETE", f"/cards/{card_id}/idMembers/{member_id}")

    async def get_card_custom_field_items(self, card_id: str) -> List[CustomFieldItem]:
        return await self._request("GET", f"/cards/{card_id}/customFieldItems")

    async def set_card_custom_field_value(self, card_id: str, custom_field_id: str,
                                          value: Dict[str, Any]) -> None:
        """Sets a custom field on a card. This endpoint only accepts a JSON body."""
        await self._request("PUT", f"/cards/{card_id}/customField/{custom_field_id}/item", json_body=value)

    # --- Labels ---

    async def get_label(self, label_id: str) -> Label:
        return await self._request("GET", f"/labels/{label_id}")

    async def create_label(self, name: str, id_board: str, color: Optional[str] = None) -> Label:
        params = {"name": name, "idBoard": id_board}
        params.update(build_params(LABEL_CREATE_PARAMS, {"color": color}))
        return await self._request("POST", "/labels", params)

    async def update_label(self, label_id: str, **changes: Any) -> Label:
        """Updates a label. `color=None` removes the colour."""
        return await self._request("PUT", f"/labels/{label_id}", build_params(LABEL_UPDATE_PARAMS, changes))

    async def delete_label(self, label_id: str) -> None:
        await self._request("DELETE", f"/labels/{label_id}")

    # --- Checklists ---

    async def get_checklist(self, checklist_id: str) -> Checklist:
        return await self._request("GET", f"/checklists/{checklist_id}", {"checkItems": "all"})

    async def create_checklist(self, id_card: str, **options: Any) -> Checklist:
        params = {"idCard": id_card}
        params.update(build_params(CHECKLIST_CREATE_PARAMS, options))
        return await self._request("POST", "/checklists", params)

    async def update_checklist(self, checklist_id: str, name: str) -> Checklist:
        return await self._request("PUT", f"/checklists/{checklist_id}", {"name": name})

    async def delete_checklist(self, checklist_id: str) -> None:
        await self._request("DELETE", f"/checklists/{checklist_id}")

    async def get_check_items(self, checklist_id: str) -> List[CheckItem]:
        return await self._request("GET", f"/checklists/{checklist_id}/checkItems")

    async def create_check_item(self, checklist_id: str, name: str, **options: Any) -> CheckItem:
        params = {"name": name}
        params.update(build_params(CHECK_ITEM_CREATE_PARAMS, options))
        return await self._request("POST", f"/checklists/{checklist_id}/checkItems", params)

    async def update_check_item(self, card_id: str, check_item_id: str, **changes: Any) -> CheckItem:
        """Updates a check item through its card. `due=None` / `id_member=None` clear the value."""
        return await self._request("PUT", f"/cards/{card_id}/checkItem/{check_item_id}",
                                   build_params(CHECK_ITEM_UPDATE_PARAMS, changes))

    async def delete_check_item(self, checklist_id: str, check_item_id: str) -> None:
        await self._request("DELETE", f"/checklists/{checklist_id}/checkItems/{check_item_id}")

    # --- Custom fields ---

    async def get_custom_field(self, custom_field_id: str) -> CustomField:
        return await self._request("GET", f"/customFields/{custom_field_id}")

    async def create_custom_field(self, id_model: str, name: str, type: str, model_type: str = "board",
                                  **options: Any) -> CustomField:
        params = {"idModel": id_model, "modelType": model_type, "name": name, "type": type}
        params.update(build_params(CUSTOM_FIELD_CREATE_PARAMS, options))
        return await self._request("POST", "/customFields", params)

    async def update_custom_field(self, custom_field_id: str, **changes: Any) -> CustomField:
        return await self._request("PUT", f"/customFields/{custom_field_id}",
                                   build_params(CUSTOM_FIELD_UPDATE_PARAMS, changes))

    async def delete_custom_field(self, custom_field_id: str) -> None:
        await self._request("DELETE", f"/customFields/{custom_field_id}")

    async def get_custom_field_options(self, custom_field_id: str) -> List[CustomFieldOption]:
        return await self._request("GET", f"/customFields/{custom_field_id}/options")

    async def add_custom_field_option(self, custom_field_id: str, value: str,
                                      color: Optional[str] = None) -> CustomFieldOption:
        """Adds a dropdown option. This endpoint only accepts a JSON body."""
        body: Dict[str, Any] = {"value": {"text": value}}
        if color:
            body["color"] = color
        return await self._request("POST", f"/customFields/{custom_field_id}/options", json_body=body)

    async def delete_custom_field_option(self, custom_field_id: str, option_id: str) -> None:
        await self._request("DELETE", f"/customFields/{custom_field_id}/options/{option_id}")

    # --- Organizations (Workspaces) ---

    async def get_organization(self, org_id: str) -> Organization:
        return await self._request("GET", f"/organizations/{org_id}")

    async def create_organization(self, display_name: str, **options: Any) -> Organization:
        params = {"displayName": display_name}
        params.update(build_params(ORGANIZATION_CREATE_PARAMS, options))
        return await self._request("POST", "/organizations", params)

    async def update_organization(self, org_id: str, **changes: Any) -> Organization:
        """Updates an organization. `website=None` removes the website."""
        return await self._request("PUT", f"/organizations/{org_id}",
                                   build_params(ORGANIZATION_UPDATE_PARAMS, changes))

    async def delete_organization(self, org_id: str) -> None:
        await self._request("DELETE", f"/organizations/{org_id}")

    async def get_organization_members(self, org_id: str) -> List[Member]:
        return await self._request("GET", f"/organizations/{org_id}/members")

    async def get_organization_boards(self, org_id: str, filter: str = "open") -> List[Board]:
        return await self._request("GET", f"/organizations/{org_id}/boards", {"filter": _check_filter(filter)})

    # --- Actions ---

    async def get_action(self, action_id: str) -> Action:
        return await self._request("GET", f"/actions/{action_id}")

    # --- Search ---

    async def search(self, query: str, **options: Any) -> SearchResult:
        params = {"query": query}
        params.update(build_params(SEARCH_PARAMS, options))
        return await self._request("GET", "/search", params)

    async def search_members(self, query: str, limit: int = 8) -> List[Member]:
        return await self._request("GET", "/search/members", {"query": query, "limit": str(limit)})

    # --- Webhooks ---

    async def get_webhook(self, webhook_id: str) -> Webhook:
        return await self._request("GET", f"/webhooks/{webhook_id}")

    async def get_webhooks(self) -> List[Webhook]:
        """Webhooks registered under the tenant's token."""
        return await self._request("GET", f"/tokens/{self.credentials.token}/webhooks")

    async def create_webhook(self, callback_url: str, id_model: str, **options: Any) -> Webhook:
        params = {"callbackURL": callback_url, "idModel": id_model}
        params.update(build_params(WEBHOOK_CREATE_PARAMS, options))
        return await self._request("POST", "/webhooks", params)

    async def update_webhook(self, webhook_id: str, **changes: Any) -> Webhook:
        return await self._request("PUT", f"/webhooks/{webhook_id}", build_params(WEBHOOK_UPDATE_PARAMS, changes))

    async def delete_webhook(self, webhook_id: str) -> None:
        await self._request("DELETE", f"/webhooks/{webhook_id}")
