# server.py
import argparse
import logging
from typing import Annotated, Any, Dict, List, Literal, Optional

import uvicorn
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult
from pydantic import Field
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse

from trello_mcp import SERVER_NAME, __version__
from trello_mcp.auth import (
    API_KEY_HEADER,
    CREDENTIALS_URL,
    TOKEN_HEADER,
    TenantCredentialsMiddleware,
    credentials_from_context,
)
from trello_mcp.config import settings
from trello_mcp.errors import TrelloError
from trello_mcp.formatters import format_error, format_response, format_success
from trello_mcp.models import (
    UNSET,
    BoardMemberType,
    CardAging,
    CheckItemState,
    Color,
    CustomFieldType,
    InvitationsPref,
    PermissionLevel,
    Position,
    ResponseFormat,
    StatusFilter,
    VotingPref,
)
from trello_mcp.trello_client import TrelloClient

# --- Logging Setup ---
_handlers: List[logging.Handler] = [logging.StreamHandler()]  # stderr, stdout belongs to stdio transport
if settings.LOG_FILE:
    _handlers.append(logging.FileHandler(settings.LOG_FILE))

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=_handlers
)
logger = logging.getLogger(__name__)
# httpx logs full request URLs, which carry the tenant's key and token
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

# --- MCP Server Definition ---
# Stateless: every request carries its own tenant credentials
mcp = FastMCP(
    SERVER_NAME,
    instructions=(
        "Trello boards, lists, cards, checklists, labels, custom fields, members, "
        "workspaces, search and webhooks. HTTP callers authenticate with the "
        f"{API_KEY_HEADER} and {TOKEN_HEADER} headers."
    ),
    host=settings.HOST,
    port=settings.PORT,
    stateless_http=True,
    json_response=True,
)

# --- Shared argument types ---
FormatArg = Annotated[ResponseFormat, Field(description="Response format ('json' or 'markdown')")]
FilterArg = Annotated[StatusFilter, Field(description="Filter by status ('all', 'open' or 'closed')")]
PositionArg = Annotated[Optional[Position], Field(description="Position: 'top', 'bottom' or a positive number")]
UrlArg = Annotated[str, Field(pattern=r"^https?://", description="Absolute http(s) URL")]
ActionLimitArg = Annotated[int, Field(ge=1, le=1000, description="Max actions to return")]


# --- Helper Functions ---

def _client(ctx: Context) -> TrelloClient:
    """Builds a client for the calling tenant. Raises CredentialsError when credentials are missing."""
    return TrelloClient(credentials_from_context(ctx))


def _api_failure(tool: str, error: TrelloError) -> CallToolResult:
    logger.error(f"Trello error in {tool}: {error}", exc_info=False)
    return format_error(error)


def _unexpected_failure(tool: str, error: Exception) -> CallToolResult:
    logger.error(f"Unexpected error in {tool}: {error}", exc_info=True)
    return format_error(error)


# --- Connection Tools ---

@mcp.tool("trello_test_connection", description="Tests the connection to the Trello API with the caller's credentials.",
          structured_output=False)
async def check_connection(ctx: Context) -> CallToolResult:
    logger.info("Executing trello_test_connection")
    try:
        async with _client(ctx) as client:
            result = await client.test_connection()
        return format_response(result)
    except TrelloError as e:
        return _api_failure("trello_test_connection", e)
    except Exception as e:
        return _unexpected_failure("trello_test_connection", e)


# --- Board Tools ---

@mcp.tool("trello_list_boards", description="Lists the Trello boards of the authenticated member with their names, IDs and URLs.",
          structured_output=False)
async def list_boards(ctx: Context, filter: FilterArg = "open", format: FormatArg = "json") -> CallToolResult:
    """Lists boards of the tenant's own member ('me')."""
    logger.info(f"Executing trello_list_boards (filter={filter})")
    try:
        async with _client(ctx) as client:
            boards = await client.list_boards(filter)
        logger.info(f"trello_list_boards found {len(boards or [])} boards")
        return format_response(boards, format, "boards")
    except TrelloError as e:
        return _api_failure("trello_list_boards", e)
    except Exception as e:
        return _unexpected_failure("trello_list_boards", e)


@mcp.tool("trello_get_board", description="Gets details of a specific Trello board.", structured_output=False)
async def get_board(ctx: Context,
                    board_id: Annotated[str, Field(description="The ID of the board")],
                    format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board for board {board_id}")
    try:
        async with _client(ctx) as client:
            board = await client.get_board(board_id)
        return format_response(board, format, "board")
    except TrelloError as e:
        return _api_failure("trello_get_board", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board", e)


@mcp.tool("trello_create_board", description="Creates a new Trello board, optionally inside a workspace or copied from another board.",
          structured_output=False)
async def create_board(
    ctx: Context,
    name: Annotated[str, Field(description="Name of the board")],
    desc: Annotated[Optional[str], Field(description="Description")] = None,
    id_organization: Annotated[Optional[str], Field(description="Organization/workspace ID")] = None,
    id_board_source: Annotated[Optional[str], Field(description="Board ID to copy")] = None,
    keep_from_source: Annotated[Optional[Literal["cards", "none"]],
                                Field(description="What to keep when copying a board")] = None,
    power_ups: Annotated[Optional[Literal["all", "calendar", "cardAging", "recap", "voting"]],
                         Field(description="Power-Up to enable")] = None,
    prefs_permission_level: Annotated[Optional[PermissionLevel], Field(description="Permission level")] = None,
    prefs_voting: Annotated[Optional[VotingPref], Field(description="Who can vote")] = None,
    prefs_comments: Annotated[Optional[VotingPref], Field(description="Who can comment")] = None,
    prefs_invitations: Annotated[Optional[InvitationsPref], Field(description="Who can invite")] = None,
    prefs_self_join: Annotated[Optional[bool], Field(description="Workspace members may join on their own")] = None,
    prefs_card_covers: Annotated[Optional[bool], Field(description="Show card covers")] = None,
    prefs_background: Annotated[Optional[str], Field(description="Background colour or image ID")] = None,
    prefs_card_aging: Annotated[Optional[CardAging], Field(description="Card aging style")] = None,
    default_labels: Annotated[Optional[bool], Field(description="Create the default labels")] = None,
    default_lists: Annotated[bool, Field(description="Create the default lists (To Do, Doing, Done)")] = True,
) -> CallToolResult:
    logger.info(f"Executing trello_create_board with name '{name}'")
    try:
        async with _client(ctx) as client:
            board = await client.create_board(
                name,
                desc=desc,
                id_organization=id_organization,
                id_board_source=id_board_source,
                keep_from_source=keep_from_source,
                power_ups=power_ups,
                prefs_permission_level=prefs_permission_level,
                prefs_voting=prefs_voting,
                prefs_comments=prefs_comments,
                prefs_invitations=prefs_invitations,
                prefs_self_join=prefs_self_join,
                prefs_card_covers=prefs_card_covers,
                prefs_background=prefs_background,
                prefs_card_aging=prefs_card_aging,
                default_labels=default_labels,
                default_lists=default_lists,
            )
        logger.info(f"Board '{name}' created with ID {board.get('id') if board else None}")
        return format_success("Board created", board=board)
    except TrelloError as e:
        return _api_failure("trello_create_board", e)
    except Exception as e:
        return _unexpected_failure("trello_create_board", e)


@mcp.tool("trello_update_board", description="Updates a Trello board. Only the fields provided are changed.",
          structured_output=False)
async def update_board(
    ctx: Context,
    board_id: Annotated[str, Field(description="Board ID to update")],
    name: Annotated[Optional[str], Field(description="New name")] = None,
    desc: Annotated[Optional[str], Field(description="New description")] = None,
    closed: Annotated[Optional[bool], Field(description="Archive (true) or unarchive (false)")] = None,
    subscribed: Annotated[Optional[bool], Field(description="Subscribe to the board")] = None,
    id_organization: Annotated[Optional[str], Field(description="Move to this workspace")] = None,
    prefs_permission_level: Annotated[Optional[PermissionLevel], Field(description="Permission level")] = None,
    prefs_self_join: Annotated[Optional[bool], Field(description="Workspace members may join on their own")] = None,
    prefs_card_covers: Annotated[Optional[bool], Field(description="Show card covers")] = None,
    prefs_hide_votes: Annotated[Optional[bool], Field(description="Hide votes until voting")] = None,
    prefs_invitations: Annotated[Optional[InvitationsPref], Field(description="Who can invite")] = None,
    prefs_voting: Annotated[Optional[VotingPref], Field(description="Who can vote")] = None,
    prefs_comments: Annotated[Optional[VotingPref], Field(description="Who can comment")] = None,
    prefs_background: Annotated[Optional[str], Field(description="Background colour or image ID")] = None,
    prefs_card_aging: Annotated[Optional[CardAging], Field(description="Card aging style")] = None,
    prefs_calendar_feed_enabled: Annotated[Optional[bool], Field(description="Enable the calendar feed")] = None,
    label_names_green: Annotated[Optional[str], Field(description="Name of the green label")] = None,
    label_names_yellow: Annotated[Optional[str], Field(description="Name of the yellow label")] = None,
    label_names_orange: Annotated[Optional[str], Field(description="Name of the orange label")] = None,
    label_names_red: Annotated[Optional[str], Field(description="Name of the red label")] = None,
    label_names_purple: Annotated[Optional[str], Field(description="Name of the purple label")] = None,
    label_names_blue: Annotated[Optional[str], Field(description="Name of the blue label")] = None,
) -> CallToolResult:
    logger.info(f"Executing trello_update_board for board {board_id}")
    try:
        async with _client(ctx) as client:
            board = await client.update_board(
                board_id,
                name=name,
                desc=desc,
                closed=closed,
                subscribed=subscribed,
                id_organization=id_organization,
                prefs_permission_level=prefs_permission_level,
                prefs_self_join=prefs_self_join,
                prefs_card_covers=prefs_card_covers,
                prefs_hide_votes=prefs_hide_votes,
                prefs_invitations=prefs_invitations,
                prefs_voting=prefs_voting,
                prefs_comments=prefs_comments,
                prefs_background=prefs_background,
                prefs_card_aging=prefs_card_aging,
                prefs_calendar_feed_enabled=prefs_calendar_feed_enabled,
                label_names_green=label_names_green,
                label_names_yellow=label_names_yellow,
                label_names_orange=label_names_orange,
                label_names_red=label_names_red,
                label_names_purple=label_names_purple,
                label_names_blue=label_names_blue,
            )
        return format_success("Board updated", board=board)
    except TrelloError as e:
        return _api_failure("trello_update_board", e)
    except Exception as e:
        return _unexpected_failure("trello_update_board", e)


@mcp.tool("trello_delete_board", description="Deletes a Trello board permanently. WARNING: this cannot be undone!",
          structured_output=False)
async def delete_board(ctx: Context,
                       board_id: Annotated[str, Field(description="Board ID to delete")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_board for board {board_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_board(board_id)
        return format_success(f"Board {board_id} deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_board", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_board", e)


@mcp.tool("trello_get_board_lists", description="Gets all lists on a board.", structured_output=False)
async def get_board_lists(ctx: Context,
                          board_id: Annotated[str, Field(description="Board ID")],
                          filter: FilterArg = "open",
                          format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board_lists for board {board_id} (filter={filter})")
    try:
        async with _client(ctx) as client:
            lists = await client.get_board_lists(board_id, filter)
        return format_response(lists, format, "lists")
    except TrelloError as e:
        return _api_failure("trello_get_board_lists", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board_lists", e)


@mcp.tool("trello_get_board_cards", description="Gets all cards on a board.", structured_output=False)
async def get_board_cards(ctx: Context,
                          board_id: Annotated[str, Field(description="Board ID")],
                          filter: FilterArg = "open",
                          format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board_cards for board {board_id} (filter={filter})")
    try:
        async with _client(ctx) as client:
            cards = await client.get_board_cards(board_id, filter)
        return format_response(cards, format, "cards")
    except TrelloError as e:
        return _api_failure("trello_get_board_cards", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board_cards", e)


@mcp.tool("trello_get_board_members", description="Gets all members of a board.", structured_output=False)
async def get_board_members(ctx: Context,
                            board_id: Annotated[str, Field(description="Board ID")],
                            format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board_members for board {board_id}")
    try:
        async with _client(ctx) as client:
            members = await client.get_board_members(board_id)
        return format_response(members, format, "members")
    except TrelloError as e:
        return _api_failure("trello_get_board_members", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board_members", e)


@mcp.tool("trello_get_board_labels", description="Gets all labels defined on a board.", structured_output=False)
async def get_board_labels(ctx: Context,
                           board_id: Annotated[str, Field(description="Board ID")],
                           format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board_labels for board {board_id}")
    try:
        async with _client(ctx) as client:
            labels = await client.get_board_labels(board_id)
        return format_response(labels, format, "labels")
    except TrelloError as e:
        return _api_failure("trello_get_board_labels", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board_labels", e)


@mcp.tool("trello_get_board_actions", description="Gets the recent activity (actions) on a board.", structured_output=False)
async def get_board_actions(ctx: Context,
                            board_id: Annotated[str, Field(description="Board ID")],
                            limit: ActionLimitArg = 50,
                            format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board_actions for board {board_id} (limit={limit})")
    try:
        async with _client(ctx) as client:
            actions = await client.get_board_actions(board_id, limit)
        return format_response(actions, format, "actions")
    except TrelloError as e:
        return _api_failure("trello_get_board_actions", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board_actions", e)


@mcp.tool("trello_get_board_checklists", description="Gets every checklist on a board.", structured_output=False)
async def get_board_checklists(ctx: Context,
                               board_id: Annotated[str, Field(description="Board ID")],
                               format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board_checklists for board {board_id}")
    try:
        async with _client(ctx) as client:
            checklists = await client.get_board_checklists(board_id)
        return format_response(checklists, format, "checklists")
    except TrelloError as e:
        return _api_failure("trello_get_board_checklists", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board_checklists", e)


@mcp.tool("trello_get_board_custom_fields", description="Gets the custom field definitions of a board.",
          structured_output=False)
async def get_board_custom_fields(ctx: Context,
                                  board_id: Annotated[str, Field(description="Board ID")],
                                  format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_board_custom_fields for board {board_id}")
    try:
        async with _client(ctx) as client:
            fields = await client.get_board_custom_fields(board_id)
        return format_response(fields, format, "customFields")
    except TrelloError as e:
        return _api_failure("trello_get_board_custom_fields", e)
    except Exception as e:
        return _unexpected_failure("trello_get_board_custom_fields", e)


@mcp.tool("trello_add_board_member", description="Adds a member to a board with the given membership type.",
          structured_output=False)
async def add_board_member(ctx: Context,
                           board_id: Annotated[str, Field(description="Board ID")],
                           member_id: Annotated[str, Field(description="Member ID to add")],
                           type: Annotated[BoardMemberType, Field(description="Member type")] = "normal") -> CallToolResult:
    logger.info(f"Executing trello_add_board_member: member {member_id} to board {board_id} as {type}")
    try:
        async with _client(ctx) as client:
            member = await client.add_member_to_board(board_id, member_id, type)
        return format_success("Member added to board", member=member)
    except TrelloError as e:
        return _api_failure("trello_add_board_member", e)
    except Exception as e:
        return _unexpected_failure("trello_add_board_member", e)


@mcp.tool("trello_remove_board_member", description="Removes a member from a board.", structured_output=False)
async def remove_board_member(ctx: Context,
                              board_id: Annotated[str, Field(description="Board ID")],
                              member_id: Annotated[str, Field(description="Member ID to remove")]) -> CallToolResult:
    logger.warning(f"Executing trello_remove_board_member: member {member_id} from board {board_id}")
    try:
        async with _client(ctx) as client:
            await client.remove_member_from_board(board_id, member_id)
        return format_success("Member removed from board")
    except TrelloError as e:
        return _api_failure("trello_remove_board_member", e)
    except Exception as e:
        return _unexpected_failure("trello_remove_board_member", e)


# --- List Tools ---

@mcp.tool("trello_get_list", description="Gets details of a specific list.", structured_output=False)
async def get_list(ctx: Context,
                   list_id: Annotated[str, Field(description="List ID")],
                   format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_list for list {list_id}")
    try:
        async with _client(ctx) as client:
            trello_list = await client.get_list(list_id)
        return format_response(trello_list, format, "list")
    except TrelloError as e:
        return _api_failure("trello_get_list", e)
    except Exception as e:
        return _unexpected_failure("trello_get_list", e)


@mcp.tool("trello_create_list", description="Creates a new list on a board.", structured_output=False)
async def create_list(ctx: Context,
                      name: Annotated[str, Field(description="Name of the list")],
                      id_board: Annotated[str, Field(description="Board ID")],
                      pos: PositionArg = None,
                      id_list_source: Annotated[Optional[str], Field(description="List ID to copy")] = None) -> CallToolResult:
    logger.info(f"Executing trello_create_list '{name}' on board {id_board}")
    try:
        async with _client(ctx) as client:
            trello_list = await client.create_list(name, id_board, pos=pos, id_list_source=id_list_source)
        return format_success("List created", list=trello_list)
    except TrelloError as e:
        return _api_failure("trello_create_list", e)
    except Exception as e:
        return _unexpected_failure("trello_create_list", e)


@mcp.tool("trello_update_list", description="Updates a list. Only the fields provided are changed.", structured_output=False)
async def update_list(ctx: Context,
                      list_id: Annotated[str, Field(description="List ID to update")],
                      name: Annotated[Optional[str], Field(description="New name")] = None,
                      closed: Annotated[Optional[bool], Field(description="Archive/unarchive")] = None,
                      id_board: Annotated[Optional[str], Field(description="Move to this board")] = None,
                      pos: PositionArg = None,
                      subscribed: Annotated[Optional[bool], Field(description="Subscribe to the list")] = None) -> CallToolResult:
    logger.info(f"Executing trello_update_list for list {list_id}")
    try:
        async with _client(ctx) as client:
            trello_list = await client.update_list(list_id, name=name, closed=closed, id_board=id_board,
                                                   pos=pos, subscribed=subscribed)
        return format_success("List updated", list=trello_list)
    except TrelloError as e:
        return _api_failure("trello_update_list", e)
    except Exception as e:
        return _unexpected_failure("trello_update_list", e)


@mcp.tool("trello_archive_list", description="Archives (closes) a list.", structured_output=False)
async def archive_list(ctx: Context,
                       list_id: Annotated[str, Field(description="List ID to archive")]) -> CallToolResult:
    logger.info(f"Executing trello_archive_list for list {list_id}")
    try:
        async with _client(ctx) as client:
            trello_list = await client.archive_list(list_id)
        return format_success("List archived", list=trello_list)
    except TrelloError as e:
        return _api_failure("trello_archive_list", e)
    except Exception as e:
        return _unexpected_failure("trello_archive_list", e)


@mcp.tool("trello_unarchive_list", description="Restores an archived list.", structured_output=False)
async def unarchive_list(ctx: Context,
                         list_id: Annotated[str, Field(description="List ID to unarchive")]) -> CallToolResult:
    logger.info(f"Executing trello_unarchive_list for list {list_id}")
    try:
        async with _client(ctx) as client:
            trello_list = await client.unarchive_list(list_id)
        return format_success("List unarchived", list=trello_list)
    except TrelloError as e:
        return _api_failure("trello_unarchive_list", e)
    except Exception as e:
        return _unexpected_failure("trello_unarchive_list", e)


@mcp.tool("trello_get_list_cards", description="Gets the cards in a list.", structured_output=False)
async def get_list_cards(ctx: Context,
                         list_id: Annotated[str, Field(description="List ID")],
                         filter: FilterArg = "open",
                         format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_list_cards for list {list_id} (filter={filter})")
    try:
        async with _client(ctx) as client:
            cards = await client.get_list_cards(list_id, filter)
        return format_response(cards, format, "cards")
    except TrelloError as e:
        return _api_failure("trello_get_list_cards", e)
    except Exception as e:
        return _unexpected_failure("trello_get_list_cards", e)


@mcp.tool("trello_archive_all_cards_in_list", description="Archives every card in a list.", structured_output=False)
async def archive_all_cards_in_list(ctx: Context,
                                    list_id: Annotated[str, Field(description="List ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_archive_all_cards_in_list for list {list_id}")
    try:
        async with _client(ctx) as client:
            await client.archive_all_cards_in_list(list_id)
        return format_success("All cards in list archived")
    except TrelloError as e:
        return _api_failure("trello_archive_all_cards_in_list", e)
    except Exception as e:
        return _unexpected_failure("trello_archive_all_cards_in_list", e)


@mcp.tool("trello_move_all_cards_in_list", description="Moves every card in a list to another list, possibly on another board.",
          structured_output=False)
async def move_all_cards_in_list(ctx: Context,
                                 list_id: Annotated[str, Field(description="Source list ID")],
                                 id_board: Annotated[str, Field(description="Destination board ID")],
                                 id_list: Annotated[str, Field(description="Destination list ID")]) -> CallToolResult:
    logger.info(f"Executing trello_move_all_cards_in_list from {list_id} to list {id_list} on board {id_board}")
    try:
        async with _client(ctx) as client:
            await client.move_all_cards_in_list(list_id, id_board, id_list)
        return format_success("All cards moved")
    except TrelloError as e:
        return _api_failure("trello_move_all_cards_in_list", e)
    except Exception as e:
        return _unexpected_failure("trello_move_all_cards_in_list", e)


# --- Card Tools ---

@mcp.tool("trello_get_card", description="Gets a card with its checklists and attachments.", structured_output=False)
async def get_card(ctx: Context,
                   card_id: Annotated[str, Field(description="Card ID")],
                   format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_card for card {card_id}")
    try:
        async with _client(ctx) as client:
            card = await client.get_card(card_id)
        return format_response(card, format, "card")
    except TrelloError as e:
        return _api_failure("trello_get_card", e)
    except Exception as e:
        return _unexpected_failure("trello_get_card", e)


@mcp.tool("trello_create_card", description="Creates a new card in a list. Dates are ISO 8601.", structured_output=False)
async def create_card(
    ctx: Context,
    id_list: Annotated[str, Field(description="List ID")],
    name: Annotated[str, Field(description="Card name")],
    desc: Annotated[Optional[str], Field(description="Description")] = None,
    pos: PositionArg = None,
    due: Annotated[Optional[str], Field(description="Due date (ISO 8601)")] = None,
    start: Annotated[Optional[str], Field(description="Start date (ISO 8601)")] = None,
    due_complete: Annotated[Optional[bool], Field(description="Mark the due date complete")] = None,
    id_members: Annotated[Optional[List[str]], Field(description="Member IDs to assign")] = None,
    id_labels: Annotated[Optional[List[str]], Field(description="Label IDs to add")] = None,
    url_source: Annotated[Optional[str], Field(description="URL to attach")] = None,
    id_card_source: Annotated[Optional[str], Field(description="Card ID to copy")] = None,
    keep_from_source: Annotated[Optional[str],
                                Field(description="Comma-separated properties to copy, or 'all'")] = None,
    address: Annotated[Optional[str], Field(description="Address for the map view")] = None,
    location_name: Annotated[Optional[str], Field(description="Location name for the map view")] = None,
    coordinates: Annotated[Optional[str], Field(description="'latitude,longitude'")] = None,
) -> CallToolResult:
    logger.info(f"Executing trello_create_card '{name}' in list {id_list}")
    try:
        async with _client(ctx) as client:
            card = await client.create_card(
                id_list,
                name,
                desc=desc,
                pos=pos,
                due=due,
                start=start,
                due_complete=due_complete,
                id_members=id_members,
                id_labels=id_labels,
                url_source=url_source,
                id_card_source=id_card_source,
                keep_from_source=keep_from_source,
                address=address,
                location_name=location_name,
                coordinates=coordinates,
            )
        return format_success("Card created", card=card)
    except TrelloError as e:
        return _api_failure("trello_create_card", e)
    except Exception as e:
        return _unexpected_failure("trello_create_card", e)


@mcp.tool("trello_update_card",
          description="Updates a card. Only the fields provided are changed; pass null for due or start to remove the date.",
          structured_output=False)
async def update_card(
    ctx: Context,
    card_id: Annotated[str, Field(description="Card ID to update")],
    name: Annotated[Optional[str], Field(description="New name")] = None,
    desc: Annotated[Optional[str], Field(description="New description")] = None,
    closed: Annotated[Optional[bool], Field(description="Archive/unarchive")] = None,
    id_list: Annotated[Optional[str], Field(description="Move to list ID")] = None,
    id_board: Annotated[Optional[str], Field(description="Move to board ID")] = None,
    pos: PositionArg = None,
    due: Annotated[Optional[str], Field(description="Due date (ISO 8601), or null to remove")] = UNSET,
    start: Annotated[Optional[str], Field(description="Start date (ISO 8601), or null to remove")] = UNSET,
    due_complete: Annotated[Optional[bool], Field(description="Mark the due date complete")] = None,
    subscribed: Annotated[Optional[bool], Field(description="Subscribe to the card")] = None,
) -> CallToolResult:
    logger.info(f"Executing trello_update_card for card {card_id}")
    try:
        async with _client(ctx) as client:
            card = await client.update_card(
                card_id,
                name=name,
                desc=desc,
                closed=closed,
                id_list=id_list,
                id_board=id_board,
                pos=pos,
                due=due,
                start=start,
                due_complete=due_complete,
                subscribed=subscribed,
            )
        return format_success("Card updated", card=card)
    except TrelloError as e:
        return _api_failure("trello_update_card", e)
    except Exception as e:
        return _unexpected_failure("trello_update_card", e)


@mcp.tool("trello_delete_card", description="Deletes a card permanently. WARNING: this cannot be undone!",
          structured_output=False)
async def delete_card(ctx: Context,
                      card_id: Annotated[str, Field(description="Card ID to delete")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_card for card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_card(card_id)
        return format_success(f"Card {card_id} deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_card", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_card", e)


@mcp.tool("trello_archive_card", description="Archives (closes) a card.", structured_output=False)
async def archive_card(ctx: Context,
                       card_id: Annotated[str, Field(description="Card ID to archive")]) -> CallToolResult:
    logger.info(f"Executing trello_archive_card for card {card_id}")
    try:
        async with _client(ctx) as client:
            card = await client.archive_card(card_id)
        return format_success("Card archived", card=card)
    except TrelloError as e:
        return _api_failure("trello_archive_card", e)
    except Exception as e:
        return _unexpected_failure("trello_archive_card", e)


@mcp.tool("trello_unarchive_card", description="Restores an archived card.", structured_output=False)
async def unarchive_card(ctx: Context,
                         card_id: Annotated[str, Field(description="Card ID to unarchive")]) -> CallToolResult:
    logger.info(f"Executing trello_unarchive_card for card {card_id}")
    try:
        async with _client(ctx) as client:
            card = await client.unarchive_card(card_id)
        return format_success("Card unarchived", card=card)
    except TrelloError as e:
        return _api_failure("trello_unarchive_card", e)
    except Exception as e:
        return _unexpected_failure("trello_unarchive_card", e)


@mcp.tool("trello_move_card", description="Moves a card to another list, optionally on another board.",
          structured_output=False)
async def move_card(ctx: Context,
                    card_id: Annotated[str, Field(description="Card ID to move")],
                    id_list: Annotated[str, Field(description="Destination list ID")],
                    id_board: Annotated[Optional[str],
                                        Field(description="Destination board ID (for cross-board moves)")] = None) -> CallToolResult:
    logger.info(f"Executing trello_move_card: card {card_id} to list {id_list}")
    try:
        async with _client(ctx) as client:
            card = await client.move_card(card_id, id_list, id_board)
        return format_success("Card moved", card=card)
    except TrelloError as e:
        return _api_failure("trello_move_card", e)
    except Exception as e:
        return _unexpected_failure("trello_move_card", e)


@mcp.tool("trello_get_card_actions", description="Gets the recent activity (actions) on a card.", structured_output=False)
async def get_card_actions(ctx: Context,
                           card_id: Annotated[str, Field(description="Card ID")],
                           limit: ActionLimitArg = 50,
                           format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_card_actions for card {card_id} (limit={limit})")
    try:
        async with _client(ctx) as client:
            actions = await client.get_card_actions(card_id, limit)
        return format_response(actions, format, "actions")
    except TrelloError as e:
        return _api_failure("trello_get_card_actions", e)
    except Exception as e:
        return _unexpected_failure("trello_get_card_actions", e)


# --- Comment Tools ---

@mcp.tool("trello_add_comment", description="Adds a comment to a card.", structured_output=False)
async def add_comment(ctx: Context,
                      card_id: Annotated[str, Field(description="Card ID")],
                      text: Annotated[str, Field(description="Comment text")]) -> CallToolResult:
    logger.info(f"Executing trello_add_comment on card {card_id}")
    try:
        async with _client(ctx) as client:
            comment = await client.add_comment_to_card(card_id, text)
        return format_success("Comment added", comment=comment)
    except TrelloError as e:
        return _api_failure("trello_add_comment", e)
    except Exception as e:
        return _unexpected_failure("trello_add_comment", e)


@mcp.tool("trello_get_card_comments", description="Gets the comments on a card.", structured_output=False)
async def get_card_comments(ctx: Context,
                            card_id: Annotated[str, Field(description="Card ID")],
                            format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_card_comments for card {card_id}")
    try:
        async with _client(ctx) as client:
            comments = await client.get_card_comments(card_id)
        return format_response(comments, format, "comments")
    except TrelloError as e:
        return _api_failure("trello_get_card_comments", e)
    except Exception as e:
        return _unexpected_failure("trello_get_card_comments", e)


@mcp.tool("trello_update_comment", description="Edits the text of a comment on a card.", structured_output=False)
async def update_comment(ctx: Context,
                         card_id: Annotated[str, Field(description="Card ID")],
                         action_id: Annotated[str, Field(description="Comment (action) ID")],
                         text: Annotated[str, Field(description="New comment text")]) -> CallToolResult:
    logger.info(f"Executing trello_update_comment {action_id} on card {card_id}")
    try:
        async with _client(ctx) as client:
            comment = await client.update_comment(card_id, action_id, text)
        return format_success("Comment updated", comment=comment)
    except TrelloError as e:
        return _api_failure("trello_update_comment", e)
    except Exception as e:
        return _unexpected_failure("trello_update_comment", e)


@mcp.tool("trello_delete_comment", description="Deletes a comment from a card.", structured_output=False)
async def delete_comment(ctx: Context,
                         card_id: Annotated[str, Field(description="Card ID")],
                         action_id: Annotated[str, Field(description="Comment (action) ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_comment {action_id} on card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_comment(card_id, action_id)
        return format_success("Comment deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_comment", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_comment", e)


# --- Card Label & Member Tools ---

@mcp.tool("trello_add_label_to_card", description="Adds an existing board label to a card.", structured_output=False)
async def add_label_to_card(ctx: Context,
                            card_id: Annotated[str, Field(description="Card ID")],
                            label_id: Annotated[str, Field(description="Label ID to add")]) -> CallToolResult:
    logger.info(f"Executing trello_add_label_to_card: label {label_id} to card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.add_label_to_card(card_id, label_id)
        return format_success("Label added to card")
    except TrelloError as e:
        return _api_failure("trello_add_label_to_card", e)
    except Exception as e:
        return _unexpected_failure("trello_add_label_to_card", e)


@mcp.tool("trello_remove_label_from_card", description="Removes a label from a card.", structured_output=False)
async def remove_label_from_card(ctx: Context,
                                 card_id: Annotated[str, Field(description="Card ID")],
                                 label_id: Annotated[str, Field(description="Label ID to remove")]) -> CallToolResult:
    logger.info(f"Executing trello_remove_label_from_card: label {label_id} from card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.remove_label_from_card(card_id, label_id)
        return format_success("Label removed from card")
    except TrelloError as e:
        return _api_failure("trello_remove_label_from_card", e)
    except Exception as e:
        return _unexpected_failure("trello_remove_label_from_card", e)


@mcp.tool("trello_add_member_to_card", description="Assigns a member to a card.", structured_output=False)
async def add_member_to_card(ctx: Context,
                             card_id: Annotated[str, Field(description="Card ID")],
                             member_id: Annotated[str, Field(description="Member ID to add")]) -> CallToolResult:
    logger.info(f"Executing trello_add_member_to_card: member {member_id} to card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.add_member_to_card(card_id, member_id)
        return format_success("Member added to card")
    except TrelloError as e:
        return _api_failure("trello_add_member_to_card", e)
    except Exception as e:
        return _unexpected_failure("trello_add_member_to_card", e)


@mcp.tool("trello_remove_member_from_card", description="Unassigns a member from a card.", structured_output=False)
async def remove_member_from_card(ctx: Context,
                                  card_id: Annotated[str, Field(description="Card ID")],
                                  member_id: Annotated[str, Field(description="Member ID to remove")]) -> CallToolResult:
    logger.info(f"Executing trello_remove_member_from_card: member {member_id} from card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.remove_member_from_card(card_id, member_id)
        return format_success("Member removed from card")
    except TrelloError as e:
        return _api_failure("trello_remove_member_from_card", e)
    except Exception as e:
        return _unexpected_failure("trello_remove_member_from_card", e)


# --- Attachment Tools ---

@mcp.tool("trello_get_card_attachments", description="Gets the attachments of a card.", structured_output=False)
async def get_card_attachments(ctx: Context,
                               card_id: Annotated[str, Field(description="Card ID")],
                               format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_card_attachments for card {card_id}")
    try:
        async with _client(ctx) as client:
            attachments = await client.get_card_attachments(card_id)
        return format_response(attachments, format, "attachments")
    except TrelloError as e:
        return _api_failure("trello_get_card_attachments", e)
    except Exception as e:
        return _unexpected_failure("trello_get_card_attachments", e)


@mcp.tool("trello_add_attachment", description="Attaches a URL to a card.", structured_output=False)
async def add_attachment(ctx: Context,
                         card_id: Annotated[str, Field(description="Card ID")],
                         url: UrlArg,
                         name: Annotated[Optional[str], Field(description="Attachment name")] = None,
                         mime_type: Annotated[Optional[str], Field(description="MIME type")] = None,
                         set_cover: Annotated[Optional[bool], Field(description="Use as the card cover")] = None) -> CallToolResult:
    logger.info(f"Executing trello_add_attachment on card {card_id}")
    try:
        async with _client(ctx) as client:
            attachment = await client.add_attachment_to_card(card_id, url=url, name=name, mime_type=mime_type,
                                                             set_cover=set_cover)
        return format_success("Attachment added", attachment=attachment)
    except TrelloError as e:
        return _api_failure("trello_add_attachment", e)
    except Exception as e:
        return _unexpected_failure("trello_add_attachment", e)


@mcp.tool("trello_delete_attachment", description="Deletes an attachment from a card.", structured_output=False)
async def delete_attachment(ctx: Context,
                            card_id: Annotated[str, Field(description="Card ID")],
                            attachment_id: Annotated[str, Field(description="Attachment ID to delete")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_attachment {attachment_id} on card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_attachment(card_id, attachment_id)
        return format_success("Attachment deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_attachment", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_attachment", e)


# --- Card Custom Field Tools ---

@mcp.tool("trello_get_card_custom_fields", description="Gets the custom field values set on a card.",
          structured_output=False)
async def get_card_custom_fields(ctx: Context,
                                 card_id: Annotated[str, Field(description="Card ID")],
                                 format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_card_custom_fields for card {card_id}")
    try:
        async with _client(ctx) as client:
            items = await client.get_card_custom_field_items(card_id)
        return format_response(items, format, "customFieldItems")
    except TrelloError as e:
        return _api_failure("trello_get_card_custom_fields", e)
    except Exception as e:
        return _unexpected_failure("trello_get_card_custom_fields", e)


@mcp.tool("trello_set_card_custom_field",
          description=("Sets a custom field value on a card. The value object depends on the field type, e.g. "
                       "{\"value\": {\"text\": \"hello\"}}, {\"value\": {\"number\": \"42\"}}, "
                       "{\"idValue\": \"<option id>\"} for dropdowns, or {\"value\": \"\"} to clear."),
          structured_output=False)
async def set_card_custom_field(ctx: Context,
                                card_id: Annotated[str, Field(description="Card ID")],
                                custom_field_id: Annotated[str, Field(description="Custom field ID")],
                                value: Annotated[Dict[str, Any], Field(description="Value object")]) -> CallToolResult:
    logger.info(f"Executing trello_set_card_custom_field {custom_field_id} on card {card_id}")
    try:
        async with _client(ctx) as client:
            await client.set_card_custom_field_value(card_id, custom_field_id, value)
        return format_success("Custom field value set")
    except TrelloError as e:
        return _api_failure("trello_set_card_custom_field", e)
    except Exception as e:
        return _unexpected_failure("trello_set_card_custom_field", e)


# --- Checklist Tools ---

@mcp.tool("trello_get_checklist", description="Gets a checklist with all of its items.", structured_output=False)
async def get_checklist(ctx: Context,
                        checklist_id: Annotated[str, Field(description="Checklist ID")],
                        format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_checklist for checklist {checklist_id}")
    try:
        async with _client(ctx) as client:
            checklist = await client.get_checklist(checklist_id)
        return format_response(checklist, format, "checklist")
    except TrelloError as e:
        return _api_failure("trello_get_checklist", e)
    except Exception as e:
        return _unexpected_failure("trello_get_checklist", e)


@mcp.tool("trello_create_checklist", description="Creates a checklist on a card.", structured_output=False)
async def create_checklist(ctx: Context,
                           id_card: Annotated[str, Field(description="Card ID")],
                           name: Annotated[Optional[str], Field(description="Checklist name")] = None,
                           pos: PositionArg = None,
                           id_checklist_source: Annotated[Optional[str],
                                                          Field(description="Checklist ID to copy")] = None) -> CallToolResult:
    logger.info(f"Executing trello_create_checklist on card {id_card}")
    try:
        async with _client(ctx) as client:
            checklist = await client.create_checklist(id_card, name=name, pos=pos,
                                                      id_checklist_source=id_checklist_source)
        return format_success("Checklist created", checklist=checklist)
    except TrelloError as e:
        return _api_failure("trello_create_checklist", e)
    except Exception as e:
        return _unexpected_failure("trello_create_checklist", e)


@mcp.tool("trello_update_checklist", description="Renames a checklist.", structured_output=False)
async def update_checklist(ctx: Context,
                           checklist_id: Annotated[str, Field(description="Checklist ID")],
                           name: Annotated[str, Field(description="New name")]) -> CallToolResult:
    logger.info(f"Executing trello_update_checklist for checklist {checklist_id}")
    try:
        async with _client(ctx) as client:
            checklist = await client.update_checklist(checklist_id, name)
        return format_success("Checklist updated", checklist=checklist)
    except TrelloError as e:
        return _api_failure("trello_update_checklist", e)
    except Exception as e:
        return _unexpected_failure("trello_update_checklist", e)


@mcp.tool("trello_delete_checklist", description="Deletes a checklist and its items.", structured_output=False)
async def delete_checklist(ctx: Context,
                           checklist_id: Annotated[str, Field(description="Checklist ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_checklist for checklist {checklist_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_checklist(checklist_id)
        return format_success("Checklist deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_checklist", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_checklist", e)


@mcp.tool("trello_get_card_checklists", description="Gets every checklist on a card.", structured_output=False)
async def get_card_checklists(ctx: Context,
                              card_id: Annotated[str, Field(description="Card ID")],
                              format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_card_checklists for card {card_id}")
    try:
        async with _client(ctx) as client:
            checklists = await client.get_card_checklists(card_id)
        return format_response(checklists, format, "checklists")
    except TrelloError as e:
        return _api_failure("trello_get_card_checklists", e)
    except Exception as e:
        return _unexpected_failure("trello_get_card_checklists", e)


@mcp.tool("trello_get_check_items", description="Gets the items of a checklist.", structured_output=False)
async def get_check_items(ctx: Context,
                          checklist_id: Annotated[str, Field(description="Checklist ID")],
                          format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_check_items for checklist {checklist_id}")
    try:
        async with _client(ctx) as client:
            items = await client.get_check_items(checklist_id)
        return format_response(items, format, "checkItems")
    except TrelloError as e:
        return _api_failure("trello_get_check_items", e)
    except Exception as e:
        return _unexpected_failure("trello_get_check_items", e)


@mcp.tool("trello_create_check_item", description="Adds an item to a checklist.", structured_output=False)
async def create_check_item(ctx: Context,
                            checklist_id: Annotated[str, Field(description="Checklist ID")],
                            name: Annotated[str, Field(description="Check item name")],
                            pos: PositionArg = None,
                            checked: Annotated[Optional[bool], Field(description="Start checked")] = None,
                            due: Annotated[Optional[str], Field(description="Due date (ISO 8601)")] = None,
                            id_member: Annotated[Optional[str], Field(description="Member ID to assign")] = None) -> CallToolResult:
    logger.info(f"Executing trello_create_check_item '{name}' in checklist {checklist_id}")
    try:
        async with _client(ctx) as client:
            check_item = await client.create_check_item(checklist_id, name, pos=pos, checked=checked,
                                                        due=due, id_member=id_member)
        return format_success("Check item created", checkItem=check_item)
    except TrelloError as e:
        return _api_failure("trello_create_check_item", e)
    except Exception as e:
        return _unexpected_failure("trello_create_check_item", e)


@mcp.tool("trello_update_check_item",
          description="Updates a check item through its card. Pass null for due or id_member to clear them.",
          structured_output=False)
async def update_check_item(ctx: Context,
                            card_id: Annotated[str, Field(description="Card ID")],
                            check_item_id: Annotated[str, Field(description="Check item ID")],
                            name: Annotated[Optional[str], Field(description="New name")] = None,
                            state: Annotated[Optional[CheckItemState], Field(description="Complete/incomplete")] = None,
                            pos: PositionArg = None,
                            due: Annotated[Optional[str], Field(description="Due date (ISO 8601), or null to remove")] = UNSET,
                            id_member: Annotated[Optional[str],
                                                 Field(description="Assigned member ID, or null to unassign")] = UNSET) -> CallToolResult:
    logger.info(f"Executing trello_update_check_item {check_item_id} on card {card_id}")
    try:
        async with _client(ctx) as client:
            check_item = await client.update_check_item(card_id, check_item_id, name=name, state=state, pos=pos,
                                                        due=due, id_member=id_member)
        return format_success("Check item updated", checkItem=check_item)
    except TrelloError as e:
        return _api_failure("trello_update_check_item", e)
    except Exception as e:
        return _unexpected_failure("trello_update_check_item", e)


@mcp.tool("trello_delete_check_item", description="Deletes an item from a checklist.", structured_output=False)
async def delete_check_item(ctx: Context,
                            checklist_id: Annotated[str, Field(description="Checklist ID")],
                            check_item_id: Annotated[str, Field(description="Check item ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_check_item {check_item_id} in checklist {checklist_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_check_item(checklist_id, check_item_id)
        return format_success("Check item deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_check_item", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_check_item", e)


# --- Label Tools ---

@mcp.tool("trello_get_label", description="Gets a label.", structured_output=False)
async def get_label(ctx: Context,
                    label_id: Annotated[str, Field(description="Label ID")],
                    format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_label for label {label_id}")
    try:
        async with _client(ctx) as client:
            label = await client.get_label(label_id)
        return format_response(label, format, "label")
    except TrelloError as e:
        return _api_failure("trello_get_label", e)
    except Exception as e:
        return _unexpected_failure("trello_get_label", e)


@mcp.tool("trello_create_label", description="Creates a label on a board.", structured_output=False)
async def create_label(ctx: Context,
                       id_board: Annotated[str, Field(description="Board ID")],
                       name: Annotated[str, Field(description="Label name")],
                       color: Annotated[Optional[Color], Field(description="Label color, or null for none")] = None) -> CallToolResult:
    logger.info(f"Executing trello_create_label '{name}' on board {id_board}")
    try:
        async with _client(ctx) as client:
            label = await client.create_label(name, id_board, color)
        return format_success("Label created", label=label)
    except TrelloError as e:
        return _api_failure("trello_create_label", e)
    except Exception as e:
        return _unexpected_failure("trello_create_label", e)


@mcp.tool("trello_update_label", description="Updates a label. Pass null for color to remove it.", structured_output=False)
async def update_label(ctx: Context,
                       label_id: Annotated[str, Field(description="Label ID")],
                       name: Annotated[Optional[str], Field(description="New name")] = None,
                       color: Annotated[Optional[Color], Field(description="New color, or null to remove")] = UNSET) -> CallToolResult:
    logger.info(f"Executing trello_update_label for label {label_id}")
    try:
        async with _client(ctx) as client:
            label = await client.update_label(label_id, name=name, color=color)
        return format_success("Label updated", label=label)
    except TrelloError as e:
        return _api_failure("trello_update_label", e)
    except Exception as e:
        return _unexpected_failure("trello_update_label", e)


@mcp.tool("trello_delete_label", description="Deletes a label from its board.", structured_output=False)
async def delete_label(ctx: Context,
                       label_id: Annotated[str, Field(description="Label ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_label for label {label_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_label(label_id)
        return format_success("Label deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_label", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_label", e)


# --- Custom Field Tools ---

@mcp.tool("trello_get_custom_field", description="Gets a custom field definition.", structured_output=False)
async def get_custom_field(ctx: Context,
                           custom_field_id: Annotated[str, Field(description="Custom field ID")],
                           format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_custom_field for field {custom_field_id}")
    try:
        async with _client(ctx) as client:
            field = await client.get_custom_field(custom_field_id)
        return format_response(field, format, "customField")
    except TrelloError as e:
        return _api_failure("trello_get_custom_field", e)
    except Exception as e:
        return _unexpected_failure("trello_get_custom_field", e)


@mcp.tool("trello_create_custom_field", description="Creates a custom field on a board.", structured_output=False)
async def create_custom_field(ctx: Context,
                              id_model: Annotated[str, Field(description="Board ID")],
                              name: Annotated[str, Field(description="Field name")],
                              type: Annotated[CustomFieldType, Field(description="Field type")],
                              pos: PositionArg = None,
                              display_card_front: Annotated[Optional[bool],
                                                            Field(description="Show on the card front")] = None) -> CallToolResult:
    logger.info(f"Executing trello_create_custom_field '{name}' ({type}) on board {id_model}")
    try:
        async with _client(ctx) as client:
            field = await client.create_custom_field(id_model, name, type, pos=pos,
                                                     display_card_front=display_card_front)
        return format_success("Custom field created", customField=field)
    except TrelloError as e:
        return _api_failure("trello_create_custom_field", e)
    except Exception as e:
        return _unexpected_failure("trello_create_custom_field", e)


@mcp.tool("trello_update_custom_field", description="Updates a custom field definition.", structured_output=False)
async def update_custom_field(ctx: Context,
                              custom_field_id: Annotated[str, Field(description="Custom field ID")],
                              name: Annotated[Optional[str], Field(description="New name")] = None,
                              pos: PositionArg = None,
                              display_card_front: Annotated[Optional[bool],
                                                            Field(description="Show on the card front")] = None) -> CallToolResult:
    logger.info(f"Executing trello_update_custom_field for field {custom_field_id}")
    try:
        async with _client(ctx) as client:
            field = await client.update_custom_field(custom_field_id, name=name, pos=pos,
                                                     display_card_front=display_card_front)
        return format_success("Custom field updated", customField=field)
    except TrelloError as e:
        return _api_failure("trello_update_custom_field", e)
    except Exception as e:
        return _unexpected_failure("trello_update_custom_field", e)


@mcp.tool("trello_delete_custom_field", description="Deletes a custom field and its values on every card.",
          structured_output=False)
async def delete_custom_field(ctx: Context,
                              custom_field_id: Annotated[str, Field(description="Custom field ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_custom_field for field {custom_field_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_custom_field(custom_field_id)
        return format_success("Custom field deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_custom_field", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_custom_field", e)


@mcp.tool("trello_get_custom_field_options", description="Gets the options of a dropdown (list) custom field.",
          structured_output=False)
async def get_custom_field_options(ctx: Context,
                                   custom_field_id: Annotated[str, Field(description="Custom field ID")],
                                   format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_custom_field_options for field {custom_field_id}")
    try:
        async with _client(ctx) as client:
            options = await client.get_custom_field_options(custom_field_id)
        return format_response(options, format, "customFieldOptions")
    except TrelloError as e:
        return _api_failure("trello_get_custom_field_options", e)
    except Exception as e:
        return _unexpected_failure("trello_get_custom_field_options", e)


@mcp.tool("trello_add_custom_field_option", description="Adds an option to a dropdown (list) custom field.",
          structured_output=False)
async def add_custom_field_option(ctx: Context,
                                  custom_field_id: Annotated[str, Field(description="Custom field ID")],
                                  value: Annotated[str, Field(description="Option text")],
                                  color: Annotated[Optional[Color], Field(description="Option color")] = None) -> CallToolResult:
    logger.info(f"Executing trello_add_custom_field_option '{value}' on field {custom_field_id}")
    try:
        async with _client(ctx) as client:
            option = await client.add_custom_field_option(custom_field_id, value, color)
        return format_success("Option added", option=option)
    except TrelloError as e:
        return _api_failure("trello_add_custom_field_option", e)
    except Exception as e:
        return _unexpected_failure("trello_add_custom_field_option", e)


@mcp.tool("trello_delete_custom_field_option", description="Deletes an option from a dropdown custom field.",
          structured_output=False)
async def delete_custom_field_option(ctx: Context,
                                     custom_field_id: Annotated[str, Field(description="Custom field ID")],
                                     option_id: Annotated[str, Field(description="Option ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_custom_field_option {option_id} on field {custom_field_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_custom_field_option(custom_field_id, option_id)
        return format_success("Option deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_custom_field_option", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_custom_field_option", e)


# --- Member Tools ---

@mcp.tool("trello_get_me", description="Gets the member that owns the credentials.", structured_output=False)
async def get_me(ctx: Context, format: FormatArg = "json") -> CallToolResult:
    logger.info("Executing trello_get_me")
    try:
        async with _client(ctx) as client:
            member = await client.get_me()
        return format_response(member, format, "member")
    except TrelloError as e:
        return _api_failure("trello_get_me", e)
    except Exception as e:
        return _unexpected_failure("trello_get_me", e)


@mcp.tool("trello_get_member", description="Gets a member by ID or username.", structured_output=False)
async def get_member(ctx: Context,
                     id_or_username: Annotated[str, Field(description="Member ID or username")],
                     format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_member for {id_or_username}")
    try:
        async with _client(ctx) as client:
            member = await client.get_member(id_or_username)
        return format_response(member, format, "member")
    except TrelloError as e:
        return _api_failure("trello_get_member", e)
    except Exception as e:
        return _unexpected_failure("trello_get_member", e)


@mcp.tool("trello_get_member_boards", description="Gets the boards of a member.", structured_output=False)
async def get_member_boards(ctx: Context,
                            id_or_username: Annotated[str, Field(description="Member ID or username")] = "me",
                            filter: FilterArg = "open",
                            format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_member_boards for {id_or_username} (filter={filter})")
    try:
        async with _client(ctx) as client:
            boards = await client.get_member_boards(id_or_username, filter)
        return format_response(boards, format, "boards")
    except TrelloError as e:
        return _api_failure("trello_get_member_boards", e)
    except Exception as e:
        return _unexpected_failure("trello_get_member_boards", e)


@mcp.tool("trello_get_member_cards", description="Gets the cards a member is assigned to.", structured_output=False)
async def get_member_cards(ctx: Context,
                           id_or_username: Annotated[str, Field(description="Member ID or username")] = "me",
                           format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_member_cards for {id_or_username}")
    try:
        async with _client(ctx) as client:
            cards = await client.get_member_cards(id_or_username)
        return format_response(cards, format, "cards")
    except TrelloError as e:
        return _api_failure("trello_get_member_cards", e)
    except Exception as e:
        return _unexpected_failure("trello_get_member_cards", e)


@mcp.tool("trello_get_member_organizations", description="Gets the workspaces a member belongs to.",
          structured_output=False)
async def get_member_organizations(ctx: Context,
                                   id_or_username: Annotated[str, Field(description="Member ID or username")] = "me",
                                   format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_member_organizations for {id_or_username}")
    try:
        async with _client(ctx) as client:
            orgs = await client.get_member_organizations(id_or_username)
        return format_response(orgs, format, "organizations")
    except TrelloError as e:
        return _api_failure("trello_get_member_organizations", e)
    except Exception as e:
        return _unexpected_failure("trello_get_member_organizations", e)


@mcp.tool("trello_search_members", description="Searches members by name, username or email.", structured_output=False)
async def search_members(ctx: Context,
                         query: Annotated[str, Field(description="Search query")],
                         limit: Annotated[int, Field(ge=1, le=20, description="Max results")] = 8,
                         format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_search_members (limit={limit})")
    try:
        async with _client(ctx) as client:
            members = await client.search_members(query, limit)
        return format_response(members, format, "members")
    except TrelloError as e:
        return _api_failure("trello_search_members", e)
    except Exception as e:
        return _unexpected_failure("trello_search_members", e)


# --- Organization Tools ---

@mcp.tool("trello_get_organization", description="Gets a workspace (organization).", structured_output=False)
async def get_organization(ctx: Context,
                           org_id: Annotated[str, Field(description="Organization ID or name")],
                           format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_organization for {org_id}")
    try:
        async with _client(ctx) as client:
            org = await client.get_organization(org_id)
        return format_response(org, format, "organization")
    except TrelloError as e:
        return _api_failure("trello_get_organization", e)
    except Exception as e:
        return _unexpected_failure("trello_get_organization", e)


@mcp.tool("trello_create_organization", description="Creates a workspace (organization).", structured_output=False)
async def create_organization(ctx: Context,
                              display_name: Annotated[str, Field(description="Display name")],
                              name: Annotated[Optional[str], Field(description="URL-friendly name")] = None,
                              desc: Annotated[Optional[str], Field(description="Description")] = None,
                              website: Annotated[Optional[str], Field(description="Website URL")] = None) -> CallToolResult:
    logger.info(f"Executing trello_create_organization '{display_name}'")
    try:
        async with _client(ctx) as client:
            org = await client.create_organization(display_name, name=name, desc=desc, website=website)
        return format_success("Organization created", organization=org)
    except TrelloError as e:
        return _api_failure("trello_create_organization", e)
    except Exception as e:
        return _unexpected_failure("trello_create_organization", e)


@mcp.tool("trello_update_organization",
          description="Updates a workspace (organization). Pass null for website to remove it.",
          structured_output=False)
async def update_organization(
    ctx: Context,
    org_id: Annotated[str, Field(description="Organization ID or name")],
    display_name: Annotated[Optional[str], Field(description="New display name")] = None,
    name: Annotated[Optional[str], Field(description="New URL-friendly name")] = None,
    desc: Annotated[Optional[str], Field(description="New description")] = None,
    website: Annotated[Optional[str], Field(description="New website URL, or null to remove")] = UNSET,
    prefs_permission_level: Annotated[Optional[Literal["private", "public"]],
                                      Field(description="Workspace visibility")] = None,
    prefs_org_invite_restrict: Annotated[Optional[str],
                                         Field(description="Email domain that invitations are restricted to")] = None,
    prefs_board_visibility_restrict_private: Annotated[Optional[Literal["admin", "none", "org"]],
                                                       Field(description="Who may create private boards")] = None,
    prefs_board_visibility_restrict_org: Annotated[Optional[Literal["admin", "none", "org"]],
                                                   Field(description="Who may create workspace-visible boards")] = None,
    prefs_board_visibility_restrict_public: Annotated[Optional[Literal["admin", "none", "org"]],
                                                      Field(description="Who may create public boards")] = None,
) -> CallToolResult:
    logger.info(f"Executing trello_update_organization for {org_id}")
    try:
        async with _client(ctx) as client:
            org = await client.update_organization(
                org_id,
                display_name=display_name,
                name=name,
                desc=desc,
                website=website,
                prefs_permission_level=prefs_permission_level,
                prefs_org_invite_restrict=prefs_org_invite_restrict,
                prefs_board_visibility_restrict_private=prefs_board_visibility_restrict_private,
                prefs_board_visibility_restrict_org=prefs_board_visibility_restrict_org,
                prefs_board_visibility_restrict_public=prefs_board_visibility_restrict_public,
            )
        return format_success("Organization updated", organization=org)
    except TrelloError as e:
        return _api_failure("trello_update_organization", e)
    except Exception as e:
        return _unexpected_failure("trello_update_organization", e)


@mcp.tool("trello_delete_organization", description="Deletes a workspace. WARNING: this cannot be undone!",
          structured_output=False)
async def delete_organization(ctx: Context,
                              org_id: Annotated[str, Field(description="Organization ID or name")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_organization for {org_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_organization(org_id)
        return format_success(f"Organization {org_id} deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_organization", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_organization", e)


@mcp.tool("trello_get_organization_members", description="Gets the members of a workspace.", structured_output=False)
async def get_organization_members(ctx: Context,
                                   org_id: Annotated[str, Field(description="Organization ID or name")],
                                   format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_organization_members for {org_id}")
    try:
        async with _client(ctx) as client:
            members = await client.get_organization_members(org_id)
        return format_response(members, format, "members")
    except TrelloError as e:
        return _api_failure("trello_get_organization_members", e)
    except Exception as e:
        return _unexpected_failure("trello_get_organization_members", e)


@mcp.tool("trello_get_organization_boards", description="Gets the boards of a workspace.", structured_output=False)
async def get_organization_boards(ctx: Context,
                                  org_id: Annotated[str, Field(description="Organization ID or name")],
                                  filter: FilterArg = "open",
                                  format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_organization_boards for {org_id} (filter={filter})")
    try:
        async with _client(ctx) as client:
            boards = await client.get_organization_boards(org_id, filter)
        return format_response(boards, format, "boards")
    except TrelloError as e:
        return _api_failure("trello_get_organization_boards", e)
    except Exception as e:
        return _unexpected_failure("trello_get_organization_boards", e)


# --- Action Tools ---

@mcp.tool("trello_get_action", description="Gets a single action (activity entry) by ID.", structured_output=False)
async def get_action(ctx: Context,
                     action_id: Annotated[str, Field(description="Action ID")],
                     format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_action for action {action_id}")
    try:
        async with _client(ctx) as client:
            action = await client.get_action(action_id)
        return format_response(action, format, "action")
    except TrelloError as e:
        return _api_failure("trello_get_action", e)
    except Exception as e:
        return _unexpected_failure("trello_get_action", e)


# --- Search Tools ---

@mcp.tool("trello_search",
          description=("Searches boards, cards, members and workspaces. Supports Trello search operators such as "
                       "board:name, list:name, label:name, member:username, is:open, is:archived, has:attachments, "
                       "due:day, due:week and due:overdue."),
          structured_output=False)
async def search(ctx: Context,
                 query: Annotated[str, Field(description="Search query")],
                 model_types: Annotated[Optional[List[Literal["boards", "cards", "members", "organizations"]]],
                                        Field(description="Types to search")] = None,
                 id_boards: Annotated[Optional[List[str]], Field(description="Limit to these board IDs")] = None,
                 id_organizations: Annotated[Optional[List[str]],
                                             Field(description="Limit to these workspace IDs")] = None,
                 cards_limit: Annotated[int, Field(ge=1, le=1000, description="Max cards")] = 10,
                 boards_limit: Annotated[int, Field(ge=1, le=1000, description="Max boards")] = 10,
                 partial: Annotated[bool, Field(description="Match partial words")] = True,
                 format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_search (types={model_types or 'default'})")
    try:
        async with _client(ctx) as client:
            results = await client.search(
                query,
                model_types=model_types,
                id_boards=id_boards,
                id_organizations=id_organizations,
                cards_limit=cards_limit,
                boards_limit=boards_limit,
                partial=partial,
            )
        return format_response(results, format, "searchResults")
    except TrelloError as e:
        return _api_failure("trello_search", e)
    except Exception as e:
        return _unexpected_failure("trello_search", e)


# --- Webhook Tools ---

@mcp.tool("trello_list_webhooks", description="Lists the webhooks registered under the caller's token.",
          structured_output=False)
async def list_webhooks(ctx: Context, format: FormatArg = "json") -> CallToolResult:
    logger.info("Executing trello_list_webhooks")
    try:
        async with _client(ctx) as client:
            webhooks = await client.get_webhooks()
        return format_response(webhooks, format, "webhooks")
    except TrelloError as e:
        return _api_failure("trello_list_webhooks", e)
    except Exception as e:
        return _unexpected_failure("trello_list_webhooks", e)


@mcp.tool("trello_get_webhook", description="Gets a webhook.", structured_output=False)
async def get_webhook(ctx: Context,
                      webhook_id: Annotated[str, Field(description="Webhook ID")],
                      format: FormatArg = "json") -> CallToolResult:
    logger.info(f"Executing trello_get_webhook for webhook {webhook_id}")
    try:
        async with _client(ctx) as client:
            webhook = await client.get_webhook(webhook_id)
        return format_response(webhook, format, "webhook")
    except TrelloError as e:
        return _api_failure("trello_get_webhook", e)
    except Exception as e:
        return _unexpected_failure("trello_get_webhook", e)


@mcp.tool("trello_create_webhook",
          description="Creates a webhook that calls back to a URL whenever the watched model changes.",
          structured_output=False)
async def create_webhook(ctx: Context,
                         callback_url: UrlArg,
                         id_model: Annotated[str, Field(description="ID of the board, list, card or member to watch")],
                         description: Annotated[Optional[str], Field(description="Description")] = None,
                         active: Annotated[bool, Field(description="Active status")] = True) -> CallToolResult:
    logger.info(f"Executing trello_create_webhook for model {id_model}")
    try:
        async with _client(ctx) as client:
            webhook = await client.create_webhook(callback_url, id_model, description=description, active=active)
        return format_success("Webhook created", webhook=webhook)
    except TrelloError as e:
        return _api_failure("trello_create_webhook", e)
    except Exception as e:
        return _unexpected_failure("trello_create_webhook", e)


@mcp.tool("trello_update_webhook", description="Updates a webhook.", structured_output=False)
async def update_webhook(ctx: Context,
                         webhook_id: Annotated[str, Field(description="Webhook ID")],
                         callback_url: Annotated[Optional[str],
                                                 Field(pattern=r"^https?://", description="New callback URL")] = None,
                         id_model: Annotated[Optional[str], Field(description="New model ID")] = None,
                         description: Annotated[Optional[str], Field(description="New description")] = None,
                         active: Annotated[Optional[bool], Field(description="Active status")] = None) -> CallToolResult:
    logger.info(f"Executing trello_update_webhook for webhook {webhook_id}")
    try:
        async with _client(ctx) as client:
            webhook = await client.update_webhook(webhook_id, callback_url=callback_url, id_model=id_model,
                                                  description=description, active=active)
        return format_success("Webhook updated", webhook=webhook)
    except TrelloError as e:
        return _api_failure("trello_update_webhook", e)
    except Exception as e:
        return _unexpected_failure("trello_update_webhook", e)


@mcp.tool("trello_delete_webhook", description="Deletes a webhook.", structured_output=False)
async def delete_webhook(ctx: Context,
                         webhook_id: Annotated[str, Field(description="Webhook ID")]) -> CallToolResult:
    logger.warning(f"Executing trello_delete_webhook for webhook {webhook_id}")
    try:
        async with _client(ctx) as client:
            await client.delete_webhook(webhook_id)
        return format_success("Webhook deleted")
    except TrelloError as e:
        return _api_failure("trello_delete_webhook", e)
    except Exception as e:
        return _unexpected_failure("trello_delete_webhook", e)


# --- HTTP Routes ---

@mcp.custom_route("/health", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "server": SERVER_NAME})


@mcp.custom_route("/", methods=["GET"])
@mcp.custom_route("/{path:path}", methods=["GET"])
async def server_info(request: Request) -> JSONResponse:
    """Describes the server, its endpoints and how to authenticate."""
    tools = await mcp.list_tools()
    return JSONResponse({
        "name": SERVER_NAME,
        "version": __version__,
        "description": "Multi-tenant Trello MCP Server",
        "endpoints": {
            "mcp": f"{mcp.settings.streamable_http_path} (POST) - Streamable HTTP MCP endpoint",
            "health": "/health - Health check",
        },
        "authentication": {
            "description": "Pass tenant credentials via request headers",
            "required_headers": {
                API_KEY_HEADER: "Trello API key",
                TOKEN_HEADER: "Trello API token",
            },
            "get_credentials": CREDENTIALS_URL,
        },
        "available_tools": [tool.name for tool in tools],
    })


def create_app(transport: str = "http") -> Starlette:
    """Builds the ASGI app for an HTTP transport with the tenant header check in front of the MCP endpoints."""
    if transport == "sse":
        app = mcp.sse_app()
        protected = (mcp.settings.sse_path, mcp.settings.message_path)
    else:
        app = mcp.streamable_http_app()
        protected = (mcp.settings.streamable_http_path,)
    app.add_middleware(TenantCredentialsMiddleware, protected_paths=protected)
    return app


# --- Run the server ---

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trello MCP Bridge")
    parser.add_argument("--sse", action="store_true",
                        help="Use SSE transport mode (default is streamable HTTP)")
    parser.add_argument("--stdio", action="store_true",
                        help="Use stdio transport mode with credentials from TRELLO_API_KEY / TRELLO_TOKEN")
    parser.add_argument("--host", type=str, default=settings.HOST,
                        help="Host to bind to for HTTP server")
    parser.add_argument("--port", type=int, default=settings.PORT,
                        help="Port to bind to for HTTP server")
    return parser.parse_args(argv)


def select_transport(args: argparse.Namespace) -> str:
    if args.stdio:
        return "stdio"
    if args.sse:
        return "sse"
    return settings.TRANSPORT_MODE


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    transport = select_transport(args)

    if transport == "stdio":
        logger.info(f"Starting {SERVER_NAME} {__version__} on stdio")
        mcp.run()
        return

    logger.info(f"Starting {SERVER_NAME} {__version__} ({transport}) on {args.host}:{args.port}")
    uvicorn.run(create_app(transport), host=args.host, port=args.port, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
