"""
Response formatting for tool results.

Read tools render their result as pretty-printed JSON or as a markdown
summary chosen by an entity kind tag ("boards", "card", "checklists", ...).
Mutating tools return a {success, message, <entity>} JSON envelope, and every
failure becomes an error envelope with structured details.
"""
import json
import re
from datetime import datetime
from typing import Any, Dict, List

from mcp.types import CallToolResult, TextContent

from trello_mcp.errors import TrelloError, error_details

GENERIC_MAX_COLUMNS = 5
GENERIC_MAX_CELL = 50


def _text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_response(data: Any, format: str = "json", entity_type: str = "items") -> CallToolResult:
    """Renders a successful read result as JSON (verbatim) or markdown."""
    if format == "markdown":
        return _text_result(format_as_markdown(data, entity_type))
    return _text_result(_dumps(data))


def format_success(message: str, **entities: Any) -> CallToolResult:
    """Envelope for mutating tools: {"success": true, "message": ..., <entity name>: data}."""
    payload: Dict[str, Any] = {"success": True, "message": message}
    payload.update(entities)
    return _text_result(_dumps(payload))


def format_error(error: Any) -> CallToolResult:
    """Turns any exception (or other raised value) into the error envelope."""
    if isinstance(error, BaseException):
        message = f"Error: {error}"
        details = error_details(error)
    else:
        message = f"Error: {error}"
        details = {"name": type(error).__name__, "message": str(error)}

    if isinstance(error, TrelloError) and error.retryable:
        message += " (retryable)"

    return _text_result(_dumps({"error": message, "details": details}), is_error=True)


# --- Markdown ---

def format_as_markdown(data: Any, entity_type: str) -> str:
    if isinstance(data, list):
        return _format_list(data, entity_type)
    if isinstance(data, dict):
        if entity_type == "checklist" and "checkItems" in data:
            return "\n".join(["## Checklist", "", _checklists_block([data])])
        return _format_object(data, entity_type)
    return str(data)


def _format_list(items: List[Any], entity_type: str) -> str:
    if not items:
        return f"## {_capitalize(entity_type)}\n\n_No items found._"

    lines = [f"## {_capitalize(entity_type)}", f"**Count:** {len(items)}", ""]
    renderer = _TABLES.get(entity_type, _generic_table)
    lines.append(renderer(items))
    return "\n".join(lines)


def _table(header: List[str], rows: List[List[str]]) -> str:
    lines = ["| " + " | ".join(header) + " |", "|" + "|".join("---" for _ in header) + "|"]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return "\n".join(lines)


def _boards_table(boards: List[Dict[str, Any]]) -> str:
    rows = [
        [escape_markdown(b.get("name", "")), f"`{b.get('id', '')}`",
         "Closed" if b.get("closed") else "Open", b.get("shortUrl") or "-"]
        for b in boards
    ]
    return _table(["Name", "ID", "Status", "URL"], rows)


def _lists_table(lists: List[Dict[str, Any]]) -> str:
    rows = [
        [escape_markdown(lst.get("name", "")), f"`{lst.get('id', '')}`",
         "Archived" if lst.get("closed") else "Active", _cell(lst.get("pos"))]
        for lst in lists
    ]
    return _table(["Name", "ID", "Status", "Position"], rows)


def _cards_table(cards: List[Dict[str, Any]]) -> str:
    rows = []
    for card in cards:
        due = _short_date(card.get("due")) if card.get("due") else "-"
        if card.get("dueComplete"):
            due += " (Done)"
        rows.append([
            escape_markdown(card.get("name", "")), f"`{card.get('id', '')}`", due,
            "Archived" if card.get("closed") else "Active", card.get("shortUrl") or "-",
        ])
    return _table(["Name", "ID", "Due", "Status", "URL"], rows)


def _labels_table(labels: List[Dict[str, Any]]) -> str:
    rows = [
        [escape_markdown(label.get("name") or "(no name)"), f"`{label.get('id', '')}`",
         label.get("color") or "none"]
        for label in labels
    ]
    return _table(["Name", "ID", "Color"], rows)


def _members_table(members: List[Dict[str, Any]]) -> str:
    rows = [
        [escape_markdown(m.get("fullName", "")), f"@{m.get('username', '')}", f"`{m.get('id', '')}`"]
        for m in members
    ]
    return _table(["Name", "Username", "ID"], rows)


def _organizations_table(orgs: List[Dict[str, Any]]) -> str:
    rows = [
        [escape_markdown(o.get("displayName", "")), f"`{o.get('id', '')}`", o.get("url") or "-"]
        for o in orgs
    ]
    return _table(["Name", "ID", "URL"], rows)


def _checklists_block(checklists: List[Dict[str, Any]]) -> str:
    lines = []
    for checklist in checklists:
        items = checklist.get("checkItems") or []
        completed = sum(1 for item in items if item.get("state") == "complete")
        lines.append(f"### {escape_markdown(checklist.get('name', ''))} ({completed}/{len(items)})")
        lines.append(f"**ID:** `{checklist.get('id', '')}`")
        lines.append("")
        if items:
            for item in items:
                checkbox = "[x]" if item.get("state") == "complete" else "[ ]"
                lines.append(f"- {checkbox} {escape_markdown(item.get('name', ''))}")
        else:
            lines.append("_No items_")
        lines.append("")
    return "\n".join(lines)


def _generic_table(items: List[Any]) -> str:
    first = items[0]
    if not isinstance(first, dict):
        return "\n".join(f"- {escape_markdown(_cell(item))}" for item in items)

    keys = list(first.keys())[:GENERIC_MAX_COLUMNS]
    rows = []
    for item in items:
        record = item if isinstance(item, dict) else {}
        row = []
        for key in keys:
            value = record.get(key)
            if value is None:
                row.append("-")
            elif isinstance(value, (dict, list)):
                row.append("(object)")
            else:
                row.append(escape_markdown(_cell(value)[:GENERIC_MAX_CELL]))
        rows.append(row)
    return _table(keys, rows)


_TABLES = {
    "boards": _boards_table,
    "lists": _lists_table,
    "cards": _cards_table,
    "labels": _labels_table,
    "members": _members_table,
    "checklists": _checklists_block,
    "organizations": _organizations_table,
}


def _format_object(data: Dict[str, Any], entity_type: str) -> str:
    lines = [f"## {_capitalize(re.sub(r's$', '', entity_type))}", ""]
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            lines.append(f"**{format_key(key)}:**")
            lines.append("```json")
            lines.append(_dumps(value))
            lines.append("```")
        else:
            lines.append(f"**{format_key(key)}:** {_cell(value)}")
    return "\n".join(lines)


# --- Helpers ---

def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "-"
    return str(value)


def _short_date(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value


def format_key(key: str) -> str:
    """camelCase to Title Case: 'dateLastActivity' -> 'Date Last Activity'."""
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return _capitalize(spaced).strip()


def escape_markdown(text: str) -> str:
    """Makes text safe for a table cell: pipes are escaped and line breaks become spaces."""
    return str(text).replace("|", "\\|").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
