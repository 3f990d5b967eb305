#!/usr/bin/env python
"""
Verification script for the Trello client behind the MCP tools.
Runs the Create-Read-Update-Delete lifecycle of the main resources on a
throwaway board, then deletes the board.

Reads TRELLO_API_KEY and TRELLO_TOKEN from the environment (or .env).
"""

import asyncio
import logging
import uuid

from trello_mcp.config import settings
from trello_mcp.models import TenantCredentials
from trello_mcp.trello_client import TrelloClient

# Setup logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


async def run_verification():
    if not settings.TRELLO_API_KEY or not settings.TRELLO_TOKEN:
        print("❌ TRELLO_API_KEY and TRELLO_TOKEN must be set.")
        return

    credentials = TenantCredentials(api_key=settings.TRELLO_API_KEY, token=settings.TRELLO_TOKEN)
    async with TrelloClient(credentials) as client:
        print(f"Starting verification on {settings.TRELLO_API_URL}...")

        # 1. Connection
        status = await client.test_connection()
        if not status["connected"]:
            print(f"❌ Connection failed: {status['message']}")
            return
        print(f"✅ {status['message']}")

        # 2. Board
        try:
            board = await client.create_board(f"Verify Board {uuid.uuid4()}", default_lists=False)
            print(f"✅ Created Board (ID: {board['id']})")
        except Exception as e:
            print(f"❌ Board creation failed: {e}")
            return

        try:
            await verify_board_contents(client, board["id"])
        finally:
            await client.delete_board(board["id"])
            print("✅ Deleted Board")

    print("\nVerification Complete.")


async def verify_board_contents(client, board_id):
    # 3. List and Card Lifecycle
    print("\n--- Testing Lists and Cards ---")
    try:
        todo = await client.create_list("To Do", board_id)
        done = await client.create_list("Done", board_id, pos="bottom")
        print(f"✅ Created Lists ({todo['id']}, {done['id']})")

        card_name = f"Verify Card {uuid.uuid4()}"
        card = await client.create_card(todo["id"], card_name, due="2030-01-01T12:00:00.000Z")
        assert (await client.get_card(card["id"]))["name"] == card_name
        print(f"✅ Created and Retrieved Card (ID: {card['id']})")

        await client.update_card(card["id"], name="Updated Card Name", due=None)
        print("✅ Updated Card and cleared its due date")

        await client.move_card(card["id"], done["id"])
        print("✅ Moved Card")

        comment = await client.add_comment_to_card(card["id"], "Verification comment")
        await client.update_comment(card["id"], comment["id"], "Edited comment")
        await client.delete_comment(card["id"], comment["id"])
        print("✅ Comment lifecycle")
    except Exception as e:
        print(f"❌ Lists and Cards failed: {e}")
        return

    # 4. Labels
    print("\n--- Testing Labels ---")
    try:
        label = await client.create_label("Verify", board_id, color="green")
        await client.add_label_to_card(card["id"], label["id"])
        await client.update_label(label["id"], color=None)
        await client.remove_label_from_card(card["id"], label["id"])
        await client.delete_label(label["id"])
        print("✅ Label lifecycle")
    except Exception as e:
        print(f"❌ Labels failed: {e}")

    # 5. Checklists
    print("\n--- Testing Checklists ---")
    try:
        checklist = await client.create_checklist(card["id"], name="Verify Steps")
        item = await client.create_check_item(checklist["id"], "First step")
        await client.update_check_item(card["id"], item["id"], state="complete")
        items = await client.get_check_items(checklist["id"])
        assert items[0]["state"] == "complete"
        await client.delete_checklist(checklist["id"])
        print("✅ Checklist lifecycle")
    except Exception as e:
        print(f"❌ Checklists failed: {e}")

    # 6. Read-only listings
    print("\n--- Testing Listings ---")
    try:
        lists = await client.get_board_lists(board_id)
        members = await client.get_board_members(board_id)
        actions = await client.get_board_actions(board_id, limit=10)
        print(f"✅ Listed {len(lists)} lists, {len(members)} members, {len(actions)} actions")

        results = await client.search("Updated Card Name", model_types=["cards"], id_boards=[board_id])
        print(f"✅ Search returned {len(results.get('cards', []))} cards")
    except Exception as e:
        print(f"❌ Listings failed: {e}")


if __name__ == "__main__":
    asyncio.run(run_verification())
