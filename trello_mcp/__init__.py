"""Multi-tenant MCP bridge to the Trello REST API."""

__version__ = "1.0.0"

SERVER_NAME = "trello-mcp-bridge"
