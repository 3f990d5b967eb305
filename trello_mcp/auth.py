"""
Tenant credentials for the multi-tenant bridge.

HTTP callers send their own Trello key and token on every request:

    X-Trello-API-Key: <api key>
    X-Trello-Token:   <token>

Nothing is stored between requests. The stdio transport has no headers, so it
falls back to TRELLO_API_KEY / TRELLO_TOKEN from the settings.
"""
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from mcp.server.fastmcp import Context
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from trello_mcp.config import Settings, settings as default_settings
from trello_mcp.errors import CredentialsError
from trello_mcp.models import TenantCredentials

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Trello-API-Key"
TOKEN_HEADER = "X-Trello-Token"
CREDENTIALS_URL = "https://trello.com/power-ups/admin"


def parse_tenant_credentials(headers: Mapping[str, str]) -> TenantCredentials:
    """Reads the credential headers. Missing headers become empty strings."""
    return TenantCredentials(
        api_key=headers.get(API_KEY_HEADER) or "",
        token=headers.get(TOKEN_HEADER) or "",
    )


def validate_credentials(credentials: TenantCredentials) -> None:
    """Raises CredentialsError naming the first missing credential."""
    if not credentials.api_key:
        raise CredentialsError(f"Missing {API_KEY_HEADER} header. Get your API key from {CREDENTIALS_URL}")
    if not credentials.token:
        raise CredentialsError(f"Missing {TOKEN_HEADER} header. Get your token from {CREDENTIALS_URL}")


def credentials_from_context(ctx: Context, settings: Optional[Settings] = None) -> TenantCredentials:
    """Resolves the credentials for the tool call running under `ctx`."""
    try:
        request = ctx.request_context.request
    except (AttributeError, ValueError):
        request = None

    if request is not None:
        credentials = parse_tenant_credentials(request.headers)
    else:
        settings = settings or default_settings
        logger.debug("No HTTP request in context, using configured Trello credentials")
        credentials = TenantCredentials(
            api_key=settings.TRELLO_API_KEY or "",
            token=settings.TRELLO_TOKEN or "",
        )

    validate_credentials(credentials)
    return credentials


def unauthorized_body(message: str) -> Dict[str, Any]:
    return {
        "error": "Unauthorized",
        "message": message,
        "required_headers": [API_KEY_HEADER, TOKEN_HEADER],
        "get_credentials": CREDENTIALS_URL,
    }


class TenantCredentialsMiddleware:
    """ASGI middleware that answers 401 for MCP requests without both credential headers."""

    def __init__(self, app: ASGIApp, protected_paths: Iterable[str] = ("/mcp",)):
        self.app = app
        self.protected_paths = {p.rstrip("/") or "/" for p in protected_paths}

    def _is_protected(self, path: str) -> bool:
        return (path.rstrip("/") or "/") in self.protected_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self._is_protected(scope["path"]):
            try:
                validate_credentials(parse_tenant_credentials(Headers(scope=scope)))
            except CredentialsError as e:
                logger.warning(f"Rejected {scope['method']} {scope['path']}: {e.message}")
                response = JSONResponse(unauthorized_body(e.message), status_code=401)
                await response(scope, receive, send)
                return
        await self.app(scope, receive, send)
