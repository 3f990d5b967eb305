import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Configuration settings for the Trello MCP Bridge with validation"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Trello API connection settings
    TRELLO_API_URL: str = Field(
        default="https://api.trello.com/1",
        description="Base URL for the versioned Trello REST API"
    )

    # Only consulted by the stdio transport; HTTP callers send their own headers
    TRELLO_API_KEY: Optional[str] = Field(
        default=None,
        description="Trello API key used when no HTTP request headers are available"
    )

    TRELLO_TOKEN: Optional[str] = Field(
        default=None,
        description="Trello API token used when no HTTP request headers are available"
    )

    # Transport configuration
    TRANSPORT_MODE: str = Field(
        default=os.getenv("TRELLO_TRANSPORT", "http").lower(),
        description="Transport mode for MCP communication (stdio, sse or http)"
    )

    HOST: str = Field(
        default="127.0.0.1",
        description="Host to bind to for the HTTP transports"
    )

    PORT: int = Field(
        default=8000,
        description="Port to bind to for the HTTP transports",
        ge=1,
        le=65535
    )

    # API request settings
    REQUEST_TIMEOUT: float = Field(
        default=30.0,
        description="Timeout for Trello API requests in seconds",
        gt=0
    )

    # Connection pooling settings
    MAX_CONNECTIONS: int = Field(
        default=10,
        description="Maximum number of concurrent connections per client",
        ge=1
    )

    MAX_KEEPALIVE_CONNECTIONS: int = Field(
        default=5,
        description="Maximum number of connections to keep alive per client",
        ge=1
    )

    # Logging configuration
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    LOG_FILE: Optional[str] = Field(
        default=None,
        description="Optional path to a log file (stderr is always used)"
    )

    @field_validator('TRANSPORT_MODE')
    @classmethod
    def validate_transport_mode(cls, v):
        v = v.lower()
        if v not in ["stdio", "sse", "http"]:
            raise ValueError(f"Invalid transport mode: {v}. Must be 'stdio', 'sse' or 'http'")
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v


settings = Settings()
