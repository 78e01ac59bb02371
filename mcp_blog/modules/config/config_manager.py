"""
Centralized configuration management using Pydantic settings.

Every setting is read from the environment (or a .env file in the working
directory). Names match the environment variables, e.g. ``posts_dir`` is
``POSTS_DIR``.
"""

import logging
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AppSettings(BaseSettings):
    """Main application settings loaded from environment variables."""

    # Storage
    posts_dir: str = Field(
        "posts",
        description="Directory holding one markdown file per post",
        validation_alias=AliasChoices("POSTS_DIR"),
    )

    # MCP endpoint
    mcp_api_token: str = Field(
        "",
        description="Bearer token required on /mcp. Empty disables authentication (development only)",
        validation_alias=AliasChoices("MCP_API_TOKEN"),
    )
    mcp_json_response: bool = Field(
        False,
        description="Answer MCP POST requests with plain JSON instead of an SSE stream",
        validation_alias=AliasChoices("MCP_JSON_RESPONSE"),
    )
    mcp_session_idle_timeout: Optional[float] = Field(
        None,
        description="Seconds without requests before an MCP session is closed. Unset keeps sessions open",
        validation_alias=AliasChoices("MCP_SESSION_IDLE_TIMEOUT"),
    )

    # Website
    blog_title: str = Field("MCP Blog", validation_alias=AliasChoices("BLOG_TITLE"))
    blog_description: str = Field(
        "A blog managed by AI via MCP",
        validation_alias=AliasChoices("BLOG_DESCRIPTION"),
    )
    blog_base_url: str = Field("http://localhost:3000", validation_alias=AliasChoices("BLOG_BASE_URL"))
    feed_max_items: int = Field(20, validation_alias=AliasChoices("FEED_MAX_ITEMS"))

    # Server
    host: str = Field("127.0.0.1", validation_alias=AliasChoices("HOST"))
    web_port: int = Field(3000, validation_alias=AliasChoices("WEB_PORT"))
    mcp_port: int = Field(3001, validation_alias=AliasChoices("MCP_PORT"))
    debug_mode: bool = False

    # Logging
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    app_log_dir: str = Field("logs", validation_alias=AliasChoices("APP_LOG_DIR"))

    @field_validator("mcp_session_idle_timeout", mode="before")
    @classmethod
    def _empty_timeout_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("mcp_session_idle_timeout")
    @classmethod
    def _positive_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("MCP_SESSION_IDLE_TIMEOUT must be a positive number of seconds")
        return value

    @field_validator("blog_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "env_prefix": "",
        "populate_by_name": True,
    }


class ConfigManager:
    """Centralized configuration manager with caching."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._app_settings: Optional[AppSettings] = settings

    @property
    def app_settings(self) -> AppSettings:
        """Get application settings (cached)."""
        if self._app_settings is None:
            self._app_settings = AppSettings()
            logger.info("Application settings loaded successfully")
        return self._app_settings

    def reload_configs(self) -> None:
        """Drop cached settings so the next access re-reads the environment."""
        self._app_settings = None
        logger.info("Configuration cache cleared, will reload on next access")
