"""Application factory for dependency injection and wiring."""

import logging
from typing import Optional

from fastmcp import FastMCP

from mcp_blog.infrastructure.posts.file_repository import FilePostRepository
from mcp_blog.interfaces.posts import PostRepository
from mcp_blog.mcp.blog_server import create_blog_mcp_server
from mcp_blog.modules.config import AppSettings, ConfigManager

logger = logging.getLogger(__name__)


class AppFactory:
    """Application factory that wires dependencies (simple in-memory DI)."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        post_repository: Optional[PostRepository] = None,
    ) -> None:
        # Configuration
        self.config_manager = config_manager or ConfigManager()

        # Post storage, shared by the website and every MCP session
        settings = self.config_manager.app_settings
        self.post_repository: PostRepository = post_repository or FilePostRepository(settings.posts_dir)

        logger.info(f"AppFactory initialized (posts_dir={settings.posts_dir})")

    # Accessors
    def get_config_manager(self) -> ConfigManager:  # noqa: D401
        return self.config_manager

    def get_settings(self) -> AppSettings:
        return self.config_manager.app_settings

    def get_post_repository(self) -> PostRepository:
        return self.post_repository

    def create_mcp_server(self) -> FastMCP:
        """Build a fresh MCP server for one session."""
        return create_blog_mcp_server(self.post_repository)
