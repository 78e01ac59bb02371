"""
FastAPI applications for the blog.

``create_web_app`` builds the public website, ``create_mcp_app`` the MCP
endpoint agents connect to. Both are served by ``mcp-blog-server``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from mcp_blog.core.middleware import AuthMiddleware
from mcp_blog.infrastructure.app_factory import AppFactory
from mcp_blog.infrastructure.sessions.registry import SessionRegistry
from mcp_blog.routes.health_routes import router as health_router
from mcp_blog.routes.mcp_routes import MCP_METHODS, MCP_PATH, McpSessionRouter
from mcp_blog.routes.site_routes import render_not_found
from mcp_blog.routes.site_routes import router as site_router
from mcp_blog.version import VERSION
from mcp_blog.web.rendering import STATIC_DIR

logger = logging.getLogger(__name__)


def create_web_app(factory: Optional[AppFactory] = None) -> FastAPI:
    """Build the read-only website."""
    factory = factory or AppFactory()
    settings = factory.get_settings()

    app = FastAPI(
        title=settings.blog_title,
        description=settings.blog_description,
        version=VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.post_repository = factory.get_post_repository()

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.include_router(site_router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 404:
            return render_not_found(request)
        return Response(content=str(exc.detail), status_code=exc.status_code)

    return app


def create_mcp_app(factory: Optional[AppFactory] = None) -> FastAPI:
    """Build the MCP endpoint with its own session registry."""
    factory = factory or AppFactory()
    settings = factory.get_settings()
    registry = SessionRegistry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting MCP endpoint")
        async with registry.run():
            yield
        logger.info("MCP endpoint stopped")

    app = FastAPI(
        title="MCP Blog MCP endpoint",
        version=VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.session_registry = registry

    app.add_middleware(AuthMiddleware, api_token=settings.mcp_api_token, protected_prefix=MCP_PATH)
    app.include_router(health_router)

    router = McpSessionRouter(
        registry=registry,
        server_factory=factory.create_mcp_server,
        json_response=settings.mcp_json_response,
        idle_timeout=settings.mcp_session_idle_timeout,
    )
    app.add_route(MCP_PATH, router, methods=MCP_METHODS, include_in_schema=False)

    return app
