"""FastAPI middleware for bearer token authentication."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from mcp_blog.core.auth import verify_bearer_token
from mcp_blog.domain.errors import AuthenticationError

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """Reject requests to protected paths that lack the configured bearer token."""

    def __init__(
        self,
        app,
        api_token: str = "",
        protected_prefix: str = "/mcp",
    ):
        super().__init__(app)
        self.api_token = api_token
        self.protected_prefix = protected_prefix
        if not api_token:
            logger.warning("MCP_API_TOKEN is not set; the MCP endpoint accepts unauthenticated requests")

    async def dispatch(self, request: Request, call_next) -> Response:
        logger.debug("Request: %s %s", request.method, request.url.path)

        # Health checks and anything outside the MCP endpoint stay open
        if not request.url.path.startswith(self.protected_prefix):
            return await call_next(request)

        try:
            verify_bearer_token(request.headers.get("authorization"), self.api_token)
        except AuthenticationError as e:
            logger.warning(f"Rejected {request.method} {request.url.path}: {e.message}")
            return JSONResponse(status_code=401, content={"error": "Unauthorized"})

        return await call_next(request)
