"""Health check route for the MCP app.

Unauthenticated liveness probe for load balancers and uptime monitors.
"""

import logging
from typing import Dict

from fastapi import APIRouter

from mcp_blog.version import VERSION

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint for service monitoring.

    Returns a static payload. This endpoint does not require authentication
    and does not touch the post repository or the session registry.

    Returns:
        Dictionary containing:
        - status: always "ok"
        - server: service name
        - version: package version
    """
    return {
        "status": "ok",
        "server": "mcp-blog",
        "version": VERSION,
    }
