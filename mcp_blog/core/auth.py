"""Bearer token checks for the MCP endpoint."""

import hmac
import logging
from typing import Optional

from mcp_blog.domain.errors import AuthenticationError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def verify_bearer_token(authorization: Optional[str], expected_token: str) -> None:
    """
    Check an Authorization header against the configured API token.

    An empty ``expected_token`` disables the check. This is meant for local
    development only.

    Args:
        authorization: Raw Authorization header value, if any
        expected_token: Configured API token

    Raises:
        AuthenticationError: if the header is missing, malformed or wrong
    """
    if not expected_token:
        return
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Missing bearer token", code="MISSING_TOKEN")
    # Constant-time comparison
    if not hmac.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8")):
        raise AuthenticationError("Invalid bearer token", code="INVALID_TOKEN")
