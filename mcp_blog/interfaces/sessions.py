"""MCP session transport interface."""

from typing import Protocol

from starlette.types import Receive, Scope, Send


class SessionTransport(Protocol):
    """
    Port for the per-session HTTP transport.

    The session registry only needs to route requests to a transport and
    shut it down; the streamable HTTP transport from the MCP SDK satisfies
    this protocol.
    """

    mcp_session_id: str | None

    @property
    def is_terminated(self) -> bool:
        """True once the transport has been closed."""
        ...

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Serve one HTTP request for this session."""
        ...

    async def terminate(self) -> None:
        """Close the transport and every stream attached to it."""
        ...
