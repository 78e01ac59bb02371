"""Stateful MCP endpoint: routes /mcp requests to per-session transports.

Every session gets its own FastMCP server bound to its own streamable HTTP
transport. The router only decides which transport a request goes to:

* a request carrying a known ``mcp-session-id`` goes to that session
* an ``initialize`` POST without a session ID starts a new session, which is
  registered once the transport accepts the handshake
* anything else is answered with 400 and never reaches a tool
"""

import logging
from functools import partial
from typing import Callable, Optional

import anyio
from anyio.abc import TaskStatus
from fastmcp import FastMCP
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from mcp.types import InitializeRequest, JSONRPCRequest
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import ClientDisconnect, Request
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

from mcp_blog.core.log_sanitizer import sanitize_for_logging
from mcp_blog.domain.errors import SessionError, TransportSessionError
from mcp_blog.infrastructure.sessions.registry import SessionRegistry
from mcp_blog.mcp.blog_server import serve_mcp_streams

logger = logging.getLogger(__name__)

MCP_PATH = "/mcp"
MCP_METHODS = ["GET", "POST", "DELETE"]
INVALID_SESSION_BODY = {"error": "Invalid or missing session ID"}


def is_initialize_request(body: bytes) -> bool:
    """True if ``body`` is a complete JSON-RPC ``initialize`` request.

    The params are validated too: an ``initialize`` the server would answer
    with a JSON-RPC error must not start a session.
    """
    try:
        message = JSONRPCRequest.model_validate_json(body)
        InitializeRequest.model_validate({"method": message.method, "params": message.params})
    except PydanticValidationError:
        return False
    return True


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Wrap ``receive`` so an already-consumed request body is delivered again."""
    delivered = False

    async def replay() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class McpSessionRouter:
    """ASGI endpoint for ``/mcp``.

    Authentication runs before this endpoint (see ``AuthMiddleware``); the
    router only deals with session resolution.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        server_factory: Callable[[], FastMCP],
        json_response: bool = False,
        idle_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.server_factory = server_factory
        self.json_response = json_response
        self.idle_timeout = idle_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        try:
            if session_id:
                await self._handle_session_request(session_id, scope, receive, send)
            elif request.method == "POST":
                await self._handle_handshake(request, scope, receive, send)
            else:
                raise TransportSessionError(
                    f"{request.method} without a session ID",
                    code="MISSING_SESSION_ID",
                )
        except TransportSessionError as e:
            logger.info(f"Rejected MCP request: {sanitize_for_logging(e.message)}")
            response = JSONResponse(status_code=400, content=INVALID_SESSION_BODY)
            await response(scope, receive, send)

    async def _handle_session_request(self, session_id: str, scope: Scope, receive: Receive, send: Send) -> None:
        transport = await self.registry.lookup(session_id)
        if transport is None:
            raise TransportSessionError(f"Unknown session ID {session_id}", code="UNKNOWN_SESSION_ID")
        await transport.handle_request(scope, receive, send)
        # DELETE (or an expired idle timer) terminates the transport
        if transport.is_terminated:
            await self.registry.teardown(session_id)

    async def _handle_handshake(self, request: Request, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            body = await request.body()
        except ClientDisconnect:
            logger.debug("Client disconnected before sending the handshake body")
            return
        if not is_initialize_request(body):
            raise TransportSessionError("Non-initialize request without a session ID", code="MISSING_SESSION_ID")

        session_id = self.registry.new_session_id()
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=self.json_response,
            idle_timeout=self.idle_timeout,
        )
        server = self.server_factory()
        await self.registry.start_session(partial(self._serve_session, server, transport))

        established = False

        async def send_and_register(message: Message) -> None:
            nonlocal established
            if message["type"] == "http.response.start" and not established and message["status"] < 400:
                try:
                    await self.registry.register(session_id, transport)
                    established = True
                except SessionError as e:
                    logger.warning(f"Could not register session: {sanitize_for_logging(e.message)}")
            await send(message)

        try:
            await transport.handle_request(scope, _replay_body(body, receive), send_and_register)
        finally:
            if not established:
                # A failed handshake must not leave a session task behind
                with anyio.CancelScope(shield=True):
                    await transport.terminate()
                logger.info(f"Handshake for session {session_id} failed; session discarded")

    async def _serve_session(
        self,
        server: FastMCP,
        transport: StreamableHTTPServerTransport,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Run one session's MCP server until its transport closes."""
        session_id = transport.mcp_session_id
        async with transport.connect() as (read_stream, write_stream):
            task_status.started()
            try:
                idle_scope = transport.idle_scope
                if idle_scope is None:
                    idle_scope = anyio.CancelScope()
                with idle_scope:
                    await serve_mcp_streams(server, read_stream, write_stream)
                if idle_scope.cancelled_caught:
                    logger.info(f"Session {session_id} closed after idle timeout")
            except Exception:
                logger.error(f"Session {session_id} crashed", exc_info=True)
            finally:
                await self.registry.teardown(session_id)
