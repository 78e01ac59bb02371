"""In-memory registry of active MCP sessions."""

import logging
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup

from mcp_blog.core.log_sanitizer import sanitize_for_logging
from mcp_blog.domain.errors import SessionError
from mcp_blog.interfaces.sessions import SessionTransport

logger = logging.getLogger(__name__)

SessionTask = Callable[..., Awaitable[None]]

# Torn-down IDs remembered for reuse checks; older ones are forgotten
RETIRED_ID_LIMIT = 10_000


class SessionRegistry:
    """
    Owns the mapping from session ID to transport, and the tasks serving them.

    One registry is created per MCP app and handed to the router. The map is
    guarded by a lock so register/lookup/teardown never observe a half-applied
    change. The most recent torn-down IDs are remembered and rejected on
    register; new IDs are random 128-bit values, so older ones never come back.
    """

    def __init__(self, retired_limit: int = RETIRED_ID_LIMIT):
        """Initialize empty session storage."""
        self._sessions: Dict[str, SessionTransport] = {}
        self._retired: "OrderedDict[str, None]" = OrderedDict()
        self._retired_limit = retired_limit
        self._lock = anyio.Lock()
        self._task_group: Optional[TaskGroup] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @asynccontextmanager
    async def run(self) -> AsyncIterator["SessionRegistry"]:
        """Own the task group that session tasks run in; close everything on exit."""
        if self._task_group is not None:
            raise RuntimeError("SessionRegistry is already running")
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Session registry started")
            try:
                yield self
            finally:
                await self.close_all()
                tg.cancel_scope.cancel()
                self._task_group = None
                logger.info("Session registry stopped")

    async def start_session(self, task: SessionTask) -> None:
        """Start a session task and wait until it reports that it is ready.

        ``task`` must accept a ``task_status`` keyword and call
        ``task_status.started()`` once its transport is connected.
        """
        if self._task_group is None:
            raise RuntimeError("SessionRegistry.run() must be entered before sessions can start")
        await self._task_group.start(task)

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------
    def new_session_id(self) -> str:
        """Generate a random ID that is neither active nor recently retired."""
        while True:
            session_id = uuid4().hex
            if session_id not in self._sessions and session_id not in self._retired:
                return session_id

    async def register(self, session_id: str, transport: SessionTransport) -> None:
        """
        Register a transport under a session ID.

        Raises:
            SessionError: if the ID is already active or was torn down before
        """
        async with self._lock:
            if session_id in self._sessions or session_id in self._retired:
                raise SessionError(
                    f"Session ID cannot be reused: {session_id}",
                    code="SESSION_ID_REUSED",
                )
            self._sessions[session_id] = transport
        logger.info(f"Registered session {sanitize_for_logging(session_id)}")

    async def lookup(self, session_id: str) -> Optional[SessionTransport]:
        """Return the transport for an active session, or None."""
        async with self._lock:
            return self._sessions.get(session_id)

    async def teardown(self, session_id: str) -> bool:
        """
        Remove a session and terminate its transport.

        Returns:
            True if an active session was removed, False if there was none
        """
        async with self._lock:
            transport = self._sessions.pop(session_id, None)
            self._retire(session_id)
        if transport is None:
            return False
        if not transport.is_terminated:
            # Shielded so shutdown cancellation cannot leave streams open
            with anyio.CancelScope(shield=True):
                await transport.terminate()
        logger.info(f"Tore down session {sanitize_for_logging(session_id)}")
        return True

    async def active_session_ids(self) -> List[str]:
        async with self._lock:
            return list(self._sessions)

    async def close_all(self) -> None:
        """Tear down every active session."""
        for session_id in await self.active_session_ids():
            await self.teardown(session_id)


    def _retire(self, session_id: str) -> None:
        # Caller holds the lock
        self._retired[session_id] = None
        self._retired.move_to_end(session_id)
        while len(self._retired) > self._retired_limit:
            self._retired.popitem(last=False)
