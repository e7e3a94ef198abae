"""
Session state for the Streamable HTTP transport.

A session is one client conversation bound to one SDK transport instance.
The SessionTable is owned by the HTTP binding (one per app, never a module
global) and only the SessionRouter mutates it:

    absent -> initializing (transport created, not in table)
           -> active       (in table, reusable by Mcp-Session-Id)
           -> closed       (removed from table, never reused)

Everything runs on the event loop thread, so the table needs no lock; the SDK
transport serializes message handling within a session.
"""

import logging
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.streamable_http import StreamableHTTPServerTransport

from mcp_template.server.mcp_server import MCPTemplateServer

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle of a single session."""

    INITIALIZING = "initializing"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class Session:
    """One client conversation and the transport that owns it."""

    session_id: str
    transport: StreamableHTTPServerTransport
    state: SessionState = SessionState.INITIALIZING
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE


class SessionTable:
    """session id -> Session for the live sessions of one HTTP binding."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        """Insert a session.

        Raises:
            ValueError: If a different session already holds the id
        """
        existing = self._sessions.get(session.session_id)
        if existing is not None and existing is not session:
            msg = f"Session '{session.session_id}' already has a live transport"
            raise ValueError(msg)
        self._sessions[session.session_id] = session

    def get(self, session_id: str | None) -> Session | None:
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Session | None:
        """Remove and return the session, or None if it is not present."""
        return self._sessions.pop(session_id, None)

    def ids(self) -> list[str]:
        return list(self._sessions)

    def items(self) -> list[tuple[str, Session]]:
        return list(self._sessions.items())

    def clear(self) -> None:
        self._sessions.clear()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))


def _new_session_id() -> str:
    return uuid4().hex


class SessionRouter:
    """Creates, tracks and closes per-session transports.

    Each session's SDK server loop runs in a task group owned by ``run()``;
    the loop ending (client gone, DELETE, shutdown) closes the session.

    Usage:
        router = SessionRouter(server, SessionTable())
        async with router.run():
            session = await router.create_session()
            ...  # hand the initialize request to session.transport
            router.activate(session)
    """

    def __init__(
        self,
        server: MCPTemplateServer,
        table: SessionTable | None = None,
        json_response: bool = False,
        id_factory: Callable[[], str] = _new_session_id,
    ) -> None:
        self.server = server
        self.table = table if table is not None else SessionTable()
        self.json_response = json_response
        self._id_factory = id_factory
        self._task_group: TaskGroup | None = None

    @property
    def running(self) -> bool:
        return self._task_group is not None

    @asynccontextmanager
    async def run(self) -> AsyncIterator["SessionRouter"]:
        """Own the task group for session server loops; shut down on exit."""
        if self._task_group is not None:
            msg = "SessionRouter is already running"
            raise RuntimeError(msg)

        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Session router started")
            try:
                yield self
            finally:
                await self.shutdown()
                tg.cancel_scope.cancel()
                self._task_group = None
                logger.info("Session router stopped")

    def lookup(self, session_id: str | None) -> Session | None:
        """Active session for ``session_id``, or None."""
        return self.table.get(session_id)

    async def create_session(self) -> Session:
        """Create a transport and start its server loop.

        The returned session is ``initializing`` and not yet in the table;
        call ``activate`` once the initialize request succeeded.

        Raises:
            RuntimeError: If the router is not running
        """
        if self._task_group is None:
            msg = "SessionRouter is not running; use 'async with router.run()'"
            raise RuntimeError(msg)

        session_id = self._id_factory()
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=self.json_response,
        )
        session = Session(session_id=session_id, transport=transport)

        await self._task_group.start(self._run_session, session)
        logger.info("Created transport for new session", extra={"session_id": session_id})
        return session

    async def _run_session(
        self, session: Session, *, task_status: TaskStatus[Any] = anyio.TASK_STATUS_IGNORED
    ) -> None:
        async with session.transport.connect() as (read_stream, write_stream):
            task_status.started()
            try:
                await self.server.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
            except Exception:
                logger.exception(
                    "Session %s crashed", session.session_id, extra={"session_id": session.session_id}
                )
            finally:
                self.close_session(session.session_id, session)

    def activate(self, session: Session) -> None:
        """Make an initialized session reachable by its id."""
        if session.state != SessionState.INITIALIZING:
            msg = f"Cannot activate session '{session.session_id}' in state {session.state.value}"
            raise ValueError(msg)
        self.table.add(session)
        session.state = SessionState.ACTIVE
        logger.info(
            "Session initialized with ID: %s", session.session_id, extra={"session_id": session.session_id}
        )

    async def discard(self, session: Session) -> None:
        """Tear down a session whose initialize request failed."""
        logger.warning(
            "Initialization failed for session %s, discarding",
            session.session_id,
            extra={"session_id": session.session_id},
        )
        await session.transport.terminate()
        self.close_session(session.session_id, session)

    def close_session(self, session_id: str, session: Session | None = None) -> Session | None:
        """Remove a session from the table and mark it closed.

        Safe to call more than once. When ``session`` is given, only that
        exact session is removed, so a stale callback cannot evict a newer
        session reusing the id.

        Returns:
            The session that was removed, or None
        """
        current = self.table.get(session_id)
        removed = None
        if current is not None and (session is None or current is session):
            removed = self.table.remove(session_id)
            logger.info(
                "Transport closed for session %s, removing from table",
                session_id,
                extra={"session_id": session_id},
            )

        for closed in (removed, session):
            if closed is not None:
                closed.state = SessionState.CLOSED
        return removed

    async def shutdown(self) -> None:
        """Close every transport in the table, then clear it.

        Failures are logged and do not stop the remaining closes.
        """
        logger.info("Shutting down %s sessions", len(self.table))
        for session_id, session in self.table.items():
            try:
                logger.info("Closing transport for session %s", session_id)
                await session.transport.terminate()
            except Exception:
                logger.exception("Error closing transport for session %s", session_id)
            session.state = SessionState.CLOSED
        self.table.clear()
        logger.info("Session shutdown complete")


__all__ = ["Session", "SessionRouter", "SessionState", "SessionTable"]
