"""
Streamable HTTP transport for MCP.

Serves the MCP endpoint on /mcp with one SDK transport per client session:
- POST /mcp   - JSON-RPC messages (an initialize request without a session
                id opens a new session)
- GET  /mcp   - server-to-client SSE stream for an existing session
- DELETE /mcp - terminate a session
- GET /health - liveness check

Sessions are keyed by the Mcp-Session-Id header and live in the SessionTable
stored on ``app.state``; the SessionRouter owns their server loops for the
lifetime of the app.
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from mcp import types
from mcp.server.streamable_http import LAST_EVENT_ID_HEADER, MCP_SESSION_ID_HEADER
from pydantic import ValidationError as PydanticValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.types import Message, Receive, Scope, Send

from mcp_template.framework.errors import BAD_REQUEST, INTERNAL_ERROR, jsonrpc_error
from mcp_template.server.config import HTTPConfig
from mcp_template.server.mcp_server import MCPTemplateServer
from mcp_template.server.sessions import Session, SessionRouter, SessionState, SessionTable

logger = logging.getLogger(__name__)

MCP_PATH = "/mcp"
HEALTH_PATH = "/health"

NO_SESSION_MESSAGE = "Bad Request: No valid session ID provided or not an initialization request"
INVALID_SESSION_MESSAGE = "Invalid or missing session ID"
TERMINATION_ERROR_MESSAGE = "Error processing session termination"


def is_initialize_request(body: bytes) -> bool:
    """Whether ``body`` is a single, well-formed JSON-RPC initialize request.

    Bodies that are not JSON, batches, notifications and initialize requests
    with invalid params all count as "not an initialization request".
    """
    try:
        message = types.JSONRPCMessage.model_validate_json(body)
    except PydanticValidationError:
        return False

    request = message.root
    if not isinstance(request, types.JSONRPCRequest) or request.method != "initialize":
        return False

    try:
        types.InitializeRequest.model_validate({"method": request.method, "params": request.params})
    except PydanticValidationError:
        return False
    return True


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Hand an already-read request body to the next ASGI consumer."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class _ResponseTracker:
    """ASGI ``send`` wrapper that records the response status.

    ``on_start`` runs with the status before the response head is forwarded,
    so anything it does is visible before the client sees the response.
    """

    def __init__(self, send: Send, on_start: Callable[[int], None] | None = None) -> None:
        self._send = send
        self.on_start = on_start
        self.status: int | None = None

    @property
    def started(self) -> bool:
        return self.status is not None

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            if self.on_start is not None:
                self.on_start(self.status)
        await self._send(message)


class MCPEndpoint:
    """ASGI app for /mcp, dispatching by HTTP method to the session router."""

    def __init__(self, router: SessionRouter) -> None:
        self.router = router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        method = scope["method"]
        if method == "POST":
            await self.handle_post(scope, receive, send)
        elif method == "DELETE":
            await self.handle_delete(scope, receive, send)
        else:
            await self.handle_get(scope, receive, send)

    async def handle_post(self, scope: Scope, receive: Receive, send: Send) -> None:
        """
        Route a JSON-RPC POST.

        Known session id: delegate to its transport. No session id and an
        initialize request: open a new session. Anything else: 400.
        """
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        tracker = _ResponseTracker(send)

        try:
            session = self.router.lookup(session_id)
            if session is not None:
                await session.transport.handle_request(scope, receive, tracker)
                return

            if not session_id:
                body = await request.body()
                if is_initialize_request(body):
                    await self._initialize(scope, _replay_body(body, receive), tracker)
                    return

            logger.warning("Rejected POST without a valid session: %s", session_id or "<none>")
            response = JSONResponse(jsonrpc_error(BAD_REQUEST, NO_SESSION_MESSAGE), status_code=400)
            await response(scope, receive, tracker)
        except Exception:
            logger.exception("Error handling MCP request")
            if not tracker.started:
                response = JSONResponse(
                    jsonrpc_error(INTERNAL_ERROR, "Internal server error"), status_code=500
                )
                await response(scope, receive, send)

    async def _initialize(self, scope: Scope, receive: Receive, tracker: _ResponseTracker) -> None:
        session = await self.router.create_session()

        def activate_on_success(status: int) -> None:
            # In SSE mode handle_request returns only after the stream is torn
            # down; the client may already be sending its next request.
            if 200 <= status < 300 and session.state == SessionState.INITIALIZING:
                self.router.activate(session)

        tracker.on_start = activate_on_success
        try:
            await session.transport.handle_request(scope, receive, tracker)
        except Exception:
            if session.state == SessionState.INITIALIZING:
                await self.router.discard(session)
            raise

        if session.state == SessionState.INITIALIZING:
            await self.router.discard(session)

    def _lookup(self, request: Request) -> Session | None:
        return self.router.lookup(request.headers.get(MCP_SESSION_ID_HEADER))

    async def handle_get(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Open the SSE stream for an existing session."""
        request = Request(scope, receive)
        session = self._lookup(request)
        if session is None:
            response = PlainTextResponse(INVALID_SESSION_MESSAGE, status_code=400)
            await response(scope, receive, send)
            return

        last_event_id = request.headers.get(LAST_EVENT_ID_HEADER)
        if last_event_id:
            logger.info(
                "Client reconnecting with Last-Event-ID: %s",
                last_event_id,
                extra={"session_id": session.session_id},
            )
        else:
            logger.info(
                "Establishing new SSE stream for session %s",
                session.session_id,
                extra={"session_id": session.session_id},
            )

        await session.transport.handle_request(scope, receive, send)

    async def handle_delete(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Terminate an existing session."""
        request = Request(scope, receive)
        session = self._lookup(request)
        if session is None:
            response = PlainTextResponse(INVALID_SESSION_MESSAGE, status_code=400)
            await response(scope, receive, send)
            return

        logger.info(
            "Received session termination request for session %s",
            session.session_id,
            extra={"session_id": session.session_id},
        )
        tracker = _ResponseTracker(send)
        try:
            await session.transport.handle_request(scope, receive, tracker)
        except Exception:
            logger.exception("Error handling session termination")
            if not tracker.started:
                response = PlainTextResponse(TERMINATION_ERROR_MESSAGE, status_code=500)
                await response(scope, receive, send)
        finally:
            if session.transport.is_terminated:
                self.router.close_session(session.session_id, session)


async def health_check(request: Request) -> Any:
    """
    Liveness check.

    Always 200 while the process serves requests, independent of sessions.
    """
    info = request.app.state.server.info
    return JSONResponse({"status": "ok", "server": info.name, "version": info.version})


def create_http_app(server: MCPTemplateServer, config: HTTPConfig | None = None) -> Starlette:
    """
    Build the Starlette app serving ``server`` over Streamable HTTP.

    Args:
        server: MCP server shared by every session
        config: HTTP settings (only ``json_response`` is used here)

    Returns:
        App whose lifespan runs the session router
    """
    config = config or HTTPConfig()
    table = SessionTable()
    router = SessionRouter(server, table, json_response=config.json_response)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with router.run():
            yield

    app = Starlette(
        routes=[
            Route(MCP_PATH, MCPEndpoint(router), methods=["GET", "POST", "DELETE"]),
            Route(HEALTH_PATH, health_check, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    app.state.server = server
    app.state.sessions = table
    app.state.router = router
    return app


async def run_http_server(
    server: MCPTemplateServer, config: HTTPConfig | None = None, log_level: str = "INFO"
) -> None:
    """
    Serve ``server`` over Streamable HTTP until interrupted.

    Args:
        server: MCP server to expose
        config: Bind address, port and response mode
        log_level: Log level passed to uvicorn
    """
    config = config or HTTPConfig()
    app = create_http_app(server, config)

    logger.info("Starting HTTP server on %s:%s", config.host, config.port, extra={"transport": "http"})
    logger.info("HTTP endpoints:")
    logger.info("  POST   %s - JSON-RPC messages (initialize opens a session)", MCP_PATH)
    logger.info("  GET    %s - Server-sent event stream for a session", MCP_PATH)
    logger.info("  DELETE %s - Terminate a session", MCP_PATH)
    logger.info("  GET    %s - Liveness check", HEALTH_PATH)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=log_level.lower(),
        access_log=False,
    )
    http_server = uvicorn.Server(uvicorn_config)

    try:
        await http_server.serve()
    except Exception as e:
        logger.exception("HTTP server error: %s", e)
        raise


__all__ = [
    "HEALTH_PATH",
    "MCP_PATH",
    "MCPEndpoint",
    "create_http_app",
    "is_initialize_request",
    "run_http_server",
]
