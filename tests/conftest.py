"""Shared fixtures for the MCP template server tests."""

from collections.abc import Iterator
from typing import Any

import pytest
from mcp import types
from sse_starlette.sse import AppStatus
from starlette.testclient import TestClient

from mcp_template.resources import default_resources
from mcp_template.server.config import HTTPConfig, ServerInfo
from mcp_template.server.http_transport import create_http_app
from mcp_template.server.mcp_server import MCPTemplateServer
from mcp_template.tools import default_tools

MCP_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}

INITIALIZE_REQUEST: dict[str, Any] = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": types.LATEST_PROTOCOL_VERSION,
        "capabilities": {},
        "clientInfo": {"name": "test-client", "version": "0.1.0"},
    },
}


def session_headers(session_id: str) -> dict[str, str]:
    """Headers for a request inside an established session."""
    return {
        **MCP_HEADERS,
        "mcp-session-id": session_id,
        "mcp-protocol-version": types.LATEST_PROTOCOL_VERSION,
    }


def open_session(client: TestClient) -> str:
    """Run the initialize handshake and return the new session id."""
    response = client.post("/mcp", json=INITIALIZE_REQUEST, headers=MCP_HEADERS)
    assert response.status_code == 200
    session_id = response.headers["mcp-session-id"]

    notified = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "method": "notifications/initialized"},
        headers=session_headers(session_id),
    )
    assert notified.status_code == 202
    return session_id


@pytest.fixture
def server() -> MCPTemplateServer:
    """Server with the stock tools and resources."""
    return MCPTemplateServer(ServerInfo(), default_tools(), default_resources())


@pytest.fixture
def client(server: MCPTemplateServer) -> Iterator[TestClient]:
    """HTTP client for an app answering POSTs with plain JSON."""
    app = create_http_app(server, HTTPConfig(json_response=True))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fresh_sse_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop sse-starlette's process-wide exit event, bound to an earlier event loop."""
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)


@pytest.fixture
def sse_client(server: MCPTemplateServer, fresh_sse_state: None) -> Iterator[TestClient]:
    """HTTP client for an app in the default mode (POSTs answered as SSE streams)."""
    app = create_http_app(server, HTTPConfig())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> Any:
    """No MCP_* variables and no config file in the working directory."""
    for name in (
        "MCP_TEMPLATE_CONFIG",
        "MCP_HTTP_HOST",
        "MCP_HTTP_PORT",
        "MCP_JSON_RESPONSE",
        "MCP_LOG_LEVEL",
        "MCP_STRUCTURED_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
