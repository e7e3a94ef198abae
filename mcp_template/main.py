"""Entrypoint for the MCP template server (``mcp-template`` / ``python -m mcp_template``)."""

import asyncio
import logging
import sys

from mcp_template.observability import configure_logging
from mcp_template.resources import default_resources
from mcp_template.server.config import (
    Config,
    StartupConfig,
    apply_startup_overrides,
    load_config,
    parse_args,
)
from mcp_template.server.http_transport import run_http_server
from mcp_template.server.mcp_server import MCPTemplateServer
from mcp_template.server.stdio_transport import run_stdio
from mcp_template.tools import default_tools

logger = logging.getLogger(__name__)


def build_server(config: Config) -> MCPTemplateServer:
    """Server with the stock tools and resources."""
    return MCPTemplateServer(config.server, default_tools(), default_resources())


async def serve(config: Config, startup: StartupConfig) -> None:
    """Run the transport selected on the command line until it ends."""
    server = build_server(config)

    if startup.mode == "http":
        await run_http_server(server, config.http, log_level=config.logging.level)
    else:
        await run_stdio(server)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, configure logging and run the server.

    Exits 1 on a fatal error and 0 on Ctrl-C.
    """
    startup = parse_args(argv)

    try:
        config = apply_startup_overrides(load_config(startup.config_path), startup)
    except ValueError as e:
        configure_logging()
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    configure_logging(config.logging.level, structured=config.logging.structured)
    logger.info("Starting %s v%s (%s)", config.server.name, config.server.version, startup.mode)

    try:
        asyncio.run(serve(config, startup))
    except KeyboardInterrupt:
        logger.info("Shutting down server...")
    except Exception as e:
        logger.exception("Fatal error in main(): %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
