"""Configuration management with validation.

This module provides centralized configuration for the MCP template server with:
- YAML file support (mcp_template.yml)
- Environment variable overrides
- Validation in frozen dataclasses
- Command-line parsing for the startup mode and port

Configuration precedence (highest to lowest):
1. Command-line flags (--port, --host, --log-level, --json-response)
2. Environment variables (MCP_*)
3. YAML config file
4. Default values

Example mcp_template.yml:
    server:
      name: "mcp-template"
      version: "1.0.0"

    http:
      host: "127.0.0.1"
      port: 3001
      json_response: false

    logging:
      level: "INFO"
      structured: false

Usage:
    config = load_config()
    startup = parse_args(sys.argv[1:])
"""

import argparse
import logging
import os
import re
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Literal

import yaml

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3001
DEFAULT_CONFIG_FILE = "mcp_template.yml"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

TransportMode = Literal["stdio", "http"]


@dataclass(frozen=True)
class ServerInfo:
    """Identity advertised to clients and on /health.

    Attributes:
        name: Server name sent in the initialize result
        version: Server version sent in the initialize result
    """

    name: str = "mcp-template"
    version: str = "1.0.0"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.name:
            msg = "server name cannot be empty"
            raise ValueError(msg)
        if not self.version:
            msg = "server version cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True)
class HTTPConfig:
    """Streamable HTTP transport configuration.

    Attributes:
        host: Bind address
        port: Listen port
        json_response: Answer POSTs with plain JSON instead of an SSE stream
    """

    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    json_response: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not (0 < self.port < 65536):
            msg = f"port must be 1-65535, got {self.port}"
            raise ValueError(msg)


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Whether to emit JSON log lines
    """

    level: str = "INFO"
    structured: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.upper() not in VALID_LOG_LEVELS:
            msg = f"log level must be one of {list(VALID_LOG_LEVELS)}, got '{self.level}'"
            raise ValueError(msg)
        object.__setattr__(self, "level", self.level.upper())


@dataclass
class Config:
    """Root configuration object."""

    server: ServerInfo = field(default_factory=ServerInfo)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "server": asdict(self.server),
            "http": asdict(self.http),
            "logging": asdict(self.logging),
        }


@dataclass(frozen=True)
class StartupConfig:
    """What the process was asked to start.

    Attributes:
        mode: "stdio" (default) or "http"
        port: HTTP listen port given on the command line (None: use config)
        host: HTTP bind address override
        config_path: Explicit YAML config path
        log_level: Log level override
        json_response: Force JSON responses on the HTTP transport
    """

    mode: TransportMode = "stdio"
    port: int | None = None
    host: str | None = None
    config_path: Path | None = None
    log_level: str | None = None
    json_response: bool = False


def _env_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    """YAML booleans as-is; quoted strings read like env flags."""
    if isinstance(value, str):
        return _env_flag(value)
    return bool(value)


def _resolve_config_path(config_path: Path | None) -> Path:
    if config_path is not None:
        return config_path
    env_path = os.getenv("MCP_TEMPLATE_CONFIG")
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_FILE


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to YAML config file. Defaults to $MCP_TEMPLATE_CONFIG,
            then ./mcp_template.yml. A missing file means defaults.

    Returns:
        Validated Config object

    Raises:
        ValueError: If a value fails validation
    """
    config = Config()
    config_path = _resolve_config_path(config_path)

    if config_path.exists():
        try:
            with config_path.open(encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}

            if "server" in yaml_config:
                server_dict = yaml_config["server"] or {}
                config.server = ServerInfo(
                    name=server_dict.get("name", config.server.name),
                    version=str(server_dict.get("version", config.server.version)),
                )

            if "http" in yaml_config:
                http_dict = yaml_config["http"] or {}
                config.http = HTTPConfig(
                    host=http_dict.get("host", config.http.host),
                    port=int(http_dict.get("port", config.http.port)),
                    json_response=_as_bool(
                        http_dict.get("json_response", config.http.json_response)
                    ),
                )

            if "logging" in yaml_config:
                logging_dict = yaml_config["logging"] or {}
                config.logging = LoggingConfig(
                    level=logging_dict.get("level", config.logging.level),
                    structured=_as_bool(logging_dict.get("structured", config.logging.structured)),
                )

            logger.info("Configuration loaded from %s", config_path)

        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load config from %s: %s", config_path, e)
            logger.info("Using default configuration with environment overrides")

    # Environment variable overrides
    if os.getenv("MCP_HTTP_HOST"):
        config.http = replace(config.http, host=os.environ["MCP_HTTP_HOST"])

    if os.getenv("MCP_HTTP_PORT"):
        config.http = replace(config.http, port=int(os.environ["MCP_HTTP_PORT"]))

    if os.getenv("MCP_JSON_RESPONSE"):
        config.http = replace(config.http, json_response=_env_flag(os.environ["MCP_JSON_RESPONSE"]))

    if os.getenv("MCP_LOG_LEVEL"):
        config.logging = replace(config.logging, level=os.environ["MCP_LOG_LEVEL"])

    if os.getenv("MCP_STRUCTURED_LOGGING"):
        config.logging = replace(
            config.logging, structured=_env_flag(os.environ["MCP_STRUCTURED_LOGGING"])
        )

    return config


def apply_startup_overrides(config: Config, startup: StartupConfig) -> Config:
    """Fold command-line flags into the loaded config (flags win)."""
    http = config.http
    if startup.port is not None:
        http = replace(http, port=startup.port)
    if startup.host:
        http = replace(http, host=startup.host)
    if startup.json_response:
        http = replace(http, json_response=True)
    config.http = http

    if startup.log_level:
        config.logging = replace(config.logging, level=startup.log_level)

    return config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-template",
        description="MCP Template Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Local process embedding (default)
  mcp-template

  # Streamable HTTP on the default port (3001)
  mcp-template --http

  # Streamable HTTP on a custom port
  mcp-template --http --port 8080
        """,
    )

    parser.add_argument(
        "--http",
        action="store_true",
        help="Serve over Streamable HTTP instead of stdio",
    )

    # Parsed by hand below: an unusable value falls back to the default port
    parser.add_argument(
        "--port",
        type=str,
        nargs="?",
        default=None,
        const="",
        help=f"HTTP listen port (default: {DEFAULT_PORT})",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="HTTP bind address (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to YAML configuration file (default: ./{DEFAULT_CONFIG_FILE})",
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=list(VALID_LOG_LEVELS),
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-response",
        action="store_true",
        help="Answer HTTP POSTs with plain JSON instead of SSE streams",
    )

    return parser


def parse_port(value: str | None, default: int = DEFAULT_PORT) -> int:
    """Parse a port value, falling back to ``default`` when it is unusable.

    Leading digits are enough ("8080abc" is 8080); no digits, zero and values
    outside 1-65535 mean ``default``.
    """
    if value is None:
        return default
    match = _LEADING_INT.match(value)
    if match is None:
        return default
    port = int(match.group(0))
    if not (0 < port < 65536):
        return default
    return port


def parse_args(argv: list[str] | None = None) -> StartupConfig:
    """Parse command-line flags into a StartupConfig.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])

    Returns:
        StartupConfig with mode "http" when --http is given, else "stdio"
    """
    args = _build_parser().parse_args(argv)

    return StartupConfig(
        mode="http" if args.http else "stdio",
        port=None if args.port is None else parse_port(args.port),
        host=args.host,
        config_path=args.config,
        log_level=args.log_level,
        json_response=args.json_response,
    )


__all__ = [
    "Config",
    "HTTPConfig",
    "LoggingConfig",
    "ServerInfo",
    "StartupConfig",
    "apply_startup_overrides",
    "load_config",
    "parse_args",
    "parse_port",
]
