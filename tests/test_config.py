"""Tests for configuration loading and command-line parsing."""

from pathlib import Path

import pytest

from mcp_template.server.config import (
    DEFAULT_PORT,
    Config,
    HTTPConfig,
    LoggingConfig,
    ServerInfo,
    StartupConfig,
    apply_startup_overrides,
    load_config,
    parse_args,
    parse_port,
)


class TestParseArgs:
    """Test startup mode and port selection."""

    def test_defaults_to_stdio(self) -> None:
        """Verify no flags means stdio with no port override."""
        startup = parse_args([])

        assert startup.mode == "stdio"
        assert startup.port is None
        assert startup.json_response is False

    def test_http_flag(self) -> None:
        """Verify --http selects the HTTP transport."""
        assert parse_args(["--http"]).mode == "http"

    def test_port(self) -> None:
        """Verify --port sets the port."""
        startup = parse_args(["--http", "--port", "8080"])

        assert startup.mode == "http"
        assert startup.port == 8080

    @pytest.mark.parametrize("value", ["abc", "", "-5", "0", "70000", "port8080"])
    def test_unusable_port_falls_back(self, value: str) -> None:
        """Verify unparsable or out-of-range ports use the default."""
        assert parse_args(["--http", "--port", value]).port == DEFAULT_PORT

    @pytest.mark.parametrize(("value", "port"), [("8080abc", 8080), ("80.5", 80), (" 3002", 3002)])
    def test_leading_digits(self, value: str, port: int) -> None:
        """Verify a value starting with digits uses those digits."""
        assert parse_args(["--http", "--port", value]).port == port

    def test_port_without_value_falls_back(self) -> None:
        """Verify a bare --port uses the default."""
        assert parse_args(["--http", "--port"]).port == DEFAULT_PORT

    def test_extra_flags(self) -> None:
        """Verify host, config, log level and JSON response flags."""
        startup = parse_args(
            [
                "--http",
                "--host",
                "0.0.0.0",
                "--config",
                "custom.yml",
                "--log-level",
                "debug",
                "--json-response",
            ]
        )

        assert startup.host == "0.0.0.0"
        assert startup.config_path == Path("custom.yml")
        assert startup.log_level == "DEBUG"
        assert startup.json_response is True

    def test_parse_port(self) -> None:
        """Verify the port parser directly."""
        assert parse_port("3002") == 3002
        assert parse_port(None) == DEFAULT_PORT
        assert parse_port("nope", default=9000) == 9000


class TestDataclasses:
    """Test config validation."""

    def test_defaults(self) -> None:
        """Verify default values."""
        config = Config()

        assert config.server == ServerInfo(name="mcp-template", version="1.0.0")
        assert config.http.port == 3001
        assert config.http.host == "127.0.0.1"
        assert config.logging.level == "INFO"

    def test_invalid_port(self) -> None:
        """Verify ports outside 1-65535 are rejected."""
        with pytest.raises(ValueError, match="port must be 1-65535"):
            HTTPConfig(port=0)

    def test_log_level_normalized(self) -> None:
        """Verify log levels are upper-cased and validated."""
        assert LoggingConfig(level="warning").level == "WARNING"
        with pytest.raises(ValueError, match="log level"):
            LoggingConfig(level="LOUD")

    def test_empty_server_name(self) -> None:
        """Verify the server needs a name."""
        with pytest.raises(ValueError, match="server name"):
            ServerInfo(name="")

    def test_to_dict(self) -> None:
        """Verify dictionary conversion."""
        assert Config().to_dict()["http"] == {
            "host": "127.0.0.1",
            "port": 3001,
            "json_response": False,
        }


class TestLoadConfig:
    """Test YAML and environment loading."""

    def test_defaults_without_file(self, clean_env: Path) -> None:
        """Verify a missing config file means defaults."""
        assert load_config() == Config()

    def test_yaml_file(self, clean_env: Path) -> None:
        """Verify values are read from mcp_template.yml in the working directory."""
        (clean_env / "mcp_template.yml").write_text(
            "server:\n"
            "  name: custom\n"
            "  version: 2.1\n"
            "http:\n"
            "  port: 4000\n"
            "  json_response: true\n"
            "logging:\n"
            "  level: debug\n",
            encoding="utf-8",
        )

        config = load_config()

        assert config.server == ServerInfo(name="custom", version="2.1")
        assert config.http.port == 4000
        assert config.http.json_response is True
        assert config.http.host == "127.0.0.1"
        assert config.logging.level == "DEBUG"

    def test_quoted_booleans(self, clean_env: Path) -> None:
        """Verify quoted YAML flags are read like environment flags."""
        path = clean_env / "quoted.yml"
        path.write_text(
            'http:\n  json_response: "false"\nlogging:\n  structured: "yes"\n',
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.http.json_response is False
        assert config.logging.structured is True

    def test_config_path_from_env(self, clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verify MCP_TEMPLATE_CONFIG points at the file."""
        path = clean_env / "elsewhere.yml"
        path.write_text("http:\n  host: 0.0.0.0\n", encoding="utf-8")
        monkeypatch.setenv("MCP_TEMPLATE_CONFIG", str(path))

        assert load_config().http.host == "0.0.0.0"

    def test_empty_sections(self, clean_env: Path) -> None:
        """Verify empty YAML sections keep the defaults."""
        path = clean_env / "empty.yml"
        path.write_text("server:\nhttp:\nlogging:\n", encoding="utf-8")

        assert load_config(path) == Config()

    def test_invalid_yaml_uses_defaults(self, clean_env: Path) -> None:
        """Verify a broken file is logged and ignored."""
        path = clean_env / "broken.yml"
        path.write_text("http: [unclosed\n", encoding="utf-8")

        assert load_config(path) == Config()

    def test_invalid_value_raises(self, clean_env: Path) -> None:
        """Verify invalid values fail validation."""
        path = clean_env / "bad.yml"
        path.write_text("http:\n  port: 99999\n", encoding="utf-8")

        with pytest.raises(ValueError, match="port must be 1-65535"):
            load_config(path)

    def test_env_overrides_yaml(self, clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verify environment variables win over the file."""
        path = clean_env / "config.yml"
        path.write_text("http:\n  port: 4000\nlogging:\n  level: INFO\n", encoding="utf-8")
        monkeypatch.setenv("MCP_HTTP_PORT", "5000")
        monkeypatch.setenv("MCP_HTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("MCP_JSON_RESPONSE", "true")
        monkeypatch.setenv("MCP_LOG_LEVEL", "error")
        monkeypatch.setenv("MCP_STRUCTURED_LOGGING", "1")

        config = load_config(path)

        assert config.http == HTTPConfig(host="0.0.0.0", port=5000, json_response=True)
        assert config.logging == LoggingConfig(level="ERROR", structured=True)


class TestStartupOverrides:
    """Test folding command-line flags into the config."""

    def test_flags_win(self) -> None:
        """Verify explicit flags override loaded values."""
        config = apply_startup_overrides(
            Config(http=HTTPConfig(port=5000)),
            StartupConfig(mode="http", port=8080, host="0.0.0.0", log_level="DEBUG", json_response=True),
        )

        assert config.http == HTTPConfig(host="0.0.0.0", port=8080, json_response=True)
        assert config.logging.level == "DEBUG"

    def test_absent_flags_keep_config(self) -> None:
        """Verify unset flags leave env/file values alone."""
        config = apply_startup_overrides(Config(http=HTTPConfig(port=5000)), StartupConfig())

        assert config.http.port == 5000
        assert config.logging.level == "INFO"
