"""
Unit tests for ServerConfig and the command-line entry point.
"""

import socket

import pytest

from tinyhttpd.__main__ import main, parse_config
from tinyhttpd.config import ServerConfig
from tinyhttpd.errors import ConfigError


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()

        assert config.serving_directory is None
        assert config.host == "127.0.0.1"
        assert config.port == 9090
        assert config.workers == 4
        assert config.max_header_size == 1024
        config.validate()

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ServerConfig().serving_directory = "/tmp"

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 70000},
        {"workers": 0},
        {"queue_size": -1},
        {"max_header_size": 0},
        {"backlog": 0},
        {"accept_timeout": 0},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
    ])
    def test_validate_rejects(self, overrides: dict):
        with pytest.raises(ConfigError):
            ServerConfig(**overrides).validate()

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            ServerConfig(workers=0).validate()


class TestCommandLine:

    def test_no_arguments(self):
        config, unknown = parse_config([])

        assert config.serving_directory is None
        assert config.port == 9090
        assert unknown == []

    def test_directory_flag(self):
        config, _ = parse_config(["--directory", "/srv/files"])
        assert config.serving_directory == "/srv/files"

    def test_unknown_flags_are_collected(self):
        config, unknown = parse_config(["--frobnicate", "--directory", "/srv", "extra"])

        assert config.serving_directory == "/srv"
        assert unknown == ["--frobnicate", "extra"]

    def test_other_options(self):
        config, _ = parse_config([
            "--host", "0.0.0.0", "--port", "8081", "--workers", "2",
            "--queue-size", "0", "--log-level", "DEBUG", "--log-format", "json",
        ])

        assert config == ServerConfig(
            host="0.0.0.0", port=8081, workers=2, queue_size=0,
            log_level="DEBUG", log_format="json",
        )

    def test_invalid_config_exits_1(self):
        assert main(["--workers", "0", "--log-level", "ERROR"]) == 1

    def test_bind_failure_exits_1(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            assert main(["--port", str(port), "--log-level", "ERROR"]) == 1
