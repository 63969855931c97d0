"""
Unit tests for configuration and the command line.
"""

from dataclasses import replace
from pathlib import Path

import pytest

from tinyhttpd.__main__ import parse_config
from tinyhttpd.config import ServerConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_DIRECTORY", "HTTP_TIMEOUT", "HTTP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestServerConfig:
    """Tests for ServerConfig defaults, environment and validation."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 4221
        assert config.files_root is None
        assert config.timeout is None
        config.validate()

    def test_is_frozen(self):
        with pytest.raises(AttributeError):
            ServerConfig().port = 1

    def test_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("HTTP_PORT", "8081")
        monkeypatch.setenv("HTTP_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8081
        assert config.files_root == str(tmp_path)
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self):
        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env_bad_port(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "not-a-port")

        with pytest.raises(ValueError):
            ServerConfig.from_env()

    @pytest.mark.parametrize(
        "changes",
        [
            {"port": -1},
            {"port": 70000},
            {"backlog": 0},
            {"max_line_size": 10},
            {"max_body_size": -1},
            {"timeout": 0},
            {"log_level": "LOUD"},
            {"files_root": "/definitely/not/a/real/dir"},
        ],
    )
    def test_validate_rejects(self, changes):
        with pytest.raises(ValueError):
            replace(ServerConfig(), **changes).validate()

    def test_port_zero_is_valid(self):
        ServerConfig(port=0).validate()


class TestCommandLine:
    """Tests for argument parsing into ServerConfig."""

    def test_no_arguments(self):
        config = parse_config([])

        assert config == ServerConfig()

    def test_directory(self, tmp_path: Path):
        config = parse_config(["--directory", str(tmp_path)])

        assert config.files_root == str(tmp_path)

    def test_all_flags(self, tmp_path: Path):
        config = parse_config([
            "--directory", str(tmp_path),
            "--host", "0.0.0.0",
            "--port", "9000",
            "--timeout", "3",
            "--log-level", "debug",
        ])

        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.timeout == 3.0
        assert config.log_level == "DEBUG"

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "5000")

        assert parse_config([]).port == 5000
        assert parse_config(["--port", "6000"]).port == 6000

    def test_missing_directory_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_config(["--directory", "/definitely/not/a/real/dir"])

        assert exc_info.value.code == 2
        assert "files_root is not a directory" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_config(["--version"])

        assert exc_info.value.code == 0
        assert "tinyhttpd 1.0.0" in capsys.readouterr().out
