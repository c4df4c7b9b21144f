"""Tests for server configuration."""

import pytest

from whatsnext.server.config import (
    DatabaseConfig,
    RenderConfig,
    ServerConfig,
    WhatsNextConfig,
)


class TestWhatsNextConfig:
    """Tests for loading configuration."""

    def test_defaults(self):
        config = WhatsNextConfig()

        assert config.db.path is None
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 3001
        assert config.validate() == []

    def test_from_dict(self):
        config = WhatsNextConfig.from_dict({
            "db": {"path": "/tmp/graph.db"},
            "server": {"port": 8080},
            "render": {"flags": "--size 4"},
        })

        assert config.db.path == "/tmp/graph.db"
        assert config.server.port == 8080
        assert config.render.options().size == 4.0

    def test_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  host: 0.0.0.0\n  port: 9000\n")

        config = WhatsNextConfig.from_file(path)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9000

    def test_missing_file_gives_defaults(self, tmp_path):
        config = WhatsNextConfig.from_file(tmp_path / "missing.yaml")
        assert config == WhatsNextConfig()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert WhatsNextConfig.from_file(path) == WhatsNextConfig()

    def test_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 7000\n")
        monkeypatch.setenv("WHATSNEXT_CONFIG", str(path))

        assert WhatsNextConfig.from_env().server.port == 7000

    def test_home_is_expanded(self):
        assert "~" not in DatabaseConfig(path="~/graph.db").path

    def test_invalid_port(self):
        with pytest.raises(ValueError):
            ServerConfig(port=0)

    def test_directory_db_path_is_an_error(self, tmp_path):
        config = WhatsNextConfig(db=DatabaseConfig(path=str(tmp_path)))
        assert config.validate()

    def test_render_flags_are_lenient(self):
        options = RenderConfig(flags="--size nope --label off").options()
        assert options.size == "auto"
        assert options.label is False
