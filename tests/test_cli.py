"""Tests for the whatsnext CLI (init and export commands)."""

import argparse
import json

import pytest

from whatsnext.cli import cmd_export, cmd_init
from whatsnext.server.config import WhatsNextConfig
from whatsnext.services import InMemoryGraphStore, SQLiteSnapshotStore


def _init_args(**kwargs):
    return argparse.Namespace(
        memory_only=kwargs.get("memory_only", False),
        port=kwargs.get("port", None),
        force=kwargs.get("force", False),
    )


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Set up isolated CLI environment using tmp_path as home."""
    app_dir = tmp_path / ".whats-next"
    monkeypatch.setattr("whatsnext.cli.WHATSNEXT_DIR", app_dir)
    monkeypatch.setattr("whatsnext.cli.CONFIG_FILE", app_dir / "config.yaml")
    return app_dir


class TestInitCommand:
    """Tests for `whatsnext init`."""

    def test_init_creates_config_file(self, cli_env):
        assert cmd_init(_init_args()) == 0

        config = WhatsNextConfig.from_file(cli_env / "config.yaml")
        assert config.db.path == str(cli_env / "graph.db")
        assert config.server.port == 3001
        assert config.render.options().size == "auto"

    def test_init_memory_only(self, cli_env):
        assert cmd_init(_init_args(memory_only=True, port=4000)) == 0

        config = WhatsNextConfig.from_file(cli_env / "config.yaml")
        assert config.db.path is None
        assert config.server.port == 4000

    def test_init_refuses_overwrite_without_force(self, cli_env):
        cli_env.mkdir(parents=True)
        (cli_env / "config.yaml").write_text("existing config")

        assert cmd_init(_init_args()) == 1
        assert (cli_env / "config.yaml").read_text() == "existing config"

    def test_init_force_overwrites(self, cli_env):
        cli_env.mkdir(parents=True)
        (cli_env / "config.yaml").write_text("existing config")

        assert cmd_init(_init_args(force=True)) == 0
        assert "server:" in (cli_env / "config.yaml").read_text()


class TestExportCommand:
    """Tests for `whatsnext export`."""

    def test_export_writes_json(self, tmp_path):
        db_path = tmp_path / "graph.db"
        config_path = tmp_path / "config.yaml"
        config_path.write_text(f"db:\n  path: {db_path}\n")

        store = InMemoryGraphStore()
        alice = store.add_person({"name": "Alice"})
        bob = store.add_person({"name": "Bob"})
        store.add_connection(alice.id, bob.id)
        with SQLiteSnapshotStore(db_path) as db:
            db.save(store.snapshot())

        output = tmp_path / "graph.json"
        args = argparse.Namespace(config=str(config_path), output=str(output))
        assert cmd_export(args) == 0

        data = json.loads(output.read_text())
        assert [p["name"] for p in data["people"]] == ["Alice", "Bob"]
        assert data["connections"][0]["from"] == alice.id

    def test_export_without_db_path(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("server:\n  port: 3001\n")

        args = argparse.Namespace(config=str(config_path), output=None)
        assert cmd_export(args) == 1
