"""Server configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from ..render import RenderOptions, parse_option_flags

DEFAULT_CONFIG_PATH = "~/.whats-next/config.yaml"
DEFAULT_DB_PATH = "~/.whats-next/graph.db"


@dataclass
class DatabaseConfig:
    """Snapshot persistence configuration.

    ``path`` of None keeps the graph purely in memory.
    """
    path: Optional[str] = None

    def __post_init__(self):
        # Expand home directory
        if self.path and self.path != ":memory:":
            self.path = str(Path(self.path).expanduser())


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 3001

    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")


@dataclass
class RenderConfig:
    """Default node rendering flags, e.g. ``--size auto --label on``."""
    flags: str = ""

    def options(self) -> RenderOptions:
        return parse_option_flags(self.flags)


@dataclass
class WhatsNextConfig:
    """Full service configuration."""
    db: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "WhatsNextConfig":
        """Load configuration from YAML file."""
        path = Path(path).expanduser()
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "WhatsNextConfig":
        """Create configuration from dictionary."""
        db_data = data.get("db", {})
        server_data = data.get("server", {})
        render_data = data.get("render", {})

        return cls(
            db=DatabaseConfig(**db_data) if db_data else DatabaseConfig(),
            server=ServerConfig(**server_data) if server_data else ServerConfig(),
            render=RenderConfig(**render_data) if render_data else RenderConfig(),
        )

    @classmethod
    def from_env(cls) -> "WhatsNextConfig":
        """Create configuration from environment variables."""
        config_path = os.environ.get("WHATSNEXT_CONFIG", DEFAULT_CONFIG_PATH)
        return cls.from_file(config_path)

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.server.host:
            errors.append("server.host is required")

        if self.db.path and self.db.path != ":memory:":
            db_path = Path(self.db.path)
            if db_path.exists() and db_path.is_dir():
                errors.append(f"db.path points to a directory: {db_path}")

        return errors
