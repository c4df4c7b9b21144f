"""What's Next CLI — init, serve, and export entry points.

Usage:
    whatsnext init                  # Write ~/.whats-next/config.yaml
    whatsnext init --memory-only    # Config without snapshot persistence
    whatsnext serve                 # Start the HTTP server
    whatsnext export -o graph.json  # Dump the persisted graph as JSON
"""

import argparse
import json
import logging
import sys
from pathlib import Path

WHATSNEXT_DIR = Path.home() / ".whats-next"
CONFIG_FILE = WHATSNEXT_DIR / "config.yaml"

CONFIG_TEMPLATE = """\
# What's Next Configuration
# The graph lives in memory; db.path holds the snapshot written on shutdown.

db:
  path: {db_path}

server:
  host: 127.0.0.1
  port: {port}

render:
  flags: "--size auto --label on --highlight on"
"""

MEMORY_ONLY_TEMPLATE = """\
# What's Next Configuration (memory only)
# Nothing is persisted; the graph is lost when the server stops.

server:
  host: 127.0.0.1
  port: {port}

render:
  flags: "--size auto --label on --highlight on"
"""


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def cmd_init(args: argparse.Namespace) -> int:
    """Write a starter config file. Returns the process exit code."""
    if CONFIG_FILE.exists() and not args.force:
        print(f"⚠️  Config already exists: {CONFIG_FILE}")
        print("   Use --force to overwrite.")
        return 1

    port = args.port or 3001
    if args.memory_only:
        content = MEMORY_ONLY_TEMPLATE.format(port=port)
    else:
        db_path = WHATSNEXT_DIR / "graph.db"
        content = CONFIG_TEMPLATE.format(db_path=db_path, port=port)

    WHATSNEXT_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(content)
    print(f"✅ Config written: {CONFIG_FILE}")
    print()
    print("🚀 Start the server:")
    print("   whatsnext serve")
    return 0


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the HTTP server."""
    from .server.app import run_server
    from .server.config import WhatsNextConfig

    log_level = args.log_level or "info"
    _configure_logging(log_level)

    config_path = args.config
    if config_path:
        config = WhatsNextConfig.from_file(config_path)
    else:
        config = WhatsNextConfig.from_env()

    run_server(
        config=config,
        host=args.host,
        port=args.port,
        log_level=log_level,
    )


def cmd_export(args: argparse.Namespace) -> int:
    """Write the persisted graph as JSON. Returns the process exit code."""
    from .server.config import WhatsNextConfig
    from .services import SQLiteSnapshotStore

    config_path = args.config
    if config_path:
        config = WhatsNextConfig.from_file(config_path)
    else:
        config = WhatsNextConfig.from_env()

    if not config.db.path:
        print("❌ No db.path configured; nothing to export.", file=sys.stderr)
        return 1

    with SQLiteSnapshotStore(config.db.path) as snapshots:
        snapshot = snapshots.load()

    payload = json.dumps(snapshot.to_dict(), indent=2)
    if args.output:
        Path(args.output).write_text(payload + "\n")
        print(
            f"✅ Exported {len(snapshot.people)} people, {len(snapshot.events)} events, "
            f"{len(snapshot.connections)} connections to {args.output}"
        )
    else:
        print(payload)
    return 0


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="whatsnext",
        description="What's Next — knowledge graph of people and events",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init
    init_parser = subparsers.add_parser("init", help="Write a starter config file")
    init_parser.add_argument("--memory-only", action="store_true",
                             help="Do not persist the graph between runs")
    init_parser.add_argument("--port", "-p", type=int, default=None,
                             help="Server port (default: 3001)")
    init_parser.add_argument("--force", action="store_true",
                             help="Overwrite existing config")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP server")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", "-p", type=int, default=None)
    serve_parser.add_argument("--config", "-c", type=str, default=None)
    serve_parser.add_argument("--log-level", type=str, default=None,
                              choices=["debug", "info", "warning", "error"])

    # export
    export_parser = subparsers.add_parser("export", help="Dump the persisted graph as JSON")
    export_parser.add_argument("--config", "-c", type=str, default=None)
    export_parser.add_argument("--output", "-o", type=str, default=None,
                               help="Output file (default: stdout)")

    args = parser.parse_args()

    if args.command == "init":
        sys.exit(cmd_init(args))
    elif args.command == "serve":
        cmd_serve(args)
    elif args.command == "export":
        sys.exit(cmd_export(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
