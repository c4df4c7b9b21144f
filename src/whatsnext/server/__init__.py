"""What's Next HTTP Server.

FastAPI-based HTTP interface for the knowledge graph store.
"""

from .app import create_app, run_server

__all__ = ["create_app", "run_server"]
