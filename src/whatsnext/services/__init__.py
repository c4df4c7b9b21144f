"""What's Next service implementations."""

from .graph_store import InMemoryGraphStore, coerce_strength
from .sqlite_store import SQLiteSnapshotStore

__all__ = [
    "InMemoryGraphStore",
    "SQLiteSnapshotStore",
    "coerce_strength",
]
