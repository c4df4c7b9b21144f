"""What's Next - knowledge graph of people, events and connections."""

from .errors import ConflictError, GraphStoreError, NotFoundError, ValidationError
from .interfaces import Connection, Event, GraphSnapshot, Person, pair_key
from .services import InMemoryGraphStore

__version__ = "0.1.0"

__all__ = [
    "Connection",
    "ConflictError",
    "Event",
    "GraphSnapshot",
    "GraphStoreError",
    "InMemoryGraphStore",
    "NotFoundError",
    "Person",
    "ValidationError",
    "pair_key",
]
