"""Errors raised by the graph store.

Each error carries a machine-readable ``kind`` and the HTTP status the
transport layer should answer with.
"""


class GraphStoreError(Exception):
    """Base class for graph store errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class ValidationError(GraphStoreError):
    """Malformed or illegal input."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(GraphStoreError):
    """A referenced id does not exist."""

    kind = "not_found"
    status_code = 404


class ConflictError(GraphStoreError):
    """The operation would violate a uniqueness invariant."""

    kind = "conflict"
    status_code = 409
