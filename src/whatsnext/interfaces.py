"""Core interfaces for the What's Next knowledge graph.

Defines the three entity kinds (Person, Event, Connection), the snapshot
shape handed to readers, identity helpers and the store contract that
every graph store implementation must satisfy.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Optional
import uuid

# Separator used by pair_key; uuid4 strings never contain it
PAIR_KEY_SEPARATOR = "_"

DEFAULT_RELATIONSHIP_TYPE = "knows"
MIN_STRENGTH = 1
MAX_STRENGTH = 5

EntityKind = Literal["person", "event"]

# Fields callers may set on create/update, in wire order
PERSON_FIELDS = (
    "name", "email", "phone", "profession", "company",
    "location", "notes", "tags", "event_id",
)
EVENT_FIELDS = ("name", "date", "location", "description", "attendees")
CONNECTION_FIELDS = ("relationship_type", "strength", "notes", "event_id")


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_id() -> str:
    """Generate a fresh random entity id."""
    return str(uuid.uuid4())


def pair_key(a: str, b: str) -> str:
    """Canonical id for the unordered pair (a, b).

    pair_key(a, b) == pair_key(b, a) for every a and b, which makes the
    pair itself the primary key of an undirected connection.
    """
    return PAIR_KEY_SEPARATOR.join(sorted([a, b]))


def _text(value: Any) -> str:
    return value if value else ""


def as_reference(value: Any) -> Optional[str]:
    """Normalize a weak reference; blank means no reference."""
    return value if value else None


def as_sequence(value: Optional[Iterable[str]]) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class Person:
    """A person in the graph.

    Attributes:
        id: Opaque server-generated identifier, never reused.
        name: Display name (required, non-empty).
        email, phone, profession, company, location, notes: Free text.
        tags: Ordered tags; duplicates are kept as given.
        event_id: Weak reference to the Event where this person was met.
        created_at: When the person was added.
        updated_at: When the person was last updated (None until then).
    """
    id: str
    name: str
    email: Optional[str] = ""
    phone: Optional[str] = ""
    profession: Optional[str] = ""
    company: Optional[str] = ""
    location: Optional[str] = ""
    notes: Optional[str] = ""
    tags: tuple[str, ...] = ()
    event_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    type: EntityKind = field(default="person", init=False)

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "Person":
        """Build a new Person, substituting defaults for absent fields."""
        return cls(
            id=generate_id(),
            name=fields["name"],
            email=_text(fields.get("email")),
            phone=_text(fields.get("phone")),
            profession=_text(fields.get("profession")),
            company=_text(fields.get("company")),
            location=_text(fields.get("location")),
            notes=_text(fields.get("notes")),
            tags=as_sequence(fields.get("tags")),
            event_id=as_reference(fields.get("event_id")),
        )

    def to_dict(self) -> dict:
        """Wire representation (camelCase keys, ISO timestamps)."""
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "profession": self.profession,
            "company": self.company,
            "location": self.location,
            "notes": self.notes,
            "tags": list(self.tags),
            "eventId": self.event_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"Person(id={self.id[:8]}..., name='{self.name}')"


@dataclass(frozen=True)
class Event:
    """An event where people meet.

    ``attendees`` is informational only; it is never checked against
    People or Connections.
    """
    id: str
    name: str
    date: Optional[str] = None
    location: Optional[str] = ""
    description: Optional[str] = ""
    attendees: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    type: EntityKind = field(default="event", init=False)

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "Event":
        """Build a new Event; ``date`` defaults to the current time."""
        created_at = utc_now()
        return cls(
            id=generate_id(),
            name=fields["name"],
            date=fields.get("date") or created_at.isoformat(),
            location=_text(fields.get("location")),
            description=_text(fields.get("description")),
            attendees=as_sequence(fields.get("attendees")),
            created_at=created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "date": self.date,
            "location": self.location,
            "description": self.description,
            "attendees": list(self.attendees),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"Event(id={self.id[:8]}..., name='{self.name}')"


@dataclass(frozen=True)
class Connection:
    """An undirected relationship between two distinct people.

    ``from_id``/``to_id`` keep the order the caller submitted; only ``id``
    is normalized (see pair_key).
    """
    id: str
    from_id: str
    to_id: str
    relationship_type: str = DEFAULT_RELATIONSHIP_TYPE
    strength: int = MIN_STRENGTH
    notes: Optional[str] = ""
    event_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def involves(self, person_id: str) -> bool:
        """Whether ``person_id`` is one of the two endpoints."""
        return person_id in (self.from_id, self.to_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "from": self.from_id,
            "to": self.to_id,
            "relationshipType": self.relationship_type,
            "strength": self.strength,
            "notes": self.notes,
            "eventId": self.event_id,
            "createdAt": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        return (
            f"Connection(id={self.id}, type={self.relationship_type}, "
            f"strength={self.strength})"
        )


@dataclass(frozen=True)
class GraphSnapshot:
    """Point-in-time copy of every collection, in insertion order."""
    people: tuple[Person, ...] = ()
    events: tuple[Event, ...] = ()
    connections: tuple[Connection, ...] = ()

    def to_dict(self) -> dict:
        return {
            "people": [p.to_dict() for p in self.people],
            "events": [e.to_dict() for e in self.events],
            "connections": [c.to_dict() for c in self.connections],
        }


class IGraphStore(ABC):
    """Interface for the knowledge graph store.

    Every operation is atomic with respect to the whole store: it either
    applies fully (including cascades) or raises and changes nothing.
    """

    @abstractmethod
    def add_person(self, fields: Mapping[str, Any]) -> Person:
        """Create a person. Raises ValidationError on a blank name."""
        pass

    @abstractmethod
    def update_person(self, person_id: str, changes: Mapping[str, Any]) -> Person:
        """Merge the given fields over an existing person."""
        pass

    @abstractmethod
    def delete_person(self, person_id: str) -> None:
        """Delete a person and every connection touching them."""
        pass

    @abstractmethod
    def add_event(self, fields: Mapping[str, Any]) -> Event:
        """Create an event."""
        pass

    @abstractmethod
    def update_event(self, event_id: str, changes: Mapping[str, Any]) -> Event:
        """Merge the given fields over an existing event."""
        pass

    @abstractmethod
    def delete_event(self, event_id: str) -> None:
        """Delete an event and clear every reference to it."""
        pass

    @abstractmethod
    def add_connection(
        self,
        from_id: str,
        to_id: str,
        fields: Optional[Mapping[str, Any]] = None,
    ) -> Connection:
        """Connect two distinct existing people."""
        pass

    @abstractmethod
    def delete_connection(self, connection_id: str) -> None:
        """Delete a connection by id."""
        pass

    @abstractmethod
    def snapshot(self) -> GraphSnapshot:
        """Return the current contents of every collection."""
        pass
