"""In-memory knowledge graph store.

Owns the People, Events and Connections collections and is the only
component allowed to mutate them. Every public operation validates its
input completely before touching any collection, so an operation either
applies in full (cascades included) or raises and leaves the store as it
was.

Cascades:
- delete_person removes every connection where the person is an endpoint.
- delete_event clears ``event_id`` on every person and connection that
  references the event. Nothing else is deleted.
"""

import logging
import threading
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Optional

from ..errors import ConflictError, NotFoundError, ValidationError
from ..interfaces import (
    CONNECTION_FIELDS,
    DEFAULT_RELATIONSHIP_TYPE,
    EVENT_FIELDS,
    MAX_STRENGTH,
    MIN_STRENGTH,
    PERSON_FIELDS,
    Connection,
    Event,
    GraphSnapshot,
    IGraphStore,
    Person,
    as_reference,
    as_sequence,
    pair_key,
    utc_now,
)
from ..utils import clamp, parse_leading_int

logger = logging.getLogger(__name__)


def coerce_strength(value: Any) -> int:
    """Turn a submitted strength into an integer in [1, 5].

    Absent or non-numeric values (and 0, as form inputs send it) fall back
    to the minimum strength.
    """
    parsed = parse_leading_int(value)
    if not parsed:
        return MIN_STRENGTH
    return int(clamp(parsed, MIN_STRENGTH, MAX_STRENGTH))


def _require_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Name is required")
    return value


def _check_fields(changes: Mapping[str, Any], allowed: tuple[str, ...]) -> None:
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise ValidationError(f"Unknown or read-only fields: {', '.join(unknown)}")


class InMemoryGraphStore(IGraphStore):
    """Dictionary-backed graph store.

    Collections are plain dicts keyed by id, so iteration follows insertion
    order and replacing a record on update keeps its original position.
    Connections are keyed by ``pair_key(from, to)``.

    Thread-safe: a single RLock serializes every operation, reads included,
    so no caller can observe a cascade half-way through.
    """

    def __init__(self) -> None:
        self._people: dict[str, Person] = {}
        self._events: dict[str, Event] = {}
        self._connections: dict[str, Connection] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # People
    # =========================================================================

    def add_person(self, fields: Mapping[str, Any]) -> Person:
        """Create a person.

        Args:
            fields: ``name`` plus any of the optional person fields.

        Returns:
            The stored Person.

        Raises:
            ValidationError: name missing/blank or unknown fields given.
            NotFoundError: ``event_id`` names an event that does not exist.
        """
        _check_fields(fields, PERSON_FIELDS)
        _require_name(fields.get("name"))
        with self._lock:
            self._check_event_reference(fields.get("event_id"))
            person = Person.from_fields(fields)
            self._people[person.id] = person
        logger.debug("Added person %s", person.id)
        return person

    def update_person(self, person_id: str, changes: Mapping[str, Any]) -> Person:
        """Merge ``changes`` over an existing person.

        Only keys present in ``changes`` are written; an explicit None
        overwrites the stored value. ``name`` may not be cleared.

        Raises:
            NotFoundError: the person or a referenced event does not exist.
            ValidationError: blank name or unknown/read-only fields.
        """
        _check_fields(changes, PERSON_FIELDS)
        updates = dict(changes)
        if "name" in updates:
            _require_name(updates["name"])
        if "tags" in updates:
            updates["tags"] = as_sequence(updates["tags"])
        if "event_id" in updates:
            updates["event_id"] = as_reference(updates["event_id"])
        with self._lock:
            current = self.get_person(person_id)
            self._check_event_reference(updates.get("event_id"))
            updated = replace(current, **updates, updated_at=utc_now())
            self._people[person_id] = updated
        logger.debug("Updated person %s (%s)", person_id, ", ".join(sorted(updates)))
        return updated

    def delete_person(self, person_id: str) -> None:
        """Delete a person together with every connection they belong to."""
        with self._lock:
            self.get_person(person_id)
            doomed = [
                key for key, conn in self._connections.items()
                if conn.involves(person_id)
            ]
            del self._people[person_id]
            for key in doomed:
                del self._connections[key]
        if doomed:
            logger.info(
                "Deleted person %s and %d connection(s)", person_id, len(doomed)
            )
        else:
            logger.debug("Deleted person %s", person_id)

    def get_person(self, person_id: str) -> Person:
        """Look up a person by id, raising NotFoundError if absent."""
        with self._lock:
            person = self._people.get(person_id)
        if person is None:
            raise NotFoundError("Person not found")
        return person

    # =========================================================================
    # Events
    # =========================================================================

    def add_event(self, fields: Mapping[str, Any]) -> Event:
        """Create an event. ``date`` defaults to the current time."""
        _check_fields(fields, EVENT_FIELDS)
        _require_name(fields.get("name"))
        event = Event.from_fields(fields)
        with self._lock:
            self._events[event.id] = event
        logger.debug("Added event %s", event.id)
        return event

    def update_event(self, event_id: str, changes: Mapping[str, Any]) -> Event:
        """Merge ``changes`` over an existing event (same rules as people)."""
        _check_fields(changes, EVENT_FIELDS)
        updates = dict(changes)
        if "name" in updates:
            _require_name(updates["name"])
        if "attendees" in updates:
            updates["attendees"] = as_sequence(updates["attendees"])
        with self._lock:
            current = self.get_event(event_id)
            updated = replace(current, **updates, updated_at=utc_now())
            self._events[event_id] = updated
        logger.debug("Updated event %s (%s)", event_id, ", ".join(sorted(updates)))
        return updated

    def delete_event(self, event_id: str) -> None:
        """Delete an event and clear every reference to it.

        People and connections that point at the event survive with
        ``event_id`` set to None.
        """
        with self._lock:
            self.get_event(event_id)
            del self._events[event_id]
            cleared = 0
            for pid, person in list(self._people.items()):
                if person.event_id == event_id:
                    self._people[pid] = replace(person, event_id=None)
                    cleared += 1
            for key, conn in list(self._connections.items()):
                if conn.event_id == event_id:
                    self._connections[key] = replace(conn, event_id=None)
                    cleared += 1
        if cleared:
            logger.info(
                "Deleted event %s and cleared %d reference(s)", event_id, cleared
            )
        else:
            logger.debug("Deleted event %s", event_id)

    def get_event(self, event_id: str) -> Event:
        """Look up an event by id, raising NotFoundError if absent."""
        with self._lock:
            event = self._events.get(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    # =========================================================================
    # Connections
    # =========================================================================

    def add_connection(
        self,
        from_id: str,
        to_id: str,
        fields: Optional[Mapping[str, Any]] = None,
    ) -> Connection:
        """Connect two distinct, existing people.

        Args:
            from_id: First endpoint, stored as given.
            to_id: Second endpoint, stored as given.
            fields: Optional ``relationship_type``, ``strength``, ``notes``
                and ``event_id``.

        Returns:
            The stored Connection, whose id is ``pair_key(from_id, to_id)``.

        Raises:
            ValidationError: blank endpoint or ``from_id == to_id``.
            NotFoundError: an endpoint or the referenced event is missing.
            ConflictError: the pair is already connected (in either order).
        """
        fields = fields or {}
        _check_fields(fields, CONNECTION_FIELDS)
        if not from_id or not to_id:
            raise ValidationError("From and to are required")
        if from_id == to_id:
            raise ValidationError("Cannot connect a person to themselves")

        with self._lock:
            if from_id not in self._people or to_id not in self._people:
                raise NotFoundError("One or both people not found")
            key = pair_key(from_id, to_id)
            if key in self._connections:
                raise ConflictError("Connection already exists between these people")
            event_id = as_reference(fields.get("event_id"))
            self._check_event_reference(event_id)

            connection = Connection(
                id=key,
                from_id=from_id,
                to_id=to_id,
                relationship_type=(
                    fields.get("relationship_type") or DEFAULT_RELATIONSHIP_TYPE
                ),
                strength=coerce_strength(fields.get("strength")),
                notes=fields.get("notes") or "",
                event_id=event_id,
            )
            self._connections[key] = connection
        logger.debug("Added connection %s", key)
        return connection

    def delete_connection(self, connection_id: str) -> None:
        """Delete a connection. No cascade."""
        with self._lock:
            if connection_id not in self._connections:
                raise NotFoundError("Connection not found")
            del self._connections[connection_id]
        logger.debug("Deleted connection %s", connection_id)

    def get_connection(self, connection_id: str) -> Connection:
        """Look up a connection by its pair key."""
        with self._lock:
            connection = self._connections.get(connection_id)
        if connection is None:
            raise NotFoundError("Connection not found")
        return connection

    # =========================================================================
    # Whole-graph operations
    # =========================================================================

    def snapshot(self) -> GraphSnapshot:
        """Return every collection as an immutable, insertion-ordered copy."""
        with self._lock:
            return GraphSnapshot(
                people=tuple(self._people.values()),
                events=tuple(self._events.values()),
                connections=tuple(self._connections.values()),
            )

    def restore(self, snapshot: GraphSnapshot) -> None:
        """Load ``snapshot`` into an empty store.

        The snapshot is checked against the store invariants first; a
        snapshot that would leave a dangling endpoint, a dangling event
        reference, a self-loop or a mis-keyed connection is rejected with
        ValidationError and the store is left untouched. A store that
        already holds data raises ConflictError instead of being overwritten.
        """
        people = {p.id: p for p in snapshot.people}
        events = {e.id: e for e in snapshot.events}
        connections = {c.id: c for c in snapshot.connections}
        if len(people) != len(snapshot.people) or len(events) != len(snapshot.events):
            raise ValidationError("Snapshot contains duplicate ids")
        if len(connections) != len(snapshot.connections):
            raise ValidationError("Snapshot contains duplicate connections")

        for person in people.values():
            if person.event_id is not None and person.event_id not in events:
                raise ValidationError(
                    f"Person {person.id} references missing event {person.event_id}"
                )
        for conn in connections.values():
            if conn.from_id == conn.to_id:
                raise ValidationError(f"Connection {conn.id} is a self-loop")
            if conn.from_id not in people or conn.to_id not in people:
                raise ValidationError(f"Connection {conn.id} has a missing endpoint")
            if conn.id != pair_key(conn.from_id, conn.to_id):
                raise ValidationError(f"Connection {conn.id} is not keyed by its pair")
            if conn.event_id is not None and conn.event_id not in events:
                raise ValidationError(
                    f"Connection {conn.id} references missing event {conn.event_id}"
                )

        with self._lock:
            if self._people or self._events or self._connections:
                raise ConflictError("Cannot restore into a non-empty graph")
            self._people = people
            self._events = events
            self._connections = connections
        logger.info(
            "Restored graph: %d people, %d events, %d connections",
            len(people), len(events), len(connections),
        )

    def stats(self) -> dict:
        """Count of each collection."""
        with self._lock:
            return {
                "people": len(self._people),
                "events": len(self._events),
                "connections": len(self._connections),
            }

    def _check_event_reference(self, event_id: Optional[str]) -> None:
        if event_id and event_id not in self._events:
            raise NotFoundError("Event not found")
