"""SQLite snapshot persistence for the knowledge graph.

The in-memory store stays authoritative; this module only writes a full
snapshot to disk and reads it back so a server restart does not lose the
graph.

Schema:
- events: (id, name, date, location, description, attendees_json, ...)
- people: (id, name, ..., tags_json, event_id -> events.id)
- connections: (id = pair key, from_id -> people.id, to_id -> people.id,
  relationship_type, strength, notes, event_id -> events.id, created_at)
"""

import json
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..interfaces import Connection, Event, GraphSnapshot, Person

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class SQLiteSnapshotStore:
    """Reads and writes graph snapshots in a SQLite file.

    Connection management mirrors a long-lived service: one persistent
    connection in WAL mode, guarded by an RLock.

    Lifecycle:
        with SQLiteSnapshotStore(path) as db:
            db.save(store.snapshot())
    """

    def __init__(self, db_path: str | Path):
        """Open (and create if needed) the database.

        Args:
            db_path: Path to the SQLite file, or ":memory:".
        """
        if str(db_path) == MEMORY_DB:
            self.db_path = MEMORY_DB
        else:
            self.db_path = Path(db_path).expanduser()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False
        )
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()

        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._init_schema()

    def __enter__(self) -> "SQLiteSnapshotStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if getattr(self, "_conn", None) is not None:
            self._conn.close()
            self._conn = None

    def _init_schema(self) -> None:
        with self._lock:
            self._conn.executescript("""
                CREATE TABLE IF NOT EXISTS events (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    date TEXT,
                    location TEXT,
                    description TEXT,
                    attendees_json TEXT DEFAULT '[]',
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                );

                CREATE TABLE IF NOT EXISTS people (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT,
                    phone TEXT,
                    profession TEXT,
                    company TEXT,
                    location TEXT,
                    notes TEXT,
                    tags_json TEXT DEFAULT '[]',
                    event_id TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT,
                    FOREIGN KEY (event_id) REFERENCES events(id) ON DELETE SET NULL
                );

                CREATE TABLE IF NOT EXISTS connections (
                    id TEXT PRIMARY KEY,
                    from_id TEXT NOT NULL,
                    to_id TEXT NOT NULL,
                    relationship_type TEXT,
                    strength INTEGER,
                    notes TEXT,
                    event_id TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (from_id) REFERENCES people(id) ON DELETE CASCADE,
                    FOREIGN KEY (to_id) REFERENCES people(id) ON DELETE CASCADE,
                    FOREIGN KEY (event_id) REFERENCES events(id) ON DELETE SET NULL
                );

                CREATE INDEX IF NOT EXISTS idx_people_name ON people(name);
                CREATE INDEX IF NOT EXISTS idx_events_date ON events(date);
                CREATE INDEX IF NOT EXISTS idx_connections_from ON connections(from_id);
                CREATE INDEX IF NOT EXISTS idx_connections_to ON connections(to_id);
            """)

    def save(self, snapshot: GraphSnapshot) -> None:
        """Replace the stored graph with ``snapshot`` in one transaction."""
        with self._lock:
            with self._conn:
                self._conn.execute("DELETE FROM connections")
                self._conn.execute("DELETE FROM people")
                self._conn.execute("DELETE FROM events")
                self._conn.executemany(
                    """
                    INSERT INTO events (id, name, date, location, description,
                                        attendees_json, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (e.id, e.name, e.date, e.location, e.description,
                         json.dumps(list(e.attendees)),
                         _iso(e.created_at), _iso(e.updated_at))
                        for e in snapshot.events
                    ],
                )
                self._conn.executemany(
                    """
                    INSERT INTO people (id, name, email, phone, profession, company,
                                        location, notes, tags_json, event_id,
                                        created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (p.id, p.name, p.email, p.phone, p.profession, p.company,
                         p.location, p.notes, json.dumps(list(p.tags)), p.event_id,
                         _iso(p.created_at), _iso(p.updated_at))
                        for p in snapshot.people
                    ],
                )
                self._conn.executemany(
                    """
                    INSERT INTO connections (id, from_id, to_id, relationship_type,
                                             strength, notes, event_id, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (c.id, c.from_id, c.to_id, c.relationship_type, c.strength,
                         c.notes, c.event_id, _iso(c.created_at))
                        for c in snapshot.connections
                    ],
                )
        logger.info(
            "Saved graph to %s (%d people, %d events, %d connections)",
            self.db_path, len(snapshot.people), len(snapshot.events),
            len(snapshot.connections),
        )

    def load(self) -> GraphSnapshot:
        """Read the stored graph, preserving insertion order."""
        with self._lock:
            event_rows = self._conn.execute(
                "SELECT * FROM events ORDER BY rowid"
            ).fetchall()
            people_rows = self._conn.execute(
                "SELECT * FROM people ORDER BY rowid"
            ).fetchall()
            connection_rows = self._conn.execute(
                "SELECT * FROM connections ORDER BY rowid"
            ).fetchall()

        events = tuple(
            Event(
                id=row["id"],
                name=row["name"],
                date=row["date"],
                location=row["location"],
                description=row["description"],
                attendees=tuple(json.loads(row["attendees_json"] or "[]")),
                created_at=_dt(row["created_at"]),
                updated_at=_dt(row["updated_at"]),
            )
            for row in event_rows
        )
        people = tuple(
            Person(
                id=row["id"],
                name=row["name"],
                email=row["email"],
                phone=row["phone"],
                profession=row["profession"],
                company=row["company"],
                location=row["location"],
                notes=row["notes"],
                tags=tuple(json.loads(row["tags_json"] or "[]")),
                event_id=row["event_id"],
                created_at=_dt(row["created_at"]),
                updated_at=_dt(row["updated_at"]),
            )
            for row in people_rows
        )
        connections = tuple(
            Connection(
                id=row["id"],
                from_id=row["from_id"],
                to_id=row["to_id"],
                relationship_type=row["relationship_type"],
                strength=row["strength"],
                notes=row["notes"],
                event_id=row["event_id"],
                created_at=_dt(row["created_at"]),
            )
            for row in connection_rows
        )
        return GraphSnapshot(people=people, events=events, connections=connections)
