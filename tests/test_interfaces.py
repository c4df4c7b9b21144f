"""Tests for the entity model and identity helpers."""

from whatsnext.interfaces import (
    Connection,
    Event,
    GraphSnapshot,
    Person,
    generate_id,
    pair_key,
)


class TestPairKey:
    """Tests for the canonical pair key."""

    def test_symmetric(self):
        """pair_key ignores argument order."""
        a, b = generate_id(), generate_id()
        assert pair_key(a, b) == pair_key(b, a)

    def test_sorted_and_joined(self):
        """The smaller id comes first, joined by an underscore."""
        assert pair_key("b", "a") == "a_b"

    def test_distinct_pairs_differ(self):
        assert pair_key("a", "b") != pair_key("a", "c")


class TestGenerateId:
    def test_ids_are_unique(self):
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestPerson:
    """Tests for Person construction."""

    def test_from_fields_substitutes_defaults(self):
        """Absent optional fields become blanks, tags an empty tuple."""
        person = Person.from_fields({"name": "Alice"})

        assert person.name == "Alice"
        assert person.email == ""
        assert person.notes == ""
        assert person.tags == ()
        assert person.event_id is None
        assert person.type == "person"
        assert person.updated_at is None

    def test_tags_keep_order_and_duplicates(self):
        person = Person.from_fields({"name": "A", "tags": ["b", "a", "b"]})
        assert person.tags == ("b", "a", "b")

    def test_blank_event_id_means_no_reference(self):
        person = Person.from_fields({"name": "A", "event_id": ""})
        assert person.event_id is None

    def test_to_dict_uses_camel_case(self):
        person = Person.from_fields({"name": "A", "tags": ["x"]})
        data = person.to_dict()

        assert data["eventId"] is None
        assert data["tags"] == ["x"]
        assert data["type"] == "person"
        assert "createdAt" in data


class TestEvent:
    def test_date_defaults_to_now(self):
        """An event without a date gets its creation time as date."""
        event = Event.from_fields({"name": "Meetup"})
        assert event.date == event.created_at.isoformat()

    def test_explicit_date_kept(self):
        event = Event.from_fields({"name": "Meetup", "date": "2024-05-01"})
        assert event.date == "2024-05-01"


class TestConnection:
    def test_to_dict_keeps_submitted_order(self):
        conn = Connection(id=pair_key("b", "a"), from_id="b", to_id="a")
        data = conn.to_dict()

        assert data["id"] == "a_b"
        assert data["from"] == "b"
        assert data["to"] == "a"
        assert data["relationshipType"] == "knows"

    def test_involves(self):
        conn = Connection(id="a_b", from_id="a", to_id="b")
        assert conn.involves("a")
        assert conn.involves("b")
        assert not conn.involves("c")


class TestGraphSnapshot:
    def test_empty_to_dict(self):
        assert GraphSnapshot().to_dict() == {
            "people": [], "events": [], "connections": [],
        }
