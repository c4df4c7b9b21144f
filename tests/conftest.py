"""Pytest fixtures for What's Next tests."""

import pytest

from whatsnext.services import InMemoryGraphStore


@pytest.fixture
def store():
    """Provide an empty in-memory graph store."""
    return InMemoryGraphStore()


@pytest.fixture
def alice(store):
    return store.add_person({"name": "Alice", "email": "alice@example.com"})


@pytest.fixture
def bob(store):
    return store.add_person({"name": "Bob", "company": "Acme"})


@pytest.fixture
def conf(store):
    return store.add_event({"name": "Conf2024", "location": "Berlin"})
