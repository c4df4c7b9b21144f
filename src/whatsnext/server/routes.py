"""API route handlers.

Store errors are not caught here; the application-level exception handler
turns them into ``{"error", "message"}`` responses (400/404/409).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from ..interfaces import Connection, Event, Person
from ..render import build_graph_data, draw_node, parse_option_flags
from ..services import InMemoryGraphStore
from .models import (
    ConnectionCreateRequest,
    ConnectionResponse,
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
    GraphResponse,
    HealthResponse,
    NodeResponse,
    PersonCreateRequest,
    PersonResponse,
    PersonUpdateRequest,
)

router = APIRouter(prefix="/api", tags=["graph"])


def get_graph_store(request: Request) -> InMemoryGraphStore:
    """Dependency injection for the graph store held on app state."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return store


def _person(person: Person) -> PersonResponse:
    return PersonResponse.model_validate(person)


def _event(event: Event) -> EventResponse:
    return EventResponse.model_validate(event)


def _connection(connection: Connection) -> ConnectionResponse:
    return ConnectionResponse.model_validate(connection)


# =============================================================================
# Graph
# =============================================================================

@router.get("/graph", response_model=GraphResponse)
async def get_graph(
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> GraphResponse:
    """Full snapshot of people, events and connections."""
    snap = store.snapshot()
    return GraphResponse(
        people=[_person(p) for p in snap.people],
        events=[_event(e) for e in snap.events],
        connections=[_connection(c) for c in snap.connections],
    )


@router.get("/graph/nodes", response_model=list[NodeResponse])
async def get_graph_nodes(
    request: Request,
    flags: Optional[str] = Query(
        default=None,
        description="Render flags, e.g. '--size auto --label on'",
    ),
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> list[NodeResponse]:
    """Graph nodes with the radius and fill color they render with."""
    if flags is None:
        options = request.app.state.config.render.options()
    else:
        options = parse_option_flags(flags)
    data = build_graph_data(store.snapshot())
    nodes = []
    for node in data.nodes:
        drawing = draw_node(node, 1.0, options)
        nodes.append(NodeResponse(
            id=node.id,
            name=node.name,
            type=node.type,
            degree=int(node.degree or 0),
            size=drawing.radius,
            color=drawing.fill,
        ))
    return nodes


@router.get("/health", response_model=HealthResponse)
async def health(
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", **store.stats())


# =============================================================================
# People
# =============================================================================

@router.get("/people", response_model=list[PersonResponse])
async def list_people(
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> list[PersonResponse]:
    return [_person(p) for p in store.snapshot().people]


@router.get("/people/{person_id}", response_model=PersonResponse)
async def get_person(
    person_id: str,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> PersonResponse:
    return _person(store.get_person(person_id))


@router.post("/people", response_model=PersonResponse, status_code=201)
async def create_person(
    request: PersonCreateRequest,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> PersonResponse:
    """Add a person."""
    return _person(store.add_person(request.model_dump(exclude_unset=True)))


@router.put("/people/{person_id}", response_model=PersonResponse)
async def update_person(
    person_id: str,
    request: PersonUpdateRequest,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> PersonResponse:
    """Update only the fields present in the request body."""
    changes = request.model_dump(exclude_unset=True)
    return _person(store.update_person(person_id, changes))


@router.delete("/people/{person_id}", status_code=204)
async def delete_person(
    person_id: str,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> Response:
    """Delete a person and all of their connections."""
    store.delete_person(person_id)
    return Response(status_code=204)


# =============================================================================
# Events
# =============================================================================

@router.get("/events", response_model=list[EventResponse])
async def list_events(
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> list[EventResponse]:
    return [_event(e) for e in store.snapshot().events]


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> EventResponse:
    return _event(store.get_event(event_id))


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(
    request: EventCreateRequest,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> EventResponse:
    """Add an event."""
    return _event(store.add_event(request.model_dump(exclude_unset=True)))


@router.put("/events/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    request: EventUpdateRequest,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> EventResponse:
    changes = request.model_dump(exclude_unset=True)
    return _event(store.update_event(event_id, changes))


@router.delete("/events/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> Response:
    """Delete an event; people and connections that referenced it keep
    existing with ``eventId`` cleared."""
    store.delete_event(event_id)
    return Response(status_code=204)


# =============================================================================
# Connections
# =============================================================================

@router.get("/connections", response_model=list[ConnectionResponse])
async def list_connections(
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> list[ConnectionResponse]:
    return [_connection(c) for c in store.snapshot().connections]


@router.post("/connections", response_model=ConnectionResponse, status_code=201)
async def create_connection(
    request: ConnectionCreateRequest,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> ConnectionResponse:
    """Connect two people (409 if already connected in either direction)."""
    fields = request.model_dump(exclude_unset=True, exclude={"from_id", "to_id"})
    connection = store.add_connection(request.from_id, request.to_id, fields)
    return _connection(connection)


@router.delete("/connections/{connection_id}", status_code=204)
async def delete_connection(
    connection_id: str,
    store: InMemoryGraphStore = Depends(get_graph_store),
) -> Response:
    store.delete_connection(connection_id)
    return Response(status_code=204)
