"""Pydantic models for HTTP API request/response.

Wire names are camelCase (``eventId``, ``relationshipType``); Python
attributes stay snake_case.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Request Models
# =============================================================================

class PersonCreateRequest(ApiModel):
    """Request to add a person.

    ``name`` is optional here so the store reports a missing name as a
    validation error (400) rather than a schema error.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    event_id: Optional[str] = Field(
        default=None,
        description="Event where this person was met"
    )


class PersonUpdateRequest(PersonCreateRequest):
    """Partial update; only fields present in the body are applied."""


class EventCreateRequest(ApiModel):
    """Request to add an event."""
    name: Optional[str] = None
    date: Optional[str] = Field(
        default=None,
        description="ISO date; defaults to now"
    )
    location: Optional[str] = None
    description: Optional[str] = None
    attendees: Optional[list[str]] = None


class EventUpdateRequest(EventCreateRequest):
    """Partial update; only fields present in the body are applied."""


class ConnectionCreateRequest(ApiModel):
    """Request to connect two people."""
    from_id: Optional[str] = Field(default=None, alias="from")
    to_id: Optional[str] = Field(default=None, alias="to")
    relationship_type: Optional[str] = Field(
        default=None,
        description="Free-form relationship tag (default 'knows')"
    )
    strength: Optional[Union[int, float, str]] = Field(
        default=None,
        description="1-5, clamped"
    )
    notes: Optional[str] = None
    event_id: Optional[str] = None


# =============================================================================
# Response Models
# =============================================================================

class PersonResponse(ApiModel):
    id: str
    type: str = "person"
    name: str
    email: Optional[str]
    phone: Optional[str]
    profession: Optional[str]
    company: Optional[str]
    location: Optional[str]
    notes: Optional[str]
    tags: list[str]
    event_id: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None


class EventResponse(ApiModel):
    id: str
    type: str = "event"
    name: str
    date: Optional[str]
    location: Optional[str]
    description: Optional[str]
    attendees: list[str]
    created_at: datetime
    updated_at: Optional[datetime] = None


class ConnectionResponse(ApiModel):
    id: str
    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")
    relationship_type: str
    strength: int
    notes: Optional[str]
    event_id: Optional[str]
    created_at: datetime


class GraphResponse(ApiModel):
    """Full graph snapshot."""
    people: list[PersonResponse]
    events: list[EventResponse]
    connections: list[ConnectionResponse]


class NodeResponse(ApiModel):
    """A node with the size and color the render policy assigns it."""
    id: str
    name: str
    type: str
    degree: int
    size: float
    color: str


class HealthResponse(ApiModel):
    status: str
    people: int
    events: int
    connections: int


class ErrorResponse(ApiModel):
    error: str
    message: str
