"""Event request/response schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from eventhub.models.event import EventStatus
from eventhub.schemas.common import PageMeta


class EventCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255, description="Event title (required)")
    description: Optional[str] = Field(default=None, description="Event description (required)")
    date: Optional[datetime] = Field(default=None, description="Start date/time, ISO 8601 (required)")
    location: Optional[str] = Field(default=None, max_length=255)
    status: Optional[EventStatus] = Field(default=None, description="draft, published or cancelled (default draft)")
    category_id: Optional[int] = Field(default=None, description="Category this event belongs to")
    organizer_id: Optional[int] = Field(default=None, description="User organizing the event")


class EventUpdate(BaseModel):
    """Partial update: only fields present in the body are changed."""

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    status: Optional[EventStatus] = None
    category_id: Optional[int] = None
    organizer_id: Optional[int] = None


class EventResponse(BaseModel):
    id: int
    title: str
    description: str
    date: datetime
    location: Optional[str] = None
    status: str
    category_id: Optional[int] = None
    organizer_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(PageMeta):
    items: List[EventResponse] = Field(description="Events on this page")
