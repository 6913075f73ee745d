"""Category request/response schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import inspect

from eventhub.models.category import Category
from eventhub.schemas.common import PageMeta
from eventhub.schemas.event import EventResponse


class CategoryCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100, description="Unique category name (required)")
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    """Partial update: only fields present in the body are changed."""

    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    events: Optional[List[EventResponse]] = Field(
        default=None,
        description="Events in this category, newest first; only with include_events=true",
    )

    @classmethod
    def from_record(cls, category: Category) -> "CategoryResponse":
        """
        Build a response from an ORM row.

        `Category.events` is lazy="raise", so it is read only when the query
        eager-loaded it.
        """
        events = None
        if "events" not in inspect(category).unloaded:
            events = [EventResponse.model_validate(e) for e in category.events]
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            created_at=category.created_at,
            updated_at=category.updated_at,
            events=events,
        )


class CategoryListResponse(PageMeta):
    items: List[CategoryResponse] = Field(description="Categories on this page")
