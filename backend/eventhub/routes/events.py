"""
EventHub Backend — Event Route Handlers
========================================

What:  CRUD endpoints under /api/events.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.database import get_db_session
from eventhub.routes import RecordId
from eventhub.schemas.common import ErrorResponse
from eventhub.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
)
from eventhub.services import Services, get_services

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.get(
    "",
    response_model=EventListResponse,
    responses={400: {"description": "Invalid page, limit or id filter", "model": ErrorResponse}},
    summary="List events with filtering and pagination",
)
async def list_events(
    response: Response,
    status: Optional[str] = Query(default=None, description="Filter by status (draft, published, cancelled)"),
    category_id: Optional[str] = Query(default=None, description="Filter by category ID"),
    organizer_id: Optional[str] = Query(default=None, description="Filter by organizer (user) ID"),
    search: Optional[str] = Query(default=None, description="Case-insensitive match on title or description"),
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 10)"),
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> EventListResponse:
    result = await services.events.list(
        db,
        {
            "status": status,
            "category_id": category_id,
            "organizer_id": organizer_id,
            "search": search,
            "page": page,
            "limit": limit,
        },
    )
    response.headers["X-Total-Count"] = str(result.total)
    return EventListResponse(
        items=[EventResponse.model_validate(event) for event in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.post(
    "",
    response_model=EventResponse,
    status_code=201,
    responses={400: {"description": "Missing or invalid fields", "model": ErrorResponse}},
    summary="Create an event",
)
async def create_event(
    payload: EventCreate,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> EventResponse:
    event = await services.events.create(db, payload.model_dump(exclude_unset=True))
    return EventResponse.model_validate(event)


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    responses={404: {"description": "Event not found", "model": ErrorResponse}},
    summary="Get an event by ID",
)
async def get_event(
    event_id: RecordId,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> EventResponse:
    event = await services.events.get(db, event_id)
    return EventResponse.model_validate(event)


@router.put(
    "/{event_id}",
    response_model=EventResponse,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        404: {"description": "Event not found", "model": ErrorResponse},
    },
    summary="Update an event (only supplied fields change)",
)
async def update_event(
    event_id: RecordId,
    payload: EventUpdate,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> EventResponse:
    event = await services.events.update(db, event_id, payload.model_dump(exclude_unset=True))
    return EventResponse.model_validate(event)


@router.delete(
    "/{event_id}",
    status_code=204,
    responses={404: {"description": "Event not found", "model": ErrorResponse}},
    summary="Delete an event",
)
async def delete_event(
    event_id: RecordId,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> Response:
    await services.events.delete(db, event_id)
    return Response(status_code=204)
