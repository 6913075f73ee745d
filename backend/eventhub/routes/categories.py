"""
EventHub Backend — Category Route Handlers
===========================================

What:  CRUD endpoints under /api/categories.

`include_events=true` (or `includeEvents=true`) on the list and detail
endpoints embeds each category's events (newest first). Deleting a
category that events still reference returns 409.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.database import get_db_session
from eventhub.routes import RecordId
from eventhub.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdate,
)
from eventhub.schemas.common import ErrorResponse
from eventhub.services import Services, get_services

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get(
    "",
    response_model=CategoryListResponse,
    responses={400: {"description": "Invalid page or limit", "model": ErrorResponse}},
    summary="List categories with search and pagination",
)
async def list_categories(
    response: Response,
    search: Optional[str] = Query(default=None, description="Case-insensitive match on name or description"),
    include_events: Optional[str] = Query(default=None, description="'true' to embed each category's events"),
    include_events_camel: Optional[str] = Query(default=None, alias="includeEvents", include_in_schema=False),
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 10)"),
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> CategoryListResponse:
    result = await services.categories.list(
        db,
        {"search": search, "include_events": include_events or include_events_camel, "page": page, "limit": limit},
    )
    response.headers["X-Total-Count"] = str(result.total)
    return CategoryListResponse(
        items=[CategoryResponse.from_record(category) for category in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=201,
    responses={
        400: {"description": "Name is required", "model": ErrorResponse},
        409: {"description": "Category name already exists", "model": ErrorResponse},
    },
    summary="Create a category",
)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> CategoryResponse:
    category = await services.categories.create(db, payload.model_dump(exclude_unset=True))
    return CategoryResponse.from_record(category)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"description": "Category not found", "model": ErrorResponse}},
    summary="Get a category by ID",
)
async def get_category(
    category_id: RecordId,
    include_events: Optional[str] = Query(default=None, description="'true' to embed the category's events"),
    include_events_camel: Optional[str] = Query(default=None, alias="includeEvents", include_in_schema=False),
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> CategoryResponse:
    category = await services.categories.get_with_events(
        db, category_id, include_events=services.categories.wants_events(include_events or include_events_camel)
    )
    return CategoryResponse.from_record(category)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        404: {"description": "Category not found", "model": ErrorResponse},
        409: {"description": "Category name already exists", "model": ErrorResponse},
    },
    summary="Update a category (only supplied fields change)",
)
async def update_category(
    category_id: RecordId,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> CategoryResponse:
    category = await services.categories.update(db, category_id, payload.model_dump(exclude_unset=True))
    return CategoryResponse.from_record(category)


@router.delete(
    "/{category_id}",
    status_code=204,
    responses={
        404: {"description": "Category not found", "model": ErrorResponse},
        409: {"description": "Category still has events", "model": ErrorResponse},
    },
    summary="Delete a category",
)
async def delete_category(
    category_id: RecordId,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> Response:
    await services.categories.delete(db, category_id)
    return Response(status_code=204)
