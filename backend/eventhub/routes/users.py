"""
EventHub Backend — User Route Handlers
=======================================

What:  CRUD endpoints under /api/users.
How:   Routes stay thin: collect the query-parameter bag or validated body,
       call UserService, serialize the result. Errors raised by the service
       are rendered by the global exception handlers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.database import get_db_session
from eventhub.routes import RecordId
from eventhub.schemas.common import ErrorResponse
from eventhub.schemas.user import (
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from eventhub.services import Services, get_services

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "",
    response_model=UserListResponse,
    responses={400: {"description": "Invalid page or limit", "model": ErrorResponse}},
    summary="List users with filtering and pagination",
)
async def list_users(
    response: Response,
    status: Optional[str] = Query(default=None, description="Filter by status (active, inactive)"),
    role: Optional[str] = Query(default=None, description="Filter by role (user, organizer, admin)"),
    search: Optional[str] = Query(default=None, description="Case-insensitive match on name or email"),
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 10)"),
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> UserListResponse:
    result = await services.users.list(
        db,
        {"status": status, "role": role, "search": search, "page": page, "limit": limit},
    )
    response.headers["X-Total-Count"] = str(result.total)
    return UserListResponse(
        items=[UserResponse.model_validate(user) for user in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.post(
    "",
    response_model=UserResponse,
    status_code=201,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Create a user",
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> UserResponse:
    user = await services.users.create(db, payload.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user by ID",
)
async def get_user(
    user_id: RecordId,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> UserResponse:
    user = await services.users.get(db, user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Update a user (only supplied fields change)",
)
async def update_user(
    user_id: RecordId,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> UserResponse:
    user = await services.users.update(db, user_id, payload.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=204,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Delete a user",
)
async def delete_user(
    user_id: RecordId,
    db: AsyncSession = Depends(get_db_session),
    services: Services = Depends(get_services),
) -> Response:
    await services.users.delete(db, user_id)
    return Response(status_code=204)
