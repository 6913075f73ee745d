"""
User request/response schemas.

Create/update bodies declare every field optional: UserService reports
missing required fields itself so the error names all of them at once.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from eventhub.models.user import UserRole, UserStatus
from eventhub.schemas.common import PageMeta


class UserCreate(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255, description="Unique email address (required)")
    name: Optional[str] = Field(default=None, max_length=255, description="Display name (required)")
    role: Optional[UserRole] = Field(default=None, description="user, organizer or admin (default user)")
    status: Optional[UserStatus] = Field(default=None, description="active or inactive (default active)")


class UserUpdate(BaseModel):
    """Partial update: only fields present in the body are changed."""

    email: Optional[str] = Field(default=None, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    role: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(PageMeta):
    items: List[UserResponse] = Field(description="Users on this page")
