"""
EventHub Backend — User Service
================================

What:  User policies on top of ResourceService.

    required:   email, name
    unique:     email ("Email already exists")
    formats:    email shape, role ∈ {user, organizer, admin},
                status ∈ {active, inactive}
    list:       status, role (exact); search → name OR email (substring,
                case-insensitive); newest first
"""

import re
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.exceptions import ValidationError
from eventhub.models.user import User, UserRole, UserStatus
from eventhub.services.query_engine import ExactFilter, ListDefinition
from eventhub.services.resource_service import ResourceService

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ROLES = {role.value for role in UserRole}
STATUSES = {status.value for status in UserStatus}


def check_choice(field: str, value: Any, choices: set, existing: Optional[Any]) -> None:
    """Reject values outside `choices`; null is only allowed on create (column default)."""
    if value is None:
        if existing is not None:
            raise ValidationError(message=f"{field.capitalize()} cannot be null", field=field)
        return
    if value not in choices:
        raise ValidationError(
            message=f"Invalid {field} '{value}'. Must be one of: {', '.join(sorted(choices))}",
            field=field,
            tag=f"invalid {field}",
        )


class UserService(ResourceService):
    resource = "user"
    model = User
    fields = ("email", "name", "role", "status")
    required_fields = ("email", "name")
    unique_fields = {"email": "Email already exists"}
    list_definition = ListDefinition(
        resource="users",
        exact_filters={
            "status": ExactFilter(User.status),
            "role": ExactFilter(User.role),
        },
        search_fields=(User.name, User.email),
        order_by=(User.created_at.desc(), User.id.desc()),
    )

    async def clean(
        self,
        db: AsyncSession,
        fields: Dict[str, Any],
        existing: Optional[User] = None,
    ) -> Dict[str, Any]:
        email = fields.get("email")
        if email is not None and not EMAIL_PATTERN.match(email):
            raise ValidationError(message="Invalid email format", field="email", tag="invalid email")
        if "role" in fields:
            check_choice("role", fields["role"], ROLES, existing)
        if "status" in fields:
            check_choice("status", fields["status"], STATUSES, existing)
        return fields
