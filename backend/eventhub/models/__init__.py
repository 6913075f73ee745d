"""
ORM models. Importing this package registers every table with `Base.metadata`.
"""

from eventhub.models.category import Category
from eventhub.models.event import Event, EventStatus
from eventhub.models.user import User, UserRole, UserStatus

__all__ = [
    "Category",
    "Event",
    "EventStatus",
    "User",
    "UserRole",
    "UserStatus",
]
