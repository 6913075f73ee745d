"""
EventHub Backend — User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table.
Who:   Used by UserService through the user repository, and by Alembic.

Table Design:
    - Integer autoincrement primary key
    - email: UNIQUE; the service pre-checks it, the constraint is the backstop
    - role / status: short strings restricted to the enum values below by the
      service layer
    - created_at DESC index: default list order ("newest users first")
"""

import enum
from typing import List

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventhub.database import Base
from eventhub.models.mixins import TimestampMixin


class UserRole(str, enum.Enum):
    USER = "user"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(TimestampMixin, Base):
    """
    A registered person. Organizers are referenced by events.

    Query Patterns:
        - List: WHERE status/role = ... AND (name ILIKE ... OR email ILIKE ...)
          ORDER BY created_at DESC, id DESC
        - Uniqueness: WHERE email = :email [AND id != :id]
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.USER.value, server_default=UserRole.USER.value
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserStatus.ACTIVE.value, server_default=UserStatus.ACTIVE.value
    )

    organized_events: Mapped[List["Event"]] = relationship(  # noqa: F821
        "Event", back_populates="organizer", lazy="raise", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_users_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
