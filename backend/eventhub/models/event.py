"""
EventHub Backend — Event SQLAlchemy Model
==========================================

What:  ORM model for the `events` table.

Table Design:
    - date: TIMESTAMP WITH TIME ZONE; default list order is date DESC
    - status: draft → published | cancelled
    - category_id → categories.id ON DELETE RESTRICT (referential guard)
    - organizer_id → users.id ON DELETE SET NULL (deleting a user keeps the event)
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventhub.database import Base
from eventhub.models.mixins import TimestampMixin


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"


class Event(TimestampMixin, Base):
    """A scheduled event, optionally filed under a category and run by an organizer."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EventStatus.DRAFT.value, server_default=EventStatus.DRAFT.value
    )

    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=True
    )
    organizer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    category: Mapped[Optional["Category"]] = relationship(  # noqa: F821
        "Category", back_populates="events", lazy="raise"
    )
    organizer: Mapped[Optional["User"]] = relationship(  # noqa: F821
        "User", back_populates="organized_events", lazy="raise"
    )

    __table_args__ = (
        Index("idx_events_date", "date"),
        Index("idx_events_category_id", "category_id"),
        Index("idx_events_organizer_id", "organizer_id"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title='{self.title}', status='{self.status}')>"
