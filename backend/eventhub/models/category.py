"""
EventHub Backend — Category SQLAlchemy Model
=============================================

What:  ORM model for the `categories` table.

Table Design:
    - name: UNIQUE, listed in ascending order
    - events: one-to-many; the FK on events is ON DELETE RESTRICT, so the
      database refuses to drop a category that events still reference
"""

from typing import List, Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventhub.database import Base
from eventhub.models.mixins import TimestampMixin


class Category(TimestampMixin, Base):
    """Groups events (Conference, Workshop, Meetup, ...)."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Never loaded implicitly: callers opt in with selectinload()
    events: Mapped[List["Event"]] = relationship(  # noqa: F821
        "Event",
        back_populates="category",
        order_by="[Event.date.desc(), Event.id.desc()]",
        lazy="raise",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"
