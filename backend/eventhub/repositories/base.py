"""
EventHub Backend — Generic SQLAlchemy Repository
=================================================

What:  The persistence operations every resource needs, implemented once
       over an async session and an ORM model class.
How:   Each method builds a SQLAlchemy 2.0 statement and executes it on the
       caller's session. Writes are flushed (not committed) so the
       per-request session dependency decides commit vs. rollback.
Who:   Used by ListQueryEngine (count / find_page) and the resource services.

Error translation:
    IntegrityError      → ConflictError    (unique / FK constraint backstop)
    other SQLAlchemyError → PersistenceError (connection loss, timeouts, ...)
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import RelationshipProperty

from eventhub.database import Base
from eventhub.exceptions import ConflictError, PersistenceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class SqlAlchemyRepository(Generic[ModelT]):
    """
    Async CRUD repository for one model class.

    Expects a session provided by the caller (FastAPI dependency or test
    fixture); never commits on its own.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelT]):
        self.session = session
        self.model = model

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            logger.warning(
                "Constraint violation during %s on %s: %s",
                operation, self.model.__tablename__, e.orig,
            )
            raise ConflictError(
                message="The change conflicts with existing data",
                tag="constraint violation",
                context={"operation": operation, "table": self.model.__tablename__},
            ) from e
        except SQLAlchemyError as e:
            logger.error(
                "Database error during %s on %s: %s",
                operation, self.model.__tablename__, str(e), exc_info=True,
            )
            raise PersistenceError(
                context={
                    "operation": operation,
                    "table": self.model.__tablename__,
                    "original_error": type(e).__name__,
                },
            ) from e

    # ── Reads ─────────────────────────────────────────────────────────────

    async def count(self, predicate: Optional[ColumnElement[bool]] = None) -> int:
        """SELECT count(*) over the filtered set, ignoring any page window."""
        stmt = select(func.count()).select_from(self.model)
        if predicate is not None:
            stmt = stmt.where(predicate)
        with self._translate_errors("count"):
            result = await self.session.execute(stmt)
            return result.scalar_one()

    async def find_page(
        self,
        predicate: Optional[ColumnElement[bool]],
        order_by: Sequence[Any],
        offset: int,
        limit: int,
        options: Sequence[Any] = (),
    ) -> List[ModelT]:
        """Ordered slice of the filtered set: ORDER BY ... OFFSET :offset LIMIT :limit."""
        stmt = select(self.model)
        if predicate is not None:
            stmt = stmt.where(predicate)
        if options:
            stmt = stmt.options(*options)
        stmt = stmt.order_by(*order_by).offset(max(0, offset)).limit(limit)
        with self._translate_errors("find_page"):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def get_by_id(self, record_id: int, options: Sequence[Any] = ()) -> Optional[ModelT]:
        stmt = select(self.model).where(self.model.id == record_id)
        if options:
            stmt = stmt.options(*options)
        with self._translate_errors("get_by_id"):
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

    async def find_one(
        self,
        field: str,
        value: Any,
        exclude_id: Optional[int] = None,
    ) -> Optional[ModelT]:
        """First record whose `field` equals `value`, optionally skipping one id."""
        column = getattr(self.model, field)
        stmt = select(self.model).where(column == value)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        with self._translate_errors("find_one"):
            result = await self.session.execute(stmt.limit(1))
            return result.scalars().first()

    async def count_related(self, record_id: int, relation_name: str) -> int:
        """
        Count rows of a one-to-many relation that point at `record_id`.

        Example: count_related(category_id, "events") counts events whose
        category_id equals the given id.
        """
        relation = getattr(self.model, relation_name).property
        if not isinstance(relation, RelationshipProperty):
            raise ValueError(f"{self.model.__name__}.{relation_name} is not a relationship")
        target = relation.mapper.class_
        remote_columns = [remote for _, remote in relation.local_remote_pairs]

        stmt = select(func.count()).select_from(target)
        for column in remote_columns:
            stmt = stmt.where(column == record_id)
        with self._translate_errors("count_related"):
            result = await self.session.execute(stmt)
            return result.scalar_one()

    # ── Writes ────────────────────────────────────────────────────────────

    async def insert(self, fields: Dict[str, Any]) -> ModelT:
        record = self.model(**fields)
        with self._translate_errors("insert"):
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record)
        return record

    async def update_by_id(self, record_id: int, fields: Dict[str, Any]) -> Optional[ModelT]:
        """Apply `fields` to the record; omitted attributes keep their values."""
        with self._translate_errors("update_by_id"):
            record = await self.session.get(self.model, record_id)
            if record is None:
                return None
            for name, value in fields.items():
                setattr(record, name, value)
            await self.session.flush()
            await self.session.refresh(record)
        return record

    async def delete_by_id(self, record_id: int) -> bool:
        """Hard delete. Returns True if a row was removed."""
        stmt = delete(self.model).where(self.model.id == record_id)
        with self._translate_errors("delete_by_id"):
            result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
