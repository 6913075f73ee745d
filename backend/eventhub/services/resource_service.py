"""
EventHub Backend — Resource Service Base
=========================================

What:  The create / get / update / delete / list contracts shared by the
       user, category and event services.
How:   Subclasses declare their model, required fields, unique fields,
       dependent relations and list definition, and override `clean()` for
       resource-specific format checks. This class applies the common
       policies in a fixed order:

    create:  clean → required fields → uniqueness pre-check → insert
    update:  exists? → clean → required fields not blanked →
             uniqueness pre-check (changed values only, own id excluded) → update
    delete:  exists? → dependent relations empty? → delete

Uniqueness is check-then-act. Two concurrent creates can both pass the
pre-check; the unique constraint then rejects one of them and the
repository's ConflictError is re-raised with the same "already exists"
tag the pre-check would have produced.

Services hold no per-request state: each call receives the session and
builds a repository around it.
"""

import enum
import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.config import Settings, get_settings
from eventhub.exceptions import ConflictError, MissingFieldsError, NotFoundError
from eventhub.repositories.base import SqlAlchemyRepository
from eventhub.services.query_engine import (
    ListDefinition,
    ListQueryEngine,
    PageResult,
    parse_query_spec,
)

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _plain(value: Any) -> Any:
    """Store enum members by value and trim surrounding whitespace from strings."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, str):
        return value.strip()
    return value


class ResourceService:
    """
    Base class for per-resource services.

    Class attributes:
        resource:            singular name used in messages ("user")
        model:               ORM model class
        fields:              attributes a client may set
        required_fields:     must be present and non-blank on create; may not
                             be blanked on update
        unique_fields:       field → message for an "already exists" conflict
        dependent_relations: relation → (message, tag) blocking delete while
                             any related row exists
        list_definition:     filters / search / ordering for list()
    """

    resource: str = "record"
    model: Type[Any]
    fields: Tuple[str, ...] = ()
    required_fields: Tuple[str, ...] = ()
    unique_fields: Mapping[str, str] = {}
    dependent_relations: Mapping[str, Tuple[str, str]] = {}
    list_definition: ListDefinition

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.engine = ListQueryEngine(self.list_definition)

    def repository(self, db: AsyncSession) -> SqlAlchemyRepository:
        return SqlAlchemyRepository(db, self.model)

    # ── Hooks ─────────────────────────────────────────────────────────────

    async def clean(
        self,
        db: AsyncSession,
        fields: Dict[str, Any],
        existing: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """
        Resource-specific format checks on the supplied fields.

        Runs before any write; raises ValidationError. `existing` is the
        current record on update, None on create.
        """
        return fields

    def list_options(self, filters: Mapping[str, str]) -> Sequence[Any]:
        """Loader options (eager loads) for list(); none by default."""
        return ()

    # ── Contracts ─────────────────────────────────────────────────────────

    async def list(self, db: AsyncSession, params: Mapping[str, Any]) -> PageResult:
        spec = parse_query_spec(
            params,
            default_limit=self.settings.default_page_size,
            max_limit=self.settings.max_page_size,
        )
        return await self.engine.list(
            self.repository(db),
            spec,
            options=self.list_options(spec.filters),
        )

    async def get(self, db: AsyncSession, record_id: int, options: Sequence[Any] = ()) -> Any:
        record = await self.repository(db).get_by_id(record_id, options=options)
        if record is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)
        return record

    async def create(self, db: AsyncSession, fields: Mapping[str, Any]) -> Any:
        values = self._supplied(fields)
        missing = [name for name in self.required_fields if _is_blank(values.get(name))]
        if missing:
            raise MissingFieldsError(missing)

        values = await self.clean(db, values)
        # Optional fields sent as explicit null fall back to column defaults
        values = {name: value for name, value in values.items() if value is not None}

        repo = self.repository(db)
        await self._check_unique(repo, values)
        try:
            record = await repo.insert(values)
        except ConflictError:
            raise self._constraint_conflict(values)

        logger.info("Created %s %s", self.resource, record.id)
        return record

    async def update(self, db: AsyncSession, record_id: int, fields: Mapping[str, Any]) -> Any:
        repo = self.repository(db)
        existing = await repo.get_by_id(record_id)
        if existing is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)

        values = self._supplied(fields)
        blanked = [name for name in self.required_fields if name in values and _is_blank(values[name])]
        if blanked:
            raise MissingFieldsError(blanked)

        values = await self.clean(db, values, existing=existing)
        changed_unique = {
            name: value
            for name, value in values.items()
            if name in self.unique_fields and value != getattr(existing, name)
        }
        await self._check_unique(repo, changed_unique, exclude_id=record_id)

        try:
            record = await repo.update_by_id(record_id, values)
        except ConflictError:
            raise self._constraint_conflict(changed_unique)
        if record is None:
            # Removed by another request between the lookup and the write
            raise NotFoundError(resource=self.resource, resource_id=record_id)

        logger.info("Updated %s %s (%s)", self.resource, record_id, ", ".join(sorted(values)) or "no fields")
        return record

    async def delete(self, db: AsyncSession, record_id: int) -> None:
        repo = self.repository(db)
        if await repo.get_by_id(record_id) is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)

        for relation, (message, tag) in self.dependent_relations.items():
            related = await repo.count_related(record_id, relation)
            if related > 0:
                logger.warning(
                    "Refusing to delete %s %s: %d %s reference it",
                    self.resource, record_id, related, relation,
                )
                raise ConflictError(message=message, tag=tag, context={relation: related})

        try:
            removed = await repo.delete_by_id(record_id)
        except ConflictError:
            # A dependent row appeared after the count; the FK rejected the delete
            if not self.dependent_relations:
                raise
            message, tag = next(iter(self.dependent_relations.values()))
            raise ConflictError(message=message, tag=tag)
        if not removed:
            raise NotFoundError(resource=self.resource, resource_id=record_id)

        logger.info("Deleted %s %s", self.resource, record_id)

    # ── Internals ─────────────────────────────────────────────────────────

    def _supplied(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Keep only settable fields, normalizing enums and whitespace."""
        return {name: _plain(value) for name, value in fields.items() if name in self.fields}

    def _unique_conflict(self, name: str, value: Any) -> ConflictError:
        return ConflictError(
            message=self.unique_fields[name],
            tag=f"{name} already exists",
            context={"field": name},
        )

    async def _check_unique(
        self,
        repo: SqlAlchemyRepository,
        values: Mapping[str, Any],
        exclude_id: Optional[int] = None,
    ) -> None:
        for name in self.unique_fields:
            if name not in values:
                continue
            if await repo.find_one(name, values[name], exclude_id=exclude_id) is not None:
                logger.warning("%s %s already exists", self.resource.capitalize(), name)
                raise self._unique_conflict(name, values[name])

    def _constraint_conflict(self, values: Mapping[str, Any]) -> ConflictError:
        """Map a database constraint violation to the matching "already exists" conflict."""
        written = [name for name in self.unique_fields if name in values]
        if len(written) == 1:
            return self._unique_conflict(written[0], values[written[0]])
        return ConflictError(
            message=f"The {self.resource} conflicts with existing data",
            tag="constraint violation",
        )
