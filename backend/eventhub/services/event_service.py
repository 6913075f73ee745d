"""
EventHub Backend — Event Service
=================================

What:  Event policies on top of ResourceService.

    required:   title, description, date
    formats:    date must be an ISO 8601 date/time; status ∈ {draft,
                published, cancelled}; category_id / organizer_id must
                reference existing rows
    list:       status, category_id, organizer_id (exact); search → title OR
                description; newest date first
"""

from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.exceptions import ValidationError
from eventhub.models.category import Category
from eventhub.models.event import Event, EventStatus
from eventhub.models.user import User
from eventhub.repositories.base import SqlAlchemyRepository
from eventhub.services.query_engine import ExactFilter, ListDefinition, parse_id_param
from eventhub.services.resource_service import ResourceService
from eventhub.services.user_service import check_choice

STATUSES = {status.value for status in EventStatus}

# Foreign key field → (model, resource name)
REFERENCES = {
    "category_id": (Category, "category"),
    "organizer_id": (User, "organizer"),
}


def parse_event_date(value: Any) -> datetime:
    """Accept a datetime or an ISO 8601 string; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            raise ValidationError(message="Invalid date format", field="date", tag="invalid date")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class EventService(ResourceService):
    resource = "event"
    model = Event
    fields = ("title", "description", "date", "location", "status", "category_id", "organizer_id")
    required_fields = ("title", "description", "date")
    list_definition = ListDefinition(
        resource="events",
        exact_filters={
            "status": ExactFilter(Event.status),
            "category_id": ExactFilter(Event.category_id, partial(parse_id_param, "category_id")),
            "organizer_id": ExactFilter(Event.organizer_id, partial(parse_id_param, "organizer_id")),
        },
        search_fields=(Event.title, Event.description),
        order_by=(Event.date.desc(), Event.id.desc()),
    )

    async def clean(
        self,
        db: AsyncSession,
        fields: Dict[str, Any],
        existing: Optional[Event] = None,
    ) -> Dict[str, Any]:
        if fields.get("date") is not None:
            fields["date"] = parse_event_date(fields["date"])
        if "status" in fields:
            check_choice("status", fields["status"], STATUSES, existing)

        for field, (model, name) in REFERENCES.items():
            value = fields.get(field)
            if value is None:
                continue
            record_id = parse_id_param(field, value)
            if await SqlAlchemyRepository(db, model).get_by_id(record_id) is None:
                raise ValidationError(
                    message=f"{name.capitalize()} with ID '{record_id}' does not exist",
                    field=field,
                    tag=f"unknown {name}",
                )
            fields[field] = record_id
        return fields
