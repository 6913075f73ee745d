"""
EventHub Backend — Event Service Tests
=======================================

What we test:
    ✅ Required fields, date parsing, status values
    ✅ category_id / organizer_id must reference existing rows
    ✅ Filters by status, category and organizer; search over title/description
    ✅ Ordering by date (newest first) and pagination metadata
    ✅ Deleting an organizer keeps their events (organizer_id cleared)
"""

from datetime import datetime, timezone

import pytest

from eventhub.exceptions import MissingFieldsError, NotFoundError, ValidationError
from eventhub.services.category_service import CategoryService
from eventhub.services.event_service import EventService, parse_event_date
from eventhub.services.user_service import UserService


def event_fields(title="Event", day=1, **extra):
    fields = {
        "title": title,
        "description": f"About {title}",
        "date": f"2025-03-{day:02d}T09:30:00+00:00",
    }
    fields.update(extra)
    return fields


class TestParseEventDate:
    """Tests for date normalization."""

    def test_iso_string(self):
        parsed = parse_event_date("2025-03-01T09:30:00+02:00")
        assert parsed.hour == 9
        assert parsed.utcoffset().total_seconds() == 7200

    def test_naive_taken_as_utc(self):
        parsed = parse_event_date(datetime(2025, 3, 1, 9, 30))
        assert parsed.tzinfo == timezone.utc

    def test_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_event_date("next tuesday")
        assert exc_info.value.message == "Invalid date format"


class TestEventServiceWrites:
    """Tests for create and update validation."""

    def setup_method(self):
        self.service = EventService()
        self.categories = CategoryService()
        self.users = UserService()

    @pytest.mark.asyncio
    async def test_create_defaults_to_draft(self, db_session):
        event = await self.service.create(db_session, event_fields("Kickoff"))
        assert event.status == "draft"
        assert event.category_id is None

    @pytest.mark.asyncio
    async def test_missing_fields(self, db_session):
        with pytest.raises(MissingFieldsError) as exc_info:
            await self.service.create(db_session, {"title": "Only a title"})
        assert exc_info.value.fields == ["description", "date"]

    @pytest.mark.asyncio
    async def test_invalid_status(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create(db_session, event_fields(status="postponed"))
        assert exc_info.value.tag == "invalid status"

    @pytest.mark.asyncio
    async def test_unknown_category(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create(db_session, event_fields(category_id=9))
        assert exc_info.value.message == "Category with ID '9' does not exist"
        assert exc_info.value.tag == "unknown category"

    @pytest.mark.asyncio
    async def test_unknown_organizer(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create(db_session, event_fields(organizer_id=3))
        assert exc_info.value.tag == "unknown organizer"

    @pytest.mark.asyncio
    async def test_partial_update(self, db_session):
        category = await self.categories.create(db_session, {"name": "Talks"})
        event = await self.service.create(db_session, event_fields("Original", category_id=category.id))

        updated = await self.service.update(db_session, event.id, {"status": "published"})

        assert updated.status == "published"
        assert updated.title == "Original"
        assert updated.category_id == category.id

    @pytest.mark.asyncio
    async def test_update_missing_event(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.update(db_session, 999, {"title": "Ghost"})
        assert exc_info.value.tag == "event not found"

    @pytest.mark.asyncio
    async def test_deleting_organizer_keeps_event(self, database):
        async with database.session() as session:
            organizer = await self.users.create(
                session, {"email": "org@example.com", "name": "Org", "role": "organizer"}
            )
            event = await self.service.create(session, event_fields(organizer_id=organizer.id))
            await session.commit()

        async with database.session() as session:
            await self.users.delete(session, organizer.id)
            await session.commit()

        async with database.session() as session:
            kept = await self.service.get(session, event.id)
            assert kept.organizer_id is None


class TestEventServiceList:
    """Tests for filtering, ordering and pagination."""

    def setup_method(self):
        self.service = EventService()
        self.categories = CategoryService()
        self.users = UserService()

    @pytest.mark.asyncio
    async def test_newest_date_first(self, db_session):
        for title, day in (("Middle", 10), ("First", 1), ("Last", 20)):
            await self.service.create(db_session, event_fields(title, day))

        result = await self.service.list(db_session, {})

        assert [e.title for e in result.items] == ["Last", "Middle", "First"]

    @pytest.mark.asyncio
    async def test_second_page_of_fifteen(self, db_session):
        for day in range(1, 16):
            await self.service.create(db_session, event_fields(f"Event {day}", day))

        result = await self.service.list(db_session, {"page": "2", "limit": "10"})

        assert len(result.items) == 5
        assert result.total == 15
        assert result.total_pages == 2
        assert result.items[0].title == "Event 5"

    @pytest.mark.asyncio
    async def test_filters(self, db_session):
        talks = await self.categories.create(db_session, {"name": "Talks"})
        organizer = await self.users.create(db_session, {"email": "o@example.com", "name": "O"})

        await self.service.create(db_session, event_fields("Python talk", 1, category_id=talks.id, status="published"))
        await self.service.create(db_session, event_fields("Rust talk", 2, category_id=talks.id, organizer_id=organizer.id))
        await self.service.create(db_session, event_fields("Picnic", 3, organizer_id=organizer.id))

        by_category = await self.service.list(db_session, {"category_id": str(talks.id)})
        assert by_category.total == 2

        by_organizer = await self.service.list(db_session, {"organizer_id": str(organizer.id)})
        assert sorted(e.title for e in by_organizer.items) == ["Picnic", "Rust talk"]

        published = await self.service.list(db_session, {"status": "published"})
        assert [e.title for e in published.items] == ["Python talk"]

        searched = await self.service.list(db_session, {"search": "TALK", "organizer_id": str(organizer.id)})
        assert [e.title for e in searched.items] == ["Rust talk"]

    @pytest.mark.asyncio
    async def test_non_integer_category_filter(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.list(db_session, {"category_id": "abc"})
        assert exc_info.value.tag == "invalid category_id"
