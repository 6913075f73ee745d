"""
EventHub Backend — API Endpoint Tests
======================================

What:  End-to-end HTTP tests through the FastAPI app.
How:   HTTPX AsyncClient over ASGITransport; the app uses the per-test SQLite
       database from conftest.py.

What we test:
    ✅ Status codes: 201 / 200 / 204 / 400 / 404 / 409
    ✅ Error body shape {error, tag, message, details, request_id}
    ✅ List body {items, total, page, totalPages} and X-Total-Count header
    ✅ Out-of-range page, limit and ids never reach the database
    ✅ 500 responses carry a generic body with no internals
    ✅ X-Request-ID propagation
    ✅ Health check
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from eventhub.main import create_app
from eventhub.repositories.base import SqlAlchemyRepository


async def create_user(client, email="ada@example.com", name="Ada", **extra):
    response = await client.post("/api/users", json={"email": email, "name": name, **extra})
    assert response.status_code == 201, response.text
    return response.json()


async def create_category(client, name="Conference", **extra):
    response = await client.post("/api/categories", json={"name": name, **extra})
    assert response.status_code == 201, response.text
    return response.json()


async def create_event(client, title="Launch", date="2025-05-01T10:00:00Z", **extra):
    response = await client.post(
        "/api/events",
        json={"title": title, "description": f"{title} details", "date": date, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestHealthEndpoint:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"


class TestUserEndpoints:
    """Tests for /api/users."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client):
        created = await create_user(test_client)
        assert created["role"] == "user"
        assert created["status"] == "active"

        response = await test_client.get(f"/api/users/{created['id']}")
        assert response.status_code == 200
        assert response.json()["email"] == "ada@example.com"

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client):
        response = await test_client.post("/api/users", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["tag"] == "missing required fields"
        assert body["details"]["fields"] == ["email", "name"]
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self, test_client):
        response = await test_client.post(
            "/api/users", json={"email": "x@example.com", "name": "X", "role": "superuser"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_client):
        await create_user(test_client, email="same@example.com")

        response = await test_client.post("/api/users", json={"email": "same@example.com", "name": "Other"})

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "conflict"
        assert body["tag"] == "email already exists"
        assert body["message"] == "Email already exists"

    @pytest.mark.asyncio
    async def test_not_found(self, test_client):
        response = await test_client.get("/api/users/999")

        assert response.status_code == 404
        assert response.json()["tag"] == "user not found"

    @pytest.mark.asyncio
    async def test_non_integer_id(self, test_client):
        response = await test_client.get("/api/users/abc")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client):
        created = await create_user(test_client, role="organizer")

        response = await test_client.put(f"/api/users/{created['id']}", json={"name": "Ada L."})

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ada L."
        assert data["role"] == "organizer"
        assert data["email"] == "ada@example.com"

    @pytest.mark.asyncio
    async def test_update_missing(self, test_client):
        response = await test_client.put("/api/users/999", json={"name": "Ghost"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, test_client):
        created = await create_user(test_client)

        response = await test_client.delete(f"/api/users/{created['id']}")
        assert response.status_code == 204
        assert response.content == b""

        response = await test_client.get(f"/api/users/{created['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_pagination(self, test_client):
        for i in range(15):
            await create_user(test_client, email=f"u{i}@example.com", name=f"User {i}")

        response = await test_client.get("/api/users", params={"page": 2, "limit": 10})

        assert response.status_code == 200
        body = response.json()
        assert len(body["items"]) == 5
        assert body["total"] == 15
        assert body["page"] == 2
        assert body["totalPages"] == 2
        assert response.headers["X-Total-Count"] == "15"

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/api/users")
        assert response.json() == {"items": [], "total": 0, "page": 1, "totalPages": 0}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params,tag", [({"page": "abc"}, "invalid page"), ({"limit": "0"}, "invalid limit")])
    async def test_list_bad_pagination(self, test_client, params, tag):
        response = await test_client.get("/api/users", params=params)
        assert response.status_code == 400
        assert response.json()["tag"] == tag


class TestCategoryEndpoints:
    """Tests for /api/categories."""

    @pytest.mark.asyncio
    async def test_duplicate_name(self, test_client):
        await create_category(test_client, name="Workshop")
        response = await test_client.post("/api/categories", json={"name": "Workshop"})
        assert response.status_code == 409
        assert response.json()["message"] == "Category name already exists"

    @pytest.mark.asyncio
    async def test_delete_with_events_conflicts(self, test_client):
        category = await create_category(test_client)
        event = await create_event(test_client, category_id=category["id"])

        response = await test_client.delete(f"/api/categories/{category['id']}")
        assert response.status_code == 409
        assert response.json()["tag"] == "category has events"

        assert (await test_client.delete(f"/api/events/{event['id']}")).status_code == 204
        assert (await test_client.delete(f"/api/categories/{category['id']}")).status_code == 204

    @pytest.mark.asyncio
    async def test_include_events(self, test_client):
        category = await create_category(test_client)
        await create_event(test_client, title="Older", date="2025-01-01T09:00:00Z", category_id=category["id"])
        await create_event(test_client, title="Newer", date="2025-02-01T09:00:00Z", category_id=category["id"])

        plain = await test_client.get(f"/api/categories/{category['id']}")
        assert plain.json()["events"] is None

        detailed = await test_client.get(f"/api/categories/{category['id']}", params={"include_events": "true"})
        assert [e["title"] for e in detailed.json()["events"]] == ["Newer", "Older"]

        listed = await test_client.get("/api/categories", params={"include_events": "true"})
        assert [e["title"] for e in listed.json()["items"][0]["events"]] == ["Newer", "Older"]


class TestEventEndpoints:
    """Tests for /api/events."""

    @pytest.mark.asyncio
    async def test_create_defaults(self, test_client):
        event = await create_event(test_client)
        assert event["status"] == "draft"

    @pytest.mark.asyncio
    async def test_unknown_category(self, test_client):
        response = await test_client.post(
            "/api/events",
            json={"title": "T", "description": "D", "date": "2025-05-01T10:00:00Z", "category_id": 9},
        )
        assert response.status_code == 400
        assert response.json()["tag"] == "unknown category"

    @pytest.mark.asyncio
    async def test_filter_by_category(self, test_client):
        talks = await create_category(test_client, name="Talks")
        await create_event(test_client, title="A", category_id=talks["id"])
        await create_event(test_client, title="B")

        response = await test_client.get("/api/events", params={"category_id": talks["id"]})

        assert response.json()["total"] == 1
        assert response.json()["items"][0]["title"] == "A"

    @pytest.mark.asyncio
    async def test_filter_non_integer_id(self, test_client):
        response = await test_client.get("/api/events", params={"organizer_id": "abc"})
        assert response.status_code == 400
        assert response.json()["tag"] == "invalid organizer_id"


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated(self, test_client):
        response = await test_client.get("/api/users")
        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_client_id_echoed(self, test_client):
        response = await test_client.get("/api/users/999", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"


class TestOutOfRangeIntegers:
    """Integers that parse but exceed the database range are handled before any query."""

    @pytest.mark.asyncio
    async def test_page_far_past_end(self, test_client):
        await create_user(test_client)

        response = await test_client.get("/api/users", params={"page": str(10**20)})

        assert response.status_code == 200
        body = response.json()
        assert body["items"] == []
        assert body["total"] == 1
        assert body["totalPages"] == 1
        assert response.headers["X-Total-Count"] == "1"

    @pytest.mark.asyncio
    async def test_limit_too_large(self, test_client):
        response = await test_client.get("/api/users", params={"limit": str(10**20)})
        assert response.status_code == 400
        assert response.json()["tag"] == "invalid limit"

    @pytest.mark.asyncio
    async def test_limit_above_page_size_maximum(self, test_client):
        response = await test_client.get("/api/events", params={"limit": "101"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("param", ["category_id", "organizer_id"])
    async def test_id_filter_too_large(self, test_client, param):
        response = await test_client.get("/api/events", params={param: str(10**20)})
        assert response.status_code == 400
        assert response.json()["tag"] == f"invalid {param}"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/users", "/api/events", "/api/categories"])
    @pytest.mark.parametrize("record_id", [str(10**20), "0", "-4"])
    async def test_path_id_out_of_range(self, test_client, path, record_id):
        response = await test_client.get(f"{path}/{record_id}")
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_event_reference_too_large(self, test_client):
        response = await test_client.post(
            "/api/events",
            json={"title": "T", "description": "D", "date": "2025-05-01T10:00:00Z", "organizer_id": 10**20},
        )
        assert response.status_code == 400
        assert response.json()["tag"] == "invalid organizer_id"

    @pytest.mark.asyncio
    async def test_non_decimal_page(self, test_client):
        response = await test_client.get("/api/users", params={"page": "1_000"})
        assert response.status_code == 400
        assert response.json()["tag"] == "invalid page"


class TestIncludeEventsCamelCase:

    @pytest.mark.asyncio
    async def test_include_events_camel_case(self, test_client):
        """includeEvents=true behaves like include_events=true."""
        category = await create_category(test_client)
        await create_event(test_client, title="Only", category_id=category["id"])

        detailed = await test_client.get(f"/api/categories/{category['id']}", params={"includeEvents": "true"})
        assert [e["title"] for e in detailed.json()["events"]] == ["Only"]

        listed = await test_client.get("/api/categories", params={"includeEvents": "true"})
        assert [e["title"] for e in listed.json()["items"][0]["events"]] == ["Only"]


class TestServerErrors:
    """Failures other than validation / not found / conflict become generic 500s."""

    @pytest.mark.asyncio
    async def test_persistence_error(self, test_client, monkeypatch):
        """A database failure is reported without driver details."""

        async def failing_count(self, predicate=None):
            with self._translate_errors("count"):
                raise SQLAlchemyError("connection to 10.0.0.5 lost")

        monkeypatch.setattr(SqlAlchemyRepository, "count", failing_count)

        response = await test_client.get("/api/users")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "persistence_error"
        assert body["details"] == {}
        assert body["message"] == "A database error occurred. Please try again later."
        assert "10.0.0.5" not in response.text

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, settings, database, monkeypatch):
        """Any other exception yields the generic internal error body."""

        async def broken_count(self, predicate=None):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(SqlAlchemyRepository, "count", broken_count)

        app = create_app(settings=settings, database=database)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/users")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["details"] == {}
        assert "secret internals" not in response.text
