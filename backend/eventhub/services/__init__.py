"""
EventHub Backend — Services Layer
==================================

What:  Business rules between routes (HTTP) and repositories (persistence).
How:   `build_services()` creates one instance of each resource service for
       an application; `create_app()` stores the container on
       `app.state.services` and routes reach it through `get_services`.

Service Inventory:
    - ListQueryEngine: paginated list-and-filter contract (query_engine.py)
    - ResourceService: shared create/get/update/delete policies
    - UserService, CategoryService, EventService: per-resource rules
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from eventhub.config import Settings, get_settings
from eventhub.services.category_service import CategoryService
from eventhub.services.event_service import EventService
from eventhub.services.user_service import UserService


@dataclass(frozen=True)
class Services:
    users: UserService
    categories: CategoryService
    events: EventService


def build_services(settings: Optional[Settings] = None) -> Services:
    settings = settings or get_settings()
    return Services(
        users=UserService(settings),
        categories=CategoryService(settings),
        events=EventService(settings),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's service container."""
    return request.app.state.services
