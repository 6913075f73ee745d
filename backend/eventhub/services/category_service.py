"""
EventHub Backend — Category Service
====================================

What:  Category policies on top of ResourceService.

    required:   name
    unique:     name ("Category name already exists")
    delete:     refused while any event references the category
    list:       search → name OR description; include_events=true eager-loads
                each category's events (newest first); ordered by name
"""

from typing import Any, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventhub.models.category import Category
from eventhub.services.query_engine import ListDefinition
from eventhub.services.resource_service import ResourceService

TRUTHY = {"true", "1", "yes"}


class CategoryService(ResourceService):
    resource = "category"
    model = Category
    fields = ("name", "description")
    required_fields = ("name",)
    unique_fields = {"name": "Category name already exists"}
    dependent_relations = {
        "events": ("Cannot delete category with associated events", "category has events"),
    }
    list_definition = ListDefinition(
        resource="categories",
        exact_filters={},
        search_fields=(Category.name, Category.description),
        order_by=(Category.name.asc(), Category.id.asc()),
    )

    @staticmethod
    def wants_events(value: Any) -> bool:
        return value is not None and str(value).strip().lower() in TRUTHY

    def list_options(self, filters: Mapping[str, str]) -> Sequence[Any]:
        if self.wants_events(filters.get("include_events")):
            return (selectinload(Category.events),)
        return ()

    async def get_with_events(self, db: AsyncSession, category_id: int, include_events: bool) -> Category:
        options = (selectinload(Category.events),) if include_events else ()
        return await self.get(db, category_id, options=options)
