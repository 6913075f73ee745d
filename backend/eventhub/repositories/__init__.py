"""Persistence layer: async repositories over the ORM models."""

from eventhub.repositories.base import SqlAlchemyRepository

__all__ = ["SqlAlchemyRepository"]
