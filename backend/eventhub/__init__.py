"""
EventHub Backend — Application Package Initializer
==================================================

What: Marks the `eventhub` directory as a Python package.
Who:  Imported by uvicorn (`eventhub.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (per-resource policies)  │  ← required fields, uniqueness, guards
    ├─────────────────────────────────────┤
    │   ListQueryEngine (list contract)   │  ← filters, pagination, counts
    ├─────────────────────────────────────┤
    │     Repositories (persistence)      │  ← async SQLAlchemy operations
    ├─────────────────────────────────────┤
    │      Database (engine lifecycle)    │  ← created at startup, disposed at shutdown
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
