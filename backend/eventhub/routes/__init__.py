# Routes package init
"""
EventHub Backend — API Routes Package
======================================

Route Inventory:
    - users.py:       GET/POST /api/users, GET/PUT/DELETE /api/users/{id}
    - events.py:      GET/POST /api/events, GET/PUT/DELETE /api/events/{id}
    - categories.py:  GET/POST /api/categories, GET/PUT/DELETE /api/categories/{id}
    - health.py:      GET /health

Routes handle HTTP concerns only (query bag, body, status codes, headers)
and delegate everything else to the services.
"""

from typing import Annotated

from fastapi import Path

from eventhub.services.query_engine import MAX_ID

# Path ids outside the INTEGER column range are rejected with 400
RecordId = Annotated[int, Path(ge=1, le=MAX_ID, description="Record ID")]
