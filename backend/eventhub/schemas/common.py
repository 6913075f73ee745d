"""
EventHub Backend — Shared Schemas
==================================

What:  Page metadata, error body, and health response shared by all routers.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PageMeta(BaseModel):
    """
    Pagination metadata returned with every list response.

    Serialized as `{ items, total, page, totalPages }`; `total` counts every
    record matching the filters across all pages.
    """

    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(description="Records matching the filters across all pages")
    page: int = Field(description="Requested page number (echoed)")
    total_pages: int = Field(
        alias="totalPages",
        description="ceil(total / limit); 0 when nothing matches",
    )


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "conflict",
            "tag": "name already exists",
            "message": "Category name already exists",
            "details": {"field": "name"},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error kind")
    tag: str = Field(description="Short machine-readable reason")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
