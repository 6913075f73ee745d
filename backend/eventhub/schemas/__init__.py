"""
Pydantic request/response schemas.

Input structs (`*Create`, `*Update`) validate types at the HTTP boundary; the
services own required-field and business-rule checks. Response models
control exactly which fields leave the API.
"""
