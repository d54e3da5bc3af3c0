"""
Document Catalog — Shared Schema Pieces
========================================

What:  The camelCase response base class plus error and health models.
Why:   The public JSON uses camelCase keys (`createdAt`, `documentId`,
       `totalDocuments`) while Python code keeps snake_case attributes.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response base: snake_case attributes, camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    """
    Error body for every non-field error.

    Example:
        {"error": "Document not found", "requestId": "5f2c1a9e0b7d"}
    """
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class FieldError(BaseModel):
    field: str = Field(description="Name of the offending field")
    message: str = Field(description="What is wrong with it")


class ValidationErrorResponse(CamelModel):
    """
    Error body for request-body field validation.

    Example:
        {"errors": [{"field": "title", "message": "Field required"}], "requestId": "..."}
    """
    errors: List[FieldError]
    request_id: Optional[str] = None


class HealthResponse(CamelModel):
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the service started")
