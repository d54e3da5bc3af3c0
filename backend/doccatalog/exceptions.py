"""
Document Catalog — Custom Exception Hierarchy
==============================================

What:  Application errors raised by the validation component and services.
How:   Each exception carries a message and a context dict. Global handlers
       registered in main.py turn them into JSON bodies with the matching
       HTTP status code.

Exception Hierarchy:
    CatalogError (base)
    ├── ValidationError   → 400 Bad Request
    ├── NotFoundError     → 404 Not Found
    ├── ConflictError     → 409 Conflict
    └── StorageError      → 500 Internal Server Error

Response bodies:
    ValidationError (single):  {"error": "...", <context keys>, "requestId": "..."}
    ValidationError (fields):  {"errors": [{"field": ..., "message": ...}], "requestId": "..."}
    Others:                    {"error": "...", "requestId": "..."}
"""

from typing import Any, Dict, List, Optional


class CatalogError(Exception):
    """
    Base exception for all catalog errors.

    Attributes:
        message:  Client-facing description
        context:  Extra data; public for ValidationError, log-only otherwise
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Client input is missing, malformed, or refers to an unknown category.

    Either a single message (optionally naming `field`) or a list of
    per-field errors in `errors`.

    Example:
        ValidationError(
            "Invalid category. Must be one of: mongodb, mysql",
            context={"validCategories": ["mongodb", "mysql"]},
        )
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or []


class NotFoundError(CatalogError):
    """A document (or other resource) with the given identifier does not exist."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(CatalogError):
    """
    A uniqueness rule would be broken.

    When: creating a technology whose name or label is taken, or creating a
    document with a client-supplied id that already exists.
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(CatalogError):
    """
    A database query or connection failed.

    The client always gets a generic message; the driver error type goes
    into `context` and is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
