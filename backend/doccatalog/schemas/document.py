"""
Document Catalog — Document Request/Response Schemas
=====================================================

What:  API contract for the /documents endpoints.
How:   Request models validate and normalize input with the shared rules in
       doccatalog.validation; FastAPI turns their failures into 400
       responses listing each bad field. Response models serialize ORM rows
       with camelCase keys.

Create vs update:
    DocumentCreate  every field except `url` and `id` is required
    DocumentUpdate  every field optional; only supplied fields are merged
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from doccatalog.schemas.common import CamelModel
from doccatalog.validation import (
    normalize_category_name,
    normalize_tags,
    validate_status,
    validate_url,
)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class DocumentCreate(BaseModel):
    """
    Body of POST /documents.

    `id` (or `_id`) lets a client keep an identifier it already owns; it is
    generated otherwise.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[uuid.UUID] = Field(
        default=None,
        validation_alias=AliasChoices("id", "_id"),
        description="Optional client-supplied identifier (UUID)",
    )
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    url: Optional[str] = Field(default="", description="Link to the documentation")
    category: str = Field(min_length=1, max_length=100)
    tags: List[str] = Field(description="Ordered list of tags")
    status: str = Field(description="draft, published or archived")

    @field_validator("url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> str:
        return validate_url(v)

    @field_validator("category")
    @classmethod
    def lower_category(cls, v: str) -> str:
        return normalize_category_name(v)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v):
        return normalize_tags(v) if v is not None else None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        return validate_status(v)


class DocumentUpdate(BaseModel):
    """
    Body of PUT /documents/{id}: any subset of the document fields.

    `subcategories` is accepted for clients that send category payloads to
    this endpoint; when `category` is absent its first element becomes the
    document category (see DocumentService.update_document).
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    tags: Optional[List[str]] = None
    status: Optional[str] = None
    subcategories: Optional[List[str]] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        # null means "leave unchanged", not "clear"
        return validate_url(v) if v is not None else None

    @field_validator("category")
    @classmethod
    def lower_category(cls, v: Optional[str]) -> Optional[str]:
        return normalize_category_name(v) if v is not None else None

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v):
        return normalize_tags(v) if v is not None else None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return validate_status(v) if v is not None else None

    def changes(self) -> dict:
        """Supplied document fields, without nulls and without `subcategories`."""
        return self.model_dump(
            exclude_unset=True,
            exclude_none=True,
            exclude={"subcategories"},
        )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class DocumentResponse(CamelModel):
    """Full document as returned by GET /documents/{id} and in listings."""
    id: uuid.UUID
    title: str
    description: str
    url: str
    category: str
    tags: List[str]
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class DocumentListResponse(CamelModel):
    """
    Example:
        {"totalDocuments": 1, "results": [{...}]}
    """
    total_documents: int
    results: List[DocumentResponse]


class DocumentCreatedResponse(CamelModel):
    message: str = "Document created successfully"
    document_id: uuid.UUID


class DocumentUpdatedResponse(CamelModel):
    message: str = "Document updated successfully"
    document_id: uuid.UUID
    modified_count: int = Field(description="1 if any stored value changed, else 0")
