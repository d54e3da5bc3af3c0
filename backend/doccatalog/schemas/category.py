"""
Document Catalog — Category and Technology Schemas
===================================================
"""

import uuid
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from doccatalog.schemas.common import CamelModel
from doccatalog.validation import dedupe_subcategories, normalize_category_name


class CategoryUpsert(BaseModel):
    """
    Body of POST /categories.

    Example:
        {"name": "Databases", "subcategories": ["mongodb", "mysql"]}
        → stored under name "databases"
    """

    name: str = Field(min_length=1, max_length=100)
    subcategories: List[str]

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        name = normalize_category_name(v)
        if not name:
            raise ValueError("Name must not be blank")
        return name

    @field_validator("subcategories")
    @classmethod
    def clean_subcategories(cls, v: List[str]) -> List[str]:
        return dedupe_subcategories(v)


class CategoryResponse(CamelModel):
    name: str
    subcategories: List[str]


class CategoryUpsertResponse(CamelModel):
    """
    `added_subcategories` holds only what this call added: the full list on
    creation, the new items on a merge, and [] when nothing changed.
    """
    message: str
    category: CategoryResponse
    added_subcategories: List[str]


class CategoryKeysResponse(CamelModel):
    """Lowercased category names and subcategories accepted as filters."""
    categories: List[str]


class TechnologyCreate(BaseModel):
    """Body of POST /technologies."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    label: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return normalize_category_name(v)


class TechnologyResponse(CamelModel):
    id: uuid.UUID
    name: str
    label: str
