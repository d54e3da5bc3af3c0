"""
Document Catalog — Category and Technology Models
==================================================

Two taxonomies live side by side:

    categories    hierarchical: a lowercased name owning an ordered list of
                  subcategories, grown by union-merge on upsert
    technologies  flat: a unique (name, label) tag
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from doccatalog.database import Base


class Category(Base):
    """
    A category and its subcategories.

    `subcategories` is stored exactly as supplied (case-sensitive); the
    lowercased flattening used for filtering happens in CategoryService.
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)

    subcategories: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Category(name='{self.name}', subcategories={self.subcategories})>"


class Technology(Base):
    """A flat technology tag; both `name` and `label` are unique."""

    __tablename__ = "technologies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    label: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Technology(name='{self.name}', label='{self.label}')>"
