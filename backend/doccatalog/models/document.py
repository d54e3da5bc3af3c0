"""
Document Catalog — Document SQLAlchemy Model
=============================================

What:  ORM model for the `documents` table: one row per catalogued link.
Who:   DocumentService (create/update/read/list) and Alembic.

Column types are the generic SQLAlchemy ones (Uuid, DateTime, JSON) so the
same model runs on PostgreSQL in production and SQLite in tests.

Query patterns:
    - Listing:  WHERE status = 'published' AND category IN (...)
                → idx_documents_status_category
    - Detail:   WHERE id = :uuid → primary key
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from doccatalog.database import Base


class Document(Base):
    """
    A catalogued link to external technical documentation.

    Lifecycle:
        1. Created by POST /documents (id generated or client-supplied)
        2. Partially updated by PUT /documents/{id}; `updated_at` stamped
        3. Never deleted
    """

    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Empty string when the client supplied no URL
    url: Mapped[str] = mapped_column(String(2048), nullable=False, default="")

    # Lowercased category key: a category name or one of its subcategories
    category: Mapped[str] = mapped_column(String(100), nullable=False)

    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # draft | published | archived; any transition is allowed
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    __table_args__ = (
        Index("idx_documents_status_category", "status", "category"),
    )

    def __repr__(self) -> str:
        return (
            f"<Document(id={self.id}, category='{self.category}', "
            f"status='{self.status}')>"
        )
