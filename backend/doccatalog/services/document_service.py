"""
Document Catalog — Document Service
====================================

What:  Create, partially update, fetch and list catalogued documents.
Who:   Document route handlers.
How:   Each method receives the request's AsyncSession, runs one or two
       queries, and translates database failures into StorageError. The
       session dependency commits or rolls back afterwards.

Flow (POST /documents):
    ┌──────────┐    ┌─────────────────┐    ┌──────────────┐    ┌─────────┐
    │  Body    │───▶│ Schema checks   │───▶│ Category     │───▶│ INSERT  │
    │  (Route) │    │ (DocumentCreate)│    │ known?       │    │ + flush │
    └──────────┘    └─────────────────┘    └──────────────┘    └─────────┘

Update contract (partial merge):
    Only supplied fields change; `id` and `created_at` never do;
    `updated_at` is stamped when something actually changed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from doccatalog.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from doccatalog.models.document import Document
from doccatalog.schemas.document import (
    DocumentCreate,
    DocumentCreatedResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    DocumentUpdatedResponse,
)
from doccatalog.services.category_service import category_service
from doccatalog.validation import PUBLISHED, parse_document_id

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Business logic for documents.

    Error Handling Strategy:
        ValidationError / NotFoundError / ConflictError propagate unchanged.
        SQLAlchemyError is wrapped in StorageError (details logged only).
    """

    async def create_document(
        self,
        db: AsyncSession,
        payload: DocumentCreate,
    ) -> DocumentCreatedResponse:
        """
        Insert a new document.

        Raises:
            ValidationError: category is not a known key (→ 400)
            ConflictError:   client-supplied id already exists (→ 409)
            StorageError:    database failure (→ 500)
        """
        try:
            category = await category_service.ensure_known_category(db, payload.category)

            if payload.id is not None and await db.get(Document, payload.id) is not None:
                raise ConflictError(
                    message="A document with this ID already exists",
                    context={"document_id": str(payload.id)},
                )

            document = Document(
                id=payload.id or uuid.uuid4(),
                title=payload.title,
                description=payload.description,
                url=payload.url or "",
                category=category,
                tags=list(payload.tags),
                status=payload.status,
                created_at=datetime.now(timezone.utc),
            )
            db.add(document)
            await db.flush()
            logger.info(
                "Document %s created (category=%s, status=%s)",
                document.id,
                document.category,
                document.status,
            )
            return DocumentCreatedResponse(document_id=document.id)

        except IntegrityError as e:
            raise ConflictError(
                message="A document with this ID already exists",
                context={"document_id": str(payload.id)},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating document: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not save the document. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def update_document(
        self,
        db: AsyncSession,
        document_id: str,
        payload: DocumentUpdate,
    ) -> DocumentUpdatedResponse:
        """
        Merge the supplied fields into an existing document.

        `subcategories` in the body:
            When present without `category`, its first element becomes the
            document's category. This mirrors how some clients send category
            payloads here; it is logged so the behavior stays visible.

        Raises:
            ValidationError: malformed id, empty body, unknown category (→ 400)
            NotFoundError:   no document with this id (→ 404)
            StorageError:    database failure (→ 500)
        """
        doc_uuid = parse_document_id(document_id)

        changes = payload.changes()
        if payload.category is None and payload.subcategories:
            logger.warning(
                "Document %s: deriving category from subcategories[0]=%r",
                doc_uuid,
                payload.subcategories[0],
            )
            changes["category"] = payload.subcategories[0]

        if not changes:
            raise ValidationError(
                message="Request body must contain at least one document field to update",
            )

        try:
            document = await db.get(Document, doc_uuid)
            if document is None:
                raise NotFoundError(resource="document", resource_id=str(doc_uuid))

            if "category" in changes:
                changes["category"] = await category_service.ensure_known_category(
                    db, changes["category"]
                )

            modified = 0
            for field, value in changes.items():
                if getattr(document, field) != value:
                    setattr(document, field, value)
                    modified = 1

            if modified:
                document.updated_at = datetime.now(timezone.utc)
                await db.flush()
                logger.info("Document %s updated: %s", doc_uuid, sorted(changes))

            return DocumentUpdatedResponse(document_id=doc_uuid, modified_count=modified)

        except SQLAlchemyError as e:
            logger.error("Database error updating document %s: %s", doc_uuid, str(e))
            raise StorageError(
                message="Could not update the document. Please try again.",
                context={"document_id": str(doc_uuid), "error_type": type(e).__name__},
            ) from e

    async def get_document(self, db: AsyncSession, document_id: str) -> DocumentResponse:
        """Fetch one document by id, whatever its status."""
        doc_uuid = parse_document_id(document_id)
        try:
            document = await db.get(Document, doc_uuid)
        except SQLAlchemyError as e:
            logger.error("Database error fetching document %s: %s", doc_uuid, str(e))
            raise StorageError(
                message="Could not retrieve the document. Please try again.",
                context={"document_id": str(doc_uuid)},
            ) from e

        if document is None:
            raise NotFoundError(resource="document", resource_id=str(doc_uuid))
        return DocumentResponse.model_validate(document)

    async def list_published(
        self,
        db: AsyncSession,
        categories: Optional[str] = None,
    ) -> DocumentListResponse:
        """
        Published documents whose category is in the resolved filter.

        Query plan:
            SELECT * FROM documents
            WHERE status = 'published' AND category IN (:keys)
            → idx_documents_status_category
        """
        keys = await category_service.resolve_categories(db, categories)
        try:
            result = await db.execute(
                select(Document).where(
                    Document.status == PUBLISHED,
                    Document.category.in_(keys),
                )
            )
            documents = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing documents: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not retrieve documents. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        results = [DocumentResponse.model_validate(d) for d in documents]
        return DocumentListResponse(total_documents=len(results), results=results)


document_service = DocumentService()
