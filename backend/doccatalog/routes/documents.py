"""
Document Catalog — Document Route Handlers
===========================================

    POST /documents                       create
    PUT  /documents/{id}                  partial update
    GET  /documents?categories=a,b        published documents, filtered
    GET  /documents/category/{category}   published documents in one category
    GET  /documents/{id}                  one document, any status

The id path parameter is taken as a plain string and parsed by the service,
so a malformed id yields a 400 with the catalog's error body rather than
FastAPI's 422.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from doccatalog.database import get_db_session
from doccatalog.schemas.common import ErrorResponse, ValidationErrorResponse
from doccatalog.schemas.document import (
    DocumentCreate,
    DocumentCreatedResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    DocumentUpdatedResponse,
)
from doccatalog.services.document_service import document_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post(
    "",
    status_code=201,
    response_model=DocumentCreatedResponse,
    responses={
        400: {"description": "Missing or invalid fields", "model": ValidationErrorResponse},
        409: {"description": "Document ID already taken", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Create a document",
)
async def create_document(
    payload: DocumentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> DocumentCreatedResponse:
    return await document_service.create_document(db=db, payload=payload)


@router.put(
    "/{document_id}",
    response_model=DocumentUpdatedResponse,
    responses={
        400: {"description": "Invalid ID or empty body", "model": ErrorResponse},
        404: {"description": "Document not found", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Update a document",
    description="Merges the supplied fields into the stored document.",
)
async def update_document(
    document_id: str,
    payload: DocumentUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> DocumentUpdatedResponse:
    return await document_service.update_document(
        db=db, document_id=document_id, payload=payload
    )


@router.get(
    "",
    response_model=DocumentListResponse,
    responses={
        400: {"description": "No requested category is known", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="List published documents",
)
async def list_documents(
    categories: Optional[str] = Query(
        default=None,
        description="Comma-separated category keys; omit for every known category",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> DocumentListResponse:
    return await document_service.list_published(db=db, categories=categories)


@router.get(
    "/category/{category}",
    response_model=DocumentListResponse,
    responses={
        400: {"description": "Unknown category", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="List published documents in one category",
)
async def list_documents_in_category(
    category: str,
    db: AsyncSession = Depends(get_db_session),
) -> DocumentListResponse:
    return await document_service.list_published(db=db, categories=category)


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    responses={
        400: {"description": "Invalid document ID", "model": ErrorResponse},
        404: {"description": "Document not found", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Get a single document by ID",
)
async def get_document(
    document_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DocumentResponse:
    return await document_service.get_document(db=db, document_id=document_id)
