"""
Document Catalog — Category Route Handlers
===========================================

    POST /categories        create (201) or merge subcategories (200)
    GET  /categories        every category with its subcategories
    GET  /categories/keys   the lowercased keys accepted as document categories
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from doccatalog.database import get_db_session
from doccatalog.schemas.category import (
    CategoryKeysResponse,
    CategoryResponse,
    CategoryUpsert,
    CategoryUpsertResponse,
)
from doccatalog.schemas.common import ErrorResponse, ValidationErrorResponse
from doccatalog.services.category_service import category_service

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.post(
    "",
    response_model=CategoryUpsertResponse,
    responses={
        200: {"description": "Existing category merged"},
        201: {"description": "Category created", "model": CategoryUpsertResponse},
        400: {"description": "Missing or invalid fields", "model": ValidationErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Create a category or merge subcategories into it",
)
async def upsert_category(
    payload: CategoryUpsert,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryUpsertResponse:
    result, created = await category_service.upsert_category(db=db, payload=payload)
    response.status_code = 201 if created else 200
    return result


@router.get(
    "",
    response_model=List[CategoryResponse],
    summary="List categories",
)
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
) -> List[CategoryResponse]:
    return await category_service.list_categories(db=db)


@router.get(
    "/keys",
    response_model=CategoryKeysResponse,
    summary="List valid category keys",
)
async def list_category_keys(
    db: AsyncSession = Depends(get_db_session),
) -> CategoryKeysResponse:
    return CategoryKeysResponse(categories=await category_service.known_category_keys(db))
