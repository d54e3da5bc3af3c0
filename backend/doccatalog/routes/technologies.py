"""
Document Catalog — Technology Route Handlers
=============================================

    POST /technologies   create a flat {name, label} tag (409 on duplicates)
    GET  /technologies   list them
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from doccatalog.database import get_db_session
from doccatalog.schemas.category import TechnologyCreate, TechnologyResponse
from doccatalog.schemas.common import ErrorResponse, ValidationErrorResponse
from doccatalog.services.technology_service import technology_service

router = APIRouter(prefix="/technologies", tags=["Technologies"])


@router.post(
    "",
    status_code=201,
    response_model=TechnologyResponse,
    responses={
        400: {"description": "Missing fields", "model": ValidationErrorResponse},
        409: {"description": "Name or label already used", "model": ErrorResponse},
    },
    summary="Create a technology",
)
async def create_technology(
    payload: TechnologyCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TechnologyResponse:
    return await technology_service.create_technology(db=db, payload=payload)


@router.get("", response_model=List[TechnologyResponse], summary="List technologies")
async def list_technologies(
    db: AsyncSession = Depends(get_db_session),
) -> List[TechnologyResponse]:
    return await technology_service.list_technologies(db=db)
