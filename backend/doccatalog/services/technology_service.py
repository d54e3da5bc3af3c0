"""
Document Catalog — Technology Service
======================================

Flat `{name, label}` technology tags. Names and labels are each unique;
a clash on either is reported as a ConflictError (409).
"""

import logging
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from doccatalog.exceptions import ConflictError, StorageError
from doccatalog.models.category import Technology
from doccatalog.schemas.category import TechnologyCreate, TechnologyResponse

logger = logging.getLogger(__name__)


class TechnologyService:

    async def create_technology(
        self,
        db: AsyncSession,
        payload: TechnologyCreate,
    ) -> TechnologyResponse:
        """
        Raises:
            ConflictError: name or label already taken (→ 409)
            StorageError:  database failure (→ 500)
        """
        try:
            result = await db.execute(
                select(Technology).where(
                    or_(Technology.name == payload.name, Technology.label == payload.label)
                )
            )
            existing = result.scalars().first()
            if existing is not None:
                clash = "name" if existing.name == payload.name else "label"
                raise ConflictError(
                    message=f"A technology with this {clash} already exists",
                    context={"name": payload.name, "label": payload.label},
                )

            technology = Technology(name=payload.name, label=payload.label)
            db.add(technology)
            await db.flush()
            logger.info("Technology '%s' (%s) created", technology.name, technology.label)
            return TechnologyResponse.model_validate(technology)

        except IntegrityError as e:
            # Lost the check-then-insert race against another request
            raise ConflictError(
                message="A technology with this name or label already exists",
                context={"name": payload.name, "label": payload.label},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating technology '%s': %s", payload.name, str(e))
            raise StorageError(
                message="Could not save the technology. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def list_technologies(self, db: AsyncSession) -> List[TechnologyResponse]:
        try:
            result = await db.execute(select(Technology).order_by(Technology.name))
            return [TechnologyResponse.model_validate(t) for t in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing technologies: %s", str(e))
            raise StorageError(
                message="Could not retrieve technologies. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e


technology_service = TechnologyService()
