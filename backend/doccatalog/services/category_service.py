"""
Document Catalog — Category Service
====================================

What:  Category upsert, listing, and resolution of category filters against
       the live `categories` table.
Who:   Category routes, and DocumentService for validating a document's
       category and for resolving listing filters.

Upsert semantics (merge):
    First call for a name creates the category. Later calls union the
    supplied subcategories into the stored list (existing order first, new
    items appended) and report only what was added. Repeating a call adds
    nothing.

Known race:
    The upsert reads the row, computes the merge in Python and writes the
    whole list back, without a lock. Two concurrent upserts for the same
    name can each merge against the same snapshot, and the later write
    drops the earlier one's additions.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from doccatalog.exceptions import StorageError
from doccatalog.models.category import Category
from doccatalog.schemas.category import (
    CategoryResponse,
    CategoryUpsert,
    CategoryUpsertResponse,
)
from doccatalog.validation import (
    flatten_category_keys,
    intersect_categories,
    invalid_category_error,
    normalize_category_name,
)

logger = logging.getLogger(__name__)


class CategoryService:
    """
    Business logic for the hierarchical category taxonomy.

    Every method takes the request's AsyncSession; the service itself holds
    no state.
    """

    async def known_category_keys(self, db: AsyncSession) -> List[str]:
        """Every category name and subcategory, lowercased and sorted."""
        try:
            result = await db.execute(select(Category))
            return flatten_category_keys(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error loading categories: %s", str(e))
            raise StorageError(
                message="Could not load categories. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def resolve_categories(
        self,
        db: AsyncSession,
        requested: Optional[str],
    ) -> List[str]:
        """
        Turn a `?categories=a,b` filter into validated category keys.

        Raises:
            ValidationError: none of the requested keys exist (→ 400,
                             body lists `validCategories`)
            StorageError:    categories could not be read (→ 500)
        """
        known = await self.known_category_keys(db)
        return intersect_categories(requested, known)

    async def ensure_known_category(self, db: AsyncSession, category: str) -> str:
        """Return the normalized key for `category` or raise ValidationError."""
        key = normalize_category_name(category)
        known = await self.known_category_keys(db)
        if key not in known:
            error = invalid_category_error(known)
            error.context["field"] = "category"
            raise error
        return key

    async def upsert_category(
        self,
        db: AsyncSession,
        payload: CategoryUpsert,
    ) -> Tuple[CategoryUpsertResponse, bool]:
        """
        Create a category or merge new subcategories into it.

        Returns:
            (response, created); `created` picks 201 vs 200 in the route.

        Example:
            upsert {"name": "databases", "subcategories": ["mongodb"]}
                → created, added ["mongodb"]
            upsert {"name": "databases", "subcategories": ["mongodb", "mysql"]}
                → merged,  added ["mysql"]
        """
        try:
            result = await db.execute(
                select(Category).where(Category.name == payload.name)
            )
            category = result.scalar_one_or_none()

            if category is None:
                category = Category(
                    name=payload.name,
                    subcategories=list(payload.subcategories),
                )
                db.add(category)
                await db.flush()
                logger.info(
                    "Category '%s' created with %d subcategories",
                    category.name,
                    len(category.subcategories),
                )
                return (
                    CategoryUpsertResponse(
                        message="Category created successfully",
                        category=CategoryResponse.model_validate(category),
                        added_subcategories=list(payload.subcategories),
                    ),
                    True,
                )

            existing = list(category.subcategories or [])
            added = [sub for sub in payload.subcategories if sub not in existing]

            if added:
                # A new list object so the JSON column is marked dirty
                category.subcategories = existing + added
                await db.flush()
                logger.info("Category '%s' gained subcategories %s", category.name, added)
                message = "Category updated successfully"
            else:
                message = "Category already up to date"

            return (
                CategoryUpsertResponse(
                    message=message,
                    category=CategoryResponse.model_validate(category),
                    added_subcategories=added,
                ),
                False,
            )

        except SQLAlchemyError as e:
            logger.error("Database error upserting category '%s': %s", payload.name, str(e))
            raise StorageError(
                message="Could not save the category. Please try again.",
                context={"category": payload.name, "error_type": type(e).__name__},
            ) from e

    async def list_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        try:
            result = await db.execute(select(Category).order_by(Category.name))
            return [CategoryResponse.model_validate(c) for c in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", str(e))
            raise StorageError(
                message="Could not retrieve categories. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e


category_service = CategoryService()
