"""
Document Catalog — Category Service Unit Tests
===============================================

What we test:
    ✅ Upsert creates a missing category and reports every subcategory
    ✅ Upsert merges {A,B} then {B,C} into {A,B,C}, reporting only {C}
    ✅ Repeating an upsert adds nothing
    ✅ Known keys and filter resolution read the live table
    ✅ Database failures become StorageError
    ✅ The unlocked read-merge-write can lose a concurrent update
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from doccatalog.exceptions import StorageError, ValidationError
from doccatalog.schemas.category import CategoryUpsert
from doccatalog.services.category_service import CategoryService


def make_category(name, subcategories):
    # MagicMock reserves `name`, so rows are plain namespaces
    return SimpleNamespace(name=name, subcategories=list(subcategories))


def scalars_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(rows)
    return result


def scalar_one_result(row):
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    return result


def upsert(name, subcategories):
    return CategoryUpsert(name=name, subcategories=subcategories)


class TestUpsertCategory:

    def setup_method(self):
        self.service = CategoryService()

    @pytest.mark.asyncio
    async def test_creates_missing_category(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_one_result(None)

        result, created = await self.service.upsert_category(
            mock_db_session, upsert("Databases", ["mongodb"])
        )

        assert created is True
        assert result.category.name == "databases"
        assert result.added_subcategories == ["mongodb"]
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_merge_reports_only_new_subcategories(self, mock_db_session):
        stored = make_category("letters", ["A", "B"])
        mock_db_session.execute.return_value = scalar_one_result(stored)

        result, created = await self.service.upsert_category(
            mock_db_session, upsert("letters", ["B", "C"])
        )

        assert created is False
        assert stored.subcategories == ["A", "B", "C"]
        assert result.category.subcategories == ["A", "B", "C"]
        assert result.added_subcategories == ["C"]

    @pytest.mark.asyncio
    async def test_repeated_upsert_is_idempotent(self, mock_db_session):
        stored = make_category("databases", ["mongodb", "mysql"])
        mock_db_session.execute.return_value = scalar_one_result(stored)

        result, created = await self.service.upsert_category(
            mock_db_session, upsert("databases", ["mysql", "mongodb"])
        )

        assert created is False
        assert result.added_subcategories == []
        assert result.message == "Category already up to date"
        assert stored.subcategories == ["mongodb", "mysql"]
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_merge_is_case_sensitive(self, mock_db_session):
        stored = make_category("databases", ["mysql"])
        mock_db_session.execute.return_value = scalar_one_result(stored)

        result, _ = await self.service.upsert_category(
            mock_db_session, upsert("databases", ["MySQL"])
        )

        assert result.added_subcategories == ["MySQL"]
        assert stored.subcategories == ["mysql", "MySQL"]

    @pytest.mark.asyncio
    async def test_database_failure_raises_storage_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
        )

        with pytest.raises(StorageError):
            await self.service.upsert_category(mock_db_session, upsert("databases", ["x"]))

    @pytest.mark.asyncio
    async def test_concurrent_upserts_can_lose_updates(self, mock_db_session):
        """
        Two requests read the same stored row before either writes. Each
        merges against that snapshot, so whichever writes last drops the
        other's addition. This documents the race; it is not prevented.
        """
        snapshot_a = make_category("letters", ["A"])
        snapshot_b = make_category("letters", ["A"])
        mock_db_session.execute = AsyncMock(
            side_effect=[scalar_one_result(snapshot_a), scalar_one_result(snapshot_b)]
        )

        first, _ = await self.service.upsert_category(mock_db_session, upsert("letters", ["B"]))
        second, _ = await self.service.upsert_category(mock_db_session, upsert("letters", ["C"]))

        assert first.added_subcategories == ["B"]
        assert second.added_subcategories == ["C"]
        # The last write carries no trace of "B"
        assert snapshot_b.subcategories == ["A", "C"]


class TestCategoryResolutionService:

    def setup_method(self):
        self.service = CategoryService()

    @pytest.mark.asyncio
    async def test_known_keys_flatten_live_table(self, mock_db_session):
        mock_db_session.execute.return_value = scalars_result([
            make_category("databases", ["MongoDB", "mysql"]),
            make_category("web", ["apache"]),
        ])

        keys = await self.service.known_category_keys(mock_db_session)

        assert keys == ["apache", "databases", "mongodb", "mysql", "web"]

    @pytest.mark.asyncio
    async def test_resolve_without_filter_returns_all(self, mock_db_session):
        mock_db_session.execute.return_value = scalars_result([
            make_category("databases", ["mysql"]),
        ])

        assert await self.service.resolve_categories(mock_db_session, None) == [
            "databases", "mysql",
        ]

    @pytest.mark.asyncio
    async def test_resolve_unknown_filter_raises(self, mock_db_session):
        mock_db_session.execute.return_value = scalars_result([
            make_category("databases", ["mysql"]),
        ])

        with pytest.raises(ValidationError) as exc_info:
            await self.service.resolve_categories(mock_db_session, "oracle")
        assert exc_info.value.context["validCategories"] == ["databases", "mysql"]

    @pytest.mark.asyncio
    async def test_ensure_known_category_normalizes(self, mock_db_session):
        mock_db_session.execute.return_value = scalars_result([
            make_category("databases", ["MySQL"]),
        ])

        assert await self.service.ensure_known_category(mock_db_session, " MYSQL ") == "mysql"

    @pytest.mark.asyncio
    async def test_ensure_unknown_category_names_the_field(self, mock_db_session):
        mock_db_session.execute.return_value = scalars_result([])

        with pytest.raises(ValidationError) as exc_info:
            await self.service.ensure_known_category(mock_db_session, "oracle")
        assert exc_info.value.context["field"] == "category"
        assert exc_info.value.context["validCategories"] == []

    @pytest.mark.asyncio
    async def test_list_categories(self, mock_db_session):
        mock_db_session.execute.return_value = scalars_result([
            make_category("databases", ["mysql"]),
        ])

        categories = await self.service.list_categories(mock_db_session)

        assert [c.name for c in categories] == ["databases"]
        assert categories[0].subcategories == ["mysql"]
