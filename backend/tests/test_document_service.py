"""
Document Catalog — Document Service Unit Tests
===============================================

What we test:
    ✅ Create persists a document with a generated or client-supplied id
    ✅ Create rejects a client id that already exists
    ✅ Get: found, not found, malformed id
    ✅ Update: partial merge, no-op, empty body, not found, subcategories[0]
    ✅ List resolves the category filter before querying
    ✅ Database errors are wrapped in StorageError
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from doccatalog.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from doccatalog.models.document import Document
from doccatalog.schemas.document import DocumentCreate, DocumentUpdate
from doccatalog.services.document_service import DocumentService


def stored_document(**overrides):
    fields = {
        "id": uuid.uuid4(),
        "title": "Connection Pooling",
        "description": "How the MySQL driver pools connections",
        "url": "https://dev.mysql.com/doc/",
        "category": "mysql",
        "tags": ["pooling"],
        "status": "draft",
        "created_at": datetime(2024, 1, 15, tzinfo=timezone.utc),
        "updated_at": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture
def categories_patch():
    with patch("doccatalog.services.document_service.category_service") as mock_categories:
        mock_categories.ensure_known_category = AsyncMock(side_effect=lambda db, c: c.strip().lower())
        mock_categories.resolve_categories = AsyncMock(return_value=["mongodb"])
        yield mock_categories


class TestCreateDocument:

    def setup_method(self):
        self.service = DocumentService()

    @pytest.mark.asyncio
    async def test_create_generates_id(self, mock_db_session, categories_patch, sample_document_payload):
        payload = DocumentCreate.model_validate(sample_document_payload)

        result = await self.service.create_document(mock_db_session, payload)

        added = mock_db_session.add.call_args.args[0]
        assert isinstance(added, Document)
        assert result.document_id == added.id
        assert added.title == "Aggregation Pipeline"
        assert added.tags == ["aggregation", "reference"]
        assert added.created_at is not None
        categories_patch.ensure_known_category.assert_awaited_once_with(mock_db_session, "mongodb")
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_keeps_client_id(self, mock_db_session, categories_patch, sample_document_payload):
        doc_id = uuid.uuid4()
        payload = DocumentCreate.model_validate(dict(sample_document_payload, id=str(doc_id)))

        result = await self.service.create_document(mock_db_session, payload)

        assert result.document_id == doc_id

    @pytest.mark.asyncio
    async def test_create_with_taken_id_conflicts(self, mock_db_session, categories_patch, sample_document_payload):
        doc_id = uuid.uuid4()
        mock_db_session.get.return_value = stored_document(id=doc_id)
        payload = DocumentCreate.model_validate(dict(sample_document_payload, id=str(doc_id)))

        with pytest.raises(ConflictError):
            await self.service.create_document(mock_db_session, payload)
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_unknown_category_propagates(self, mock_db_session, categories_patch, sample_document_payload):
        categories_patch.ensure_known_category = AsyncMock(
            side_effect=ValidationError("Invalid category", field="category")
        )
        payload = DocumentCreate.model_validate(sample_document_payload)

        with pytest.raises(ValidationError):
            await self.service.create_document(mock_db_session, payload)

    @pytest.mark.asyncio
    async def test_create_storage_failure(self, mock_db_session, categories_patch, sample_document_payload):
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        )
        payload = DocumentCreate.model_validate(sample_document_payload)

        with pytest.raises(StorageError):
            await self.service.create_document(mock_db_session, payload)


class TestGetDocument:

    def setup_method(self):
        self.service = DocumentService()

    @pytest.mark.asyncio
    async def test_get_document_found(self, mock_db_session):
        doc = stored_document()
        mock_db_session.get.return_value = doc

        result = await self.service.get_document(mock_db_session, str(doc.id))

        assert result.id == doc.id
        assert result.status == "draft"

    @pytest.mark.asyncio
    async def test_get_document_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_document(mock_db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_get_document_malformed_id(self, mock_db_session):
        with pytest.raises(ValidationError, match="Invalid document ID"):
            await self.service.get_document(mock_db_session, "nope")
        mock_db_session.get.assert_not_awaited()


class TestUpdateDocument:

    def setup_method(self):
        self.service = DocumentService()

    @pytest.mark.asyncio
    async def test_partial_update_changes_only_supplied_fields(self, mock_db_session, categories_patch):
        doc = stored_document()
        created_at = doc.created_at
        mock_db_session.get.return_value = doc

        result = await self.service.update_document(
            mock_db_session, str(doc.id), DocumentUpdate(status="published")
        )

        assert result.modified_count == 1
        assert doc.status == "published"
        assert doc.title == "Connection Pooling"
        assert doc.created_at == created_at
        assert doc.updated_at is not None
        categories_patch.ensure_known_category.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_with_same_values_modifies_nothing(self, mock_db_session, categories_patch):
        doc = stored_document()
        mock_db_session.get.return_value = doc

        result = await self.service.update_document(
            mock_db_session, str(doc.id), DocumentUpdate(status="draft")
        )

        assert result.modified_count == 0
        assert doc.updated_at is None
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_empty_body_rejected(self, mock_db_session):
        with pytest.raises(ValidationError, match="at least one"):
            await self.service.update_document(
                mock_db_session, str(uuid.uuid4()), DocumentUpdate()
            )
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_malformed_id_checked_first(self, mock_db_session):
        with pytest.raises(ValidationError, match="Invalid document ID"):
            await self.service.update_document(mock_db_session, "xyz", DocumentUpdate())

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db_session, categories_patch):
        with pytest.raises(NotFoundError):
            await self.service.update_document(
                mock_db_session, str(uuid.uuid4()), DocumentUpdate(title="New")
            )

    @pytest.mark.asyncio
    async def test_update_category_is_validated(self, mock_db_session, categories_patch):
        doc = stored_document()
        mock_db_session.get.return_value = doc

        await self.service.update_document(
            mock_db_session, str(doc.id), DocumentUpdate(category="MongoDB")
        )

        categories_patch.ensure_known_category.assert_awaited_once_with(mock_db_session, "mongodb")
        assert doc.category == "mongodb"

    @pytest.mark.asyncio
    async def test_subcategories_first_element_becomes_category(self, mock_db_session, categories_patch):
        doc = stored_document()
        mock_db_session.get.return_value = doc

        result = await self.service.update_document(
            mock_db_session,
            str(doc.id),
            DocumentUpdate(subcategories=["mongodb", "mysql"]),
        )

        assert result.modified_count == 1
        assert doc.category == "mongodb"

    @pytest.mark.asyncio
    async def test_explicit_category_wins_over_subcategories(self, mock_db_session, categories_patch):
        doc = stored_document()
        mock_db_session.get.return_value = doc

        await self.service.update_document(
            mock_db_session,
            str(doc.id),
            DocumentUpdate(category="apache", subcategories=["mongodb"]),
        )

        assert doc.category == "apache"


class TestListPublished:

    def setup_method(self):
        self.service = DocumentService()

    @pytest.mark.asyncio
    async def test_list_uses_resolved_categories(self, mock_db_session, categories_patch):
        doc = stored_document(category="mongodb", status="published")
        result = MagicMock()
        result.scalars.return_value.all.return_value = [doc]
        mock_db_session.execute.return_value = result

        listing = await self.service.list_published(mock_db_session, "MongoDB")

        categories_patch.resolve_categories.assert_awaited_once_with(mock_db_session, "MongoDB")
        assert listing.total_documents == 1
        assert listing.results[0].id == doc.id

    @pytest.mark.asyncio
    async def test_list_invalid_filter_skips_query(self, mock_db_session, categories_patch):
        categories_patch.resolve_categories = AsyncMock(
            side_effect=ValidationError("Invalid category", context={"validCategories": []})
        )

        with pytest.raises(ValidationError):
            await self.service.list_published(mock_db_session, "oracle")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_storage_failure(self, mock_db_session, categories_patch):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("timeout"))
        )

        with pytest.raises(StorageError):
            await self.service.list_published(mock_db_session, None)
