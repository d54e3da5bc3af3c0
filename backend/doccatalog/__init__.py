"""
Document Catalog — Application Package
=======================================

What: HTTP API cataloguing links to technical documentation, organized by
      category/subcategory and publication status.
Who:  Imported by uvicorn (`doccatalog.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← path/query/body parsing only
    ├─────────────────────────────────────┤
    │   Services + validation (rules)     │  ← category resolution, merges
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← one AsyncSession per request
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
