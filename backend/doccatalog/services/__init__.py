"""
Document Catalog — Services Layer
==================================

Service Inventory:
    - CategoryService:    category upsert (merge), listing, filter resolution
    - TechnologyService:  flat technology tags with unique name/label
    - DocumentService:    document create, partial update, fetch, listing

Services are stateless singletons; each call receives the request's
AsyncSession.
"""
