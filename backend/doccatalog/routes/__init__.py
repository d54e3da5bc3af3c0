"""
Document Catalog — API Routes Package
======================================

Route Inventory:
    - documents.py:     POST/PUT/GET /documents...
    - categories.py:    POST/GET /categories, GET /categories/keys
    - technologies.py:  POST/GET /technologies
    - health.py:        GET /health

Routes stay thin: read the request, call a service, return its result.
"""
