"""
Menu API Backend: Application Package Initializer
==================================================

What: Marks the `menu_api` directory as a Python package.
Who:  Imported by uvicorn (`menu_api.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, blobs, hydration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP requests into service calls and shape responses.
    Services own validation, image storage and relation loading, and can be
    tested without HTTP.
"""

__version__ = "1.0.0"
