"""
Menu API Backend: Pydantic Request/Response Schemas
====================================================

Input models (one per write operation) define which fields are required and
how they are coerced. Record/response models define what the API returns.
They are kept apart from the SQLAlchemy models so the API contract can carry
derived fields (imagen_url) and composed relations.
"""
