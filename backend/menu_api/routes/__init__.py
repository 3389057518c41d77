"""
Menu API Backend: API Routes Package
=====================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource; handlers read the body,
       call the matching service and return its result.

Route Inventory:
    - products.py:     /api/productos
    - restaurants.py:  /api/restaurantes
    - categories.py:   /api/categorias
    - files.py:        GET /storage/{path}
    - health.py:       GET /health

Routes stay thin. Validation, persistence and error mapping live in the
services and in the exception handlers registered by main.py.
"""
