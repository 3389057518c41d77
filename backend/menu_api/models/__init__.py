"""
Menu API Backend: ORM Models
=============================

Importing this package registers every table on `Base.metadata`, which both
Alembic and the test suite rely on.
"""

from menu_api.models.category import Category
from menu_api.models.product import Product
from menu_api.models.restaurant import Restaurant

__all__ = ["Category", "Product", "Restaurant"]
