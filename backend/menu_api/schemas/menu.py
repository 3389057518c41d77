"""
Menu API Backend: Composed Response Schemas
============================================

What:  Records with their related rows attached, as returned by the read
       endpoints and by product create/update.
How:   The services fetch the primary row, look up the related rows by
       foreign key, and build these models from both.

    ProductResponse     product + restaurante + categoria
    RestaurantResponse  restaurant + categorias + productos
    CategoryResponse    category + restaurante
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from menu_api.schemas.category import CategoryRecord
from menu_api.schemas.product import ProductRecord
from menu_api.schemas.restaurant import RestaurantRecord


class ProductResponse(ProductRecord):
    restaurante: Optional[RestaurantRecord] = None
    categoria: Optional[CategoryRecord] = None


class RestaurantResponse(RestaurantRecord):
    categorias: List[CategoryRecord] = Field(default_factory=list)
    productos: List[ProductRecord] = Field(default_factory=list)


class CategoryResponse(CategoryRecord):
    restaurante: Optional[RestaurantRecord] = None


class ProductCreatedResponse(BaseModel):
    """Envelope returned by POST /api/productos with HTTP 201."""

    success: bool = True
    message: str = "Producto creado exitosamente"
    data: ProductResponse
