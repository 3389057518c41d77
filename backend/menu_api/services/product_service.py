"""
Menu API Backend: Product Service
==================================

What:  Product CRUD: validation, image storage, persistence and relation
       loading.
How:   Composes the validation layer, FileService and the async session.
Who:   Called by the /api/productos route handlers.

Create Flow (POST /api/productos):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────────┐
    │ Validate │───▶│ Store image │───▶│ Insert row   │───▶│ Load relations│
    │  (input) │    │ (optional)  │    │ + commit     │    │ by FK         │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────────┘

Image replacement and deletion are best-effort and not transactional with
the row write: a failed file delete is logged and the operation continues.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.exceptions import DatabaseError, NotFoundError
from menu_api.models import Category, Product, Restaurant
from menu_api.schemas.category import CategoryRecord
from menu_api.schemas.common import is_record_id
from menu_api.schemas.menu import ProductResponse
from menu_api.schemas.restaurant import RestaurantRecord
from menu_api.services.file_service import FileService, file_service
from menu_api.services.validation import validate_product

logger = logging.getLogger(__name__)

# Storage namespace (subdirectory) for product images
PRODUCT_IMAGE_NAMESPACE = "productos"


class ProductService:
    """
    Business logic layer for products.

    Responsibilities:
        - create_product() / update_product() / delete_product()
        - get_product(), list_products(), list_by_restaurant(),
          list_by_category()

    The service is stateless apart from its blob store, so a single instance
    serves all requests. Tests pass their own FileService.
    """

    def __init__(self, blob_store: Optional[FileService] = None):
        self.blob_store = blob_store or file_service

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_product(self, db: AsyncSession, product_id: int) -> ProductResponse:
        """
        Raises:
            NotFoundError: no product with this id (→ 404)
        """
        product = await self._get_or_404(db, product_id)
        return await self._hydrate(db, product)

    async def list_products(self, db: AsyncSession) -> List[ProductResponse]:
        return await self._list(db, select(Product).order_by(Product.id))

    async def list_by_restaurant(self, db: AsyncSession, restaurante_id: int) -> List[ProductResponse]:
        if not is_record_id(restaurante_id):
            return []
        return await self._list(
            db,
            select(Product).where(Product.restaurante_id == restaurante_id).order_by(Product.id),
        )

    async def list_by_category(self, db: AsyncSession, categoria_id: int) -> List[ProductResponse]:
        if not is_record_id(categoria_id):
            return []
        return await self._list(
            db,
            select(Product).where(Product.categoria_id == categoria_id).order_by(Product.id),
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_product(self, db: AsyncSession, raw: Mapping[str, Any]) -> ProductResponse:
        """
        Validate → store image → insert → load relations.

        Side effects: at most one file write and one row insert.

        Raises:
            ValidationError: invalid or referentially broken input (→ 422)
            FileStorageError: the image could not be written (→ 500)
            DatabaseError: the insert failed (→ 500); the stored image is
                           removed again
        """
        validated = await validate_product(db, raw, partial=False, blob_store=self.blob_store)
        data: Dict[str, Any] = dict(validated.fields)

        stored_path: Optional[str] = None
        if validated.image is not None:
            stored_path = await self.blob_store.store(
                validated.image.content,
                PRODUCT_IMAGE_NAMESPACE,
                validated.image_extension or "",
            )
            data["imagen"] = stored_path

        product = Product(**data)
        try:
            db.add(product)
            await db.commit()
            await db.refresh(product)
        except SQLAlchemyError as e:
            await db.rollback()
            if stored_path:
                await self.blob_store.delete(stored_path)
            logger.error("Error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo crear el producto",
                context={"error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Product created: id=%s restaurante_id=%s", product.id, product.restaurante_id)
        return await self._hydrate(db, product)

    async def update_product(
        self,
        db: AsyncSession,
        product_id: int,
        raw: Mapping[str, Any],
    ) -> ProductResponse:
        """
        Partial update: fields that were not supplied keep their values.

        When a new image is supplied the previous file is deleted first,
        then the new one is stored and `imagen` points to it. If the commit
        fails the new file is removed again.

        Raises:
            NotFoundError, ValidationError, FileStorageError, DatabaseError
        """
        product = await self._get_or_404(db, product_id)
        validated = await validate_product(db, raw, partial=True, blob_store=self.blob_store)
        changes: Dict[str, Any] = dict(validated.fields)

        stored_path: Optional[str] = None
        if validated.image is not None:
            if product.imagen:
                await self.blob_store.delete(product.imagen)
            stored_path = await self.blob_store.store(
                validated.image.content,
                PRODUCT_IMAGE_NAMESPACE,
                validated.image_extension or "",
            )
            changes["imagen"] = stored_path

        for key, value in changes.items():
            setattr(product, key, value)

        try:
            await db.commit()
            await db.refresh(product)
        except SQLAlchemyError as e:
            await db.rollback()
            if stored_path:
                await self.blob_store.delete(stored_path)
            logger.error("Error updating product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo actualizar el producto",
                context={"product_id": product_id, "error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Product %s updated: %s", product_id, sorted(changes))
        return await self._hydrate(db, product)

    async def delete_product(self, db: AsyncSession, product_id: int) -> None:
        """
        Delete the image (best-effort) and then the row.

        A failed file delete does not stop the row from being deleted.
        """
        product = await self._get_or_404(db, product_id)

        if product.imagen:
            await self.blob_store.delete(product.imagen)

        try:
            await db.delete(product)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error deleting product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo eliminar el producto",
                context={"product_id": product_id, "error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Product %s deleted", product_id)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, product_id: int) -> Product:
        product = await db.get(Product, product_id) if is_record_id(product_id) else None
        if product is None:
            raise NotFoundError(resource="producto", resource_id=product_id)
        return product

    async def _hydrate(self, db: AsyncSession, product: Product) -> ProductResponse:
        """Attach restaurante and categoria with one lookup each."""
        restaurant = await db.get(Restaurant, product.restaurante_id)
        category = await db.get(Category, product.categoria_id)
        return self._compose(product, restaurant, category)

    async def _list(self, db: AsyncSession, query) -> List[ProductResponse]:
        """
        Run a product query and attach relations with one IN query per
        related table, regardless of how many products were returned.
        """
        try:
            products = list((await db.execute(query)).scalars().all())
            restaurants = await _load_by_id(db, Restaurant, {p.restaurante_id for p in products})
            categories = await _load_by_id(db, Category, {p.categoria_id for p in products})
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudieron obtener los productos",
                context={"error_type": type(e).__name__, "error": str(e)},
            )
        return [
            self._compose(p, restaurants.get(p.restaurante_id), categories.get(p.categoria_id))
            for p in products
        ]

    def _compose(
        self,
        product: Product,
        restaurant: Optional[Restaurant],
        category: Optional[Category],
    ) -> ProductResponse:
        return ProductResponse.model_validate(product).model_copy(
            update={
                "imagen_url": self.blob_store.url_for(product.imagen) if product.imagen else None,
                "restaurante": RestaurantRecord.model_validate(restaurant) if restaurant else None,
                "categoria": CategoryRecord.model_validate(category) if category else None,
            }
        )


async def _load_by_id(db: AsyncSession, model: type, ids: Iterable[int]) -> Dict[int, Any]:
    ids = set(ids)
    if not ids:
        return {}
    result = await db.execute(select(model).where(model.id.in_(ids)))
    return {row.id: row for row in result.scalars().all()}


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
