"""
Menu API Backend: Restaurant Service
=====================================

What:  Restaurant CRUD plus the composed read views (restaurant with its
       categorias and productos).
How:   Validation → write → commit for mutations; one primary query and one
       IN query per child table for reads.
Who:   Called by the /api/restaurantes route handlers.

Delete policy:
    A restaurant that still owns products or categories is not deleted;
    ConflictError (409) is raised instead so no orphaned rows are left.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.exceptions import ConflictError, DatabaseError, NotFoundError
from menu_api.models import Category, Product, Restaurant
from menu_api.schemas.category import CategoryRecord
from menu_api.schemas.common import is_record_id
from menu_api.schemas.menu import RestaurantResponse
from menu_api.schemas.product import ProductRecord
from menu_api.schemas.restaurant import RestaurantRecord
from menu_api.services.file_service import FileService, file_service
from menu_api.services.validation import validate_restaurant

logger = logging.getLogger(__name__)


class RestaurantService:
    """
    Business logic layer for restaurants.

    Responsibilities:
        - create_restaurant() / update_restaurant() / delete_restaurant()
        - get_restaurant(), list_restaurants(), list_by_owner()

    The blob store supplies the public URL of each listed product's image.
    """

    def __init__(self, blob_store: Optional[FileService] = None):
        self.blob_store = blob_store or file_service

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_restaurant(self, db: AsyncSession, restaurant_id: int) -> RestaurantResponse:
        restaurant = await self._get_or_404(db, restaurant_id)
        return (await self._compose(db, [restaurant]))[0]

    async def list_restaurants(self, db: AsyncSession) -> List[RestaurantResponse]:
        return await self._list(db, select(Restaurant).order_by(Restaurant.id))

    async def list_by_owner(self, db: AsyncSession, usuario_admin_id: int) -> List[RestaurantResponse]:
        """Restaurants administered by the given user, with their menu."""
        if not is_record_id(usuario_admin_id):
            return []
        return await self._list(
            db,
            select(Restaurant)
            .where(Restaurant.usuario_admin_id == usuario_admin_id)
            .order_by(Restaurant.id),
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_restaurant(self, db: AsyncSession, raw: Mapping[str, Any]) -> RestaurantRecord:
        """
        Raises:
            ValidationError: invalid input (→ 422)
            DatabaseError: the insert failed (→ 500)
        """
        values = await validate_restaurant(raw, partial=False)
        restaurant = Restaurant(**values)
        try:
            db.add(restaurant)
            await db.commit()
            await db.refresh(restaurant)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error creating restaurant: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo crear el restaurante",
                context={"error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Restaurant created: id=%s usuario_admin_id=%s", restaurant.id, restaurant.usuario_admin_id)
        return RestaurantRecord.model_validate(restaurant)

    async def update_restaurant(
        self,
        db: AsyncSession,
        restaurant_id: int,
        raw: Mapping[str, Any],
    ) -> RestaurantRecord:
        """Applies only the supplied fields; the others keep their values."""
        restaurant = await self._get_or_404(db, restaurant_id)
        changes = await validate_restaurant(raw, partial=True)

        for key, value in changes.items():
            setattr(restaurant, key, value)

        try:
            await db.commit()
            await db.refresh(restaurant)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error updating restaurant %s: %s", restaurant_id, str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo actualizar el restaurante",
                context={"restaurant_id": restaurant_id, "error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Restaurant %s updated: %s", restaurant_id, sorted(changes))
        return RestaurantRecord.model_validate(restaurant)

    async def delete_restaurant(self, db: AsyncSession, restaurant_id: int) -> None:
        """
        Raises:
            NotFoundError: unknown id (→ 404)
            ConflictError: products or categories still reference it (→ 409)
        """
        restaurant = await self._get_or_404(db, restaurant_id)

        products = await _count(db, Product, Product.restaurante_id == restaurant_id)
        categories = await _count(db, Category, Category.restaurante_id == restaurant_id)
        if products or categories:
            raise ConflictError(
                message="El restaurante tiene productos o categorías asociados y no puede eliminarse",
                context={"restaurant_id": restaurant_id, "productos": products, "categorias": categories},
            )

        try:
            await db.delete(restaurant)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error deleting restaurant %s: %s", restaurant_id, str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo eliminar el restaurante",
                context={"restaurant_id": restaurant_id, "error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Restaurant %s deleted", restaurant_id)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, restaurant_id: int) -> Restaurant:
        restaurant = await db.get(Restaurant, restaurant_id) if is_record_id(restaurant_id) else None
        if restaurant is None:
            raise NotFoundError(resource="restaurante", resource_id=restaurant_id)
        return restaurant

    async def _list(self, db: AsyncSession, query) -> List[RestaurantResponse]:
        try:
            restaurants = list((await db.execute(query)).scalars().all())
            return await self._compose(db, restaurants)
        except SQLAlchemyError as e:
            logger.error("Database error listing restaurants: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudieron obtener los restaurantes",
                context={"error_type": type(e).__name__, "error": str(e)},
            )

    async def _compose(self, db: AsyncSession, restaurants: List[Restaurant]) -> List[RestaurantResponse]:
        """Attach categorias and productos with one IN query per table."""
        ids = [r.id for r in restaurants]
        if not ids:
            return []

        categories: Dict[int, List[CategoryRecord]] = defaultdict(list)
        rows = await db.execute(
            select(Category).where(Category.restaurante_id.in_(ids)).order_by(Category.id)
        )
        for category in rows.scalars().all():
            categories[category.restaurante_id].append(CategoryRecord.model_validate(category))

        products: Dict[int, List[ProductRecord]] = defaultdict(list)
        rows = await db.execute(
            select(Product).where(Product.restaurante_id.in_(ids)).order_by(Product.id)
        )
        for product in rows.scalars().all():
            record = ProductRecord.model_validate(product)
            if product.imagen:
                record.imagen_url = self.blob_store.url_for(product.imagen)
            products[product.restaurante_id].append(record)

        return [
            RestaurantResponse.model_validate(r).model_copy(
                update={"categorias": categories[r.id], "productos": products[r.id]}
            )
            for r in restaurants
        ]


async def _count(db: AsyncSession, model: type, condition) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(condition))
    return result.scalar_one()


# ── Singleton Instance ────────────────────────────────────────────────────
restaurant_service = RestaurantService()
