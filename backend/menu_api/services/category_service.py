"""
Menu API Backend: Menu Category Service
========================================

What:  CRUD for menu categories (categorias_menu). Every product belongs to
       one category of its restaurant.
Who:   Called by the /api/categorias route handlers.
"""

import logging
from typing import Any, List, Mapping

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.exceptions import ConflictError, DatabaseError, NotFoundError
from menu_api.models import Category, Product, Restaurant
from menu_api.schemas.category import CategoryRecord
from menu_api.schemas.common import is_record_id
from menu_api.schemas.menu import CategoryResponse
from menu_api.schemas.restaurant import RestaurantRecord
from menu_api.services.validation import validate_category

logger = logging.getLogger(__name__)


class CategoryService:

    async def get_category(self, db: AsyncSession, category_id: int) -> CategoryResponse:
        category = await self._get_or_404(db, category_id)
        return (await self._compose(db, [category]))[0]

    async def list_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        return await self._list(db, select(Category).order_by(Category.id))

    async def list_by_restaurant(self, db: AsyncSession, restaurante_id: int) -> List[CategoryResponse]:
        if not is_record_id(restaurante_id):
            return []
        return await self._list(
            db,
            select(Category).where(Category.restaurante_id == restaurante_id).order_by(Category.id),
        )

    async def create_category(self, db: AsyncSession, raw: Mapping[str, Any]) -> CategoryRecord:
        values = await validate_category(db, raw, partial=False)
        category = Category(**values)
        try:
            db.add(category)
            await db.commit()
            await db.refresh(category)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error creating category: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo crear la categoría",
                context={"error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Category created: id=%s restaurante_id=%s", category.id, category.restaurante_id)
        return CategoryRecord.model_validate(category)

    async def update_category(
        self,
        db: AsyncSession,
        category_id: int,
        raw: Mapping[str, Any],
    ) -> CategoryRecord:
        category = await self._get_or_404(db, category_id)
        changes = await validate_category(db, raw, partial=True)

        for key, value in changes.items():
            setattr(category, key, value)

        try:
            await db.commit()
            await db.refresh(category)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error updating category %s: %s", category_id, str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo actualizar la categoría",
                context={"category_id": category_id, "error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Category %s updated: %s", category_id, sorted(changes))
        return CategoryRecord.model_validate(category)

    async def delete_category(self, db: AsyncSession, category_id: int) -> None:
        """Refuses with ConflictError while products still use the category."""
        category = await self._get_or_404(db, category_id)

        result = await db.execute(
            select(func.count()).select_from(Product).where(Product.categoria_id == category_id)
        )
        products = result.scalar_one()
        if products:
            raise ConflictError(
                message="La categoría tiene productos asociados y no puede eliminarse",
                context={"category_id": category_id, "productos": products},
            )

        try:
            await db.delete(category)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error deleting category %s: %s", category_id, str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudo eliminar la categoría",
                context={"category_id": category_id, "error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Category %s deleted", category_id)

    async def _get_or_404(self, db: AsyncSession, category_id: int) -> Category:
        category = await db.get(Category, category_id) if is_record_id(category_id) else None
        if category is None:
            raise NotFoundError(resource="categoría", resource_id=category_id)
        return category

    async def _list(self, db: AsyncSession, query) -> List[CategoryResponse]:
        try:
            categories = list((await db.execute(query)).scalars().all())
            return await self._compose(db, categories)
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="No se pudieron obtener las categorías",
                context={"error_type": type(e).__name__, "error": str(e)},
            )

    async def _compose(self, db: AsyncSession, categories: List[Category]) -> List[CategoryResponse]:
        owner_ids = {c.restaurante_id for c in categories}
        owners = {}
        if owner_ids:
            rows = await db.execute(select(Restaurant).where(Restaurant.id.in_(owner_ids)))
            owners = {r.id: RestaurantRecord.model_validate(r) for r in rows.scalars().all()}
        return [
            CategoryResponse.model_validate(c).model_copy(
                update={"restaurante": owners.get(c.restaurante_id)}
            )
            for c in categories
        ]


# ── Singleton Instance ────────────────────────────────────────────────────
category_service = CategoryService()
