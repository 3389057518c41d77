"""
Menu API Backend: Product Service Tests
========================================

What:  ProductService against a real (in-memory SQLite) database and a
       temporary storage directory.

Test Strategy:
    ✅ create → get round trip, relations hydrated
    ✅ image lifecycle: store on create, replace on update, remove on delete
    ✅ failures: unknown ids, validation leaves no row and no file,
       insert or update failure removes the newly stored image
    ✅ listings by restaurant and by category
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from conftest import add_category, add_restaurant
from menu_api.exceptions import DatabaseError, NotFoundError, ValidationError
from menu_api.models import Product
from menu_api.services.file_service import FileService, UploadedImage
from menu_api.services.product_service import PRODUCT_IMAGE_NAMESPACE, ProductService


@pytest.fixture
def service(blob_store):
    return ProductService(blob_store=blob_store)


def product_fields(restaurant, category, **overrides):
    fields = {
        "restaurante_id": restaurant.id,
        "categoria_id": category.id,
        "nombre": "Hamburguesa",
        "descripcion": "Con queso",
        "precio": "10.50",
        "disponible": "true",
    }
    fields.update(overrides)
    return fields


async def count_products(db_session) -> int:
    return (await db_session.execute(select(func.count()).select_from(Product))).scalar_one()


def stored_files(temp_storage):
    from pathlib import Path
    folder = Path(temp_storage) / PRODUCT_IMAGE_NAMESPACE
    return sorted(p.name for p in folder.iterdir()) if folder.exists() else []


class TestCreateProduct:

    @pytest.mark.asyncio
    async def test_create_then_get(self, service, db_session, restaurant, category):
        created = await service.create_product(db_session, product_fields(restaurant, category))

        assert created.id is not None
        assert created.disponible is True
        assert created.precio == 10.5
        assert created.imagen is None
        assert created.restaurante.id == restaurant.id
        assert created.categoria.id == category.id

        fetched = await service.get_product(db_session, created.id)
        assert fetched.model_dump() == created.model_dump()

    @pytest.mark.asyncio
    async def test_create_without_image_has_no_image_url(self, service, db_session, restaurant, category):
        created = await service.create_product(db_session, product_fields(restaurant, category))
        assert "imagen_url" not in created.model_dump()

    @pytest.mark.asyncio
    async def test_create_with_image(
        self, service, db_session, restaurant, category, temp_storage, sample_image_bytes
    ):
        raw = product_fields(restaurant, category)
        raw["imagen"] = UploadedImage(filename="plato.jpg", content=sample_image_bytes)

        created = await service.create_product(db_session, raw)

        assert created.imagen.startswith("productos/")
        assert created.imagen.endswith(".jpg")
        assert service.blob_store.exists(created.imagen)
        dumped = created.model_dump()
        assert dumped["imagen_url"].endswith("/storage/" + created.imagen)

    @pytest.mark.asyncio
    async def test_image_url_follows_the_service_blob_store(
        self, db_session, restaurant, category, temp_storage, sample_image_bytes
    ):
        cdn_service = ProductService(
            blob_store=FileService(storage_root=temp_storage, public_url="https://cdn.example.com/")
        )
        raw = product_fields(restaurant, category)
        raw["imagen"] = UploadedImage(filename="plato.jpg", content=sample_image_bytes)

        created = await cdn_service.create_product(db_session, raw)
        listed = await cdn_service.list_by_restaurant(db_session, restaurant.id)

        expected = f"https://cdn.example.com/storage/{created.imagen}"
        assert created.model_dump()["imagen_url"] == expected
        assert listed[0].model_dump(mode="json")["imagen_url"] == expected

    @pytest.mark.asyncio
    async def test_negative_price_creates_nothing(
        self, service, db_session, restaurant, category, temp_storage, sample_image_bytes
    ):
        raw = product_fields(restaurant, category, precio="-1")
        raw["imagen"] = UploadedImage(filename="plato.jpg", content=sample_image_bytes)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_product(db_session, raw)

        assert "precio" in exc_info.value.errors
        assert await count_products(db_session) == 0
        assert stored_files(temp_storage) == []

    @pytest.mark.asyncio
    async def test_insert_failure_removes_stored_image(
        self, service, db_session, restaurant, category, temp_storage, sample_image_bytes
    ):
        raw = product_fields(restaurant, category)
        raw["imagen"] = UploadedImage(filename="plato.jpg", content=sample_image_bytes)

        failing_commit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")))
        with patch.object(db_session, "commit", failing_commit):
            with pytest.raises(DatabaseError):
                await service.create_product(db_session, raw)

        assert stored_files(temp_storage) == []


class TestUpdateProduct:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, service, db_session, restaurant, category):
        created = await service.create_product(db_session, product_fields(restaurant, category))

        updated = await service.update_product(db_session, created.id, {"precio": "12"})

        assert updated.precio == 12.0
        assert updated.nombre == created.nombre
        assert updated.descripcion == created.descripcion
        assert updated.disponible is True

    @pytest.mark.asyncio
    async def test_update_disponible_from_string(self, service, db_session, restaurant, category):
        created = await service.create_product(db_session, product_fields(restaurant, category))
        updated = await service.update_product(db_session, created.id, {"disponible": "0"})
        assert updated.disponible is False

    @pytest.mark.asyncio
    async def test_update_moves_product_to_another_category(
        self, service, db_session, restaurant, category
    ):
        created = await service.create_product(db_session, product_fields(restaurant, category))
        drinks = await add_category(db_session, restaurant.id, nombre="Bebidas")

        updated = await service.update_product(db_session, created.id, {"categoria_id": drinks.id})

        assert updated.categoria_id == drinks.id
        assert updated.categoria.nombre == "Bebidas"

    @pytest.mark.asyncio
    async def test_image_replacement(
        self, service, db_session, restaurant, category, sample_image_bytes, sample_png_bytes
    ):
        raw = product_fields(restaurant, category)
        raw["imagen"] = UploadedImage(filename="a.jpg", content=sample_image_bytes)
        created = await service.create_product(db_session, raw)
        old_path = created.imagen

        updated = await service.update_product(
            db_session,
            created.id,
            {"imagen": UploadedImage(filename="b.png", content=sample_png_bytes)},
        )

        assert updated.imagen != old_path
        assert updated.imagen.endswith(".png")
        assert not service.blob_store.exists(old_path)
        assert service.blob_store.exists(updated.imagen)

    @pytest.mark.asyncio
    async def test_commit_failure_removes_new_image(
        self, service, db_session, restaurant, category, temp_storage, sample_png_bytes
    ):
        created = await service.create_product(db_session, product_fields(restaurant, category))

        failing_commit = AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("disk I/O error")))
        with patch.object(db_session, "commit", failing_commit):
            with pytest.raises(DatabaseError):
                await service.update_product(
                    db_session,
                    created.id,
                    {"imagen": UploadedImage(filename="b.png", content=sample_png_bytes)},
                )

        assert stored_files(temp_storage) == []

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, service, db_session):
        with pytest.raises(NotFoundError):
            await service.update_product(db_session, 404, {"precio": "1"})

    @pytest.mark.asyncio
    async def test_invalid_update_changes_nothing(self, service, db_session, restaurant, category):
        created = await service.create_product(db_session, product_fields(restaurant, category))

        with pytest.raises(ValidationError):
            await service.update_product(db_session, created.id, {"precio": "-3"})

        fetched = await service.get_product(db_session, created.id)
        assert fetched.precio == 10.5


class TestDeleteProduct:

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_image(
        self, service, db_session, restaurant, category, sample_gif_bytes
    ):
        raw = product_fields(restaurant, category)
        raw["imagen"] = UploadedImage(filename="c.gif", content=sample_gif_bytes)
        created = await service.create_product(db_session, raw)

        await service.delete_product(db_session, created.id)

        assert not service.blob_store.exists(created.imagen)
        with pytest.raises(NotFoundError):
            await service.get_product(db_session, created.id)

    @pytest.mark.asyncio
    async def test_delete_survives_image_delete_failure(
        self, service, db_session, restaurant, category, sample_image_bytes
    ):
        raw = product_fields(restaurant, category)
        raw["imagen"] = UploadedImage(filename="a.jpg", content=sample_image_bytes)
        created = await service.create_product(db_session, raw)

        with patch.object(service.blob_store, "delete", AsyncMock(return_value=False)):
            await service.delete_product(db_session, created.id)

        assert await count_products(db_session) == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, service, db_session):
        with pytest.raises(NotFoundError, match="Producto con ID 77 no encontrado"):
            await service.delete_product(db_session, 77)


class TestListProducts:

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, service, db_session):
        with pytest.raises(NotFoundError):
            await service.get_product(db_session, 1)

    @pytest.mark.asyncio
    async def test_list_by_restaurant_and_category(self, service, db_session, restaurant, category):
        other_restaurant = await add_restaurant(db_session, nombre="Otro", usuario_admin_id=2)
        other_category = await add_category(db_session, other_restaurant.id, nombre="Bebidas")

        first = await service.create_product(db_session, product_fields(restaurant, category))
        second = await service.create_product(
            db_session, product_fields(restaurant, category, nombre="Papas")
        )
        await service.create_product(
            db_session, product_fields(other_restaurant, other_category, nombre="Agua")
        )

        by_restaurant = await service.list_by_restaurant(db_session, restaurant.id)
        assert [p.id for p in by_restaurant] == [first.id, second.id]
        assert all(p.restaurante.nombre == "La Terraza" for p in by_restaurant)

        by_category = await service.list_by_category(db_session, other_category.id)
        assert [p.nombre for p in by_category] == ["Agua"]
        assert by_category[0].categoria.nombre == "Bebidas"

        assert len(await service.list_products(db_session)) == 3

    @pytest.mark.asyncio
    async def test_list_empty(self, service, db_session):
        assert await service.list_products(db_session) == []
        assert await service.list_by_restaurant(db_session, 1) == []

    @pytest.mark.asyncio
    async def test_ids_beyond_key_range(self, service, db_session):
        with pytest.raises(NotFoundError):
            await service.get_product(db_session, 2 ** 63)
        assert await service.list_by_category(db_session, 2 ** 31) == []
