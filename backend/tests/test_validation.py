"""
Menu API Backend: Validation Layer Tests
=========================================

What:  Tests for input cleaning, error translation and the per-resource
       validators, including the referential checks against the database.
"""

import pytest

from menu_api.exceptions import NotFoundError, ValidationError
from menu_api.services.file_service import UploadedImage
from menu_api.services.validation import (
    clean_input,
    validate_category,
    validate_product,
    validate_restaurant,
)


def product_fields(restaurant, category, **overrides):
    fields = {
        "restaurante_id": str(restaurant.id),
        "categoria_id": str(category.id),
        "nombre": "Hamburguesa",
        "descripcion": "Con queso",
        "precio": "10.50",
        "disponible": "true",
    }
    fields.update(overrides)
    return fields


class TestCleanInput:

    def test_trims_strings_and_nulls_empty_ones(self):
        assert clean_input({"nombre": "  Pizza  ", "descripcion": "   ", "precio": 5}) == {
            "nombre": "Pizza",
            "descripcion": None,
            "precio": 5,
        }


class TestValidateProduct:

    @pytest.mark.asyncio
    async def test_valid_create_coerces_types(self, db_session, restaurant, category):
        result = await validate_product(
            db_session, product_fields(restaurant, category), partial=False
        )

        assert result.fields["restaurante_id"] == restaurant.id
        assert result.fields["precio"] == 10.5
        assert result.fields["disponible"] is True
        assert result.image is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("1", True), (True, True), (1, True),
        ("false", False), ("0", False), (False, False), ("FALSE", False),
    ])
    async def test_availability_encodings(self, db_session, restaurant, category, raw, expected):
        result = await validate_product(
            db_session, product_fields(restaurant, category, disponible=raw), partial=False
        )
        assert result.fields["disponible"] is expected

    @pytest.mark.asyncio
    async def test_invalid_availability(self, db_session, restaurant, category):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(
                db_session, product_fields(restaurant, category, disponible="tal vez"), partial=False
            )
        assert exc_info.value.errors["disponible"] == ["La disponibilidad debe ser true o false"]

    @pytest.mark.asyncio
    async def test_missing_fields_all_reported(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, {"descripcion": "solo esto"}, partial=False)

        errors = exc_info.value.errors
        assert errors["restaurante_id"] == ["El ID del restaurante es obligatorio"]
        assert errors["categoria_id"] == ["El ID de la categoría es obligatorio"]
        assert errors["nombre"] == ["El nombre del producto es obligatorio"]
        assert errors["precio"] == ["El precio es obligatorio"]
        assert "disponible" in errors

    @pytest.mark.asyncio
    async def test_empty_string_counts_as_missing(self, db_session, restaurant, category):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(
                db_session, product_fields(restaurant, category, nombre="   "), partial=False
            )
        assert exc_info.value.errors == {"nombre": ["El nombre del producto es obligatorio"]}

    @pytest.mark.asyncio
    async def test_negative_price(self, db_session, restaurant, category):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(
                db_session, product_fields(restaurant, category, precio="-1"), partial=False
            )
        assert exc_info.value.errors == {"precio": ["El precio no puede ser negativo"]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("precio", ["100000000", 1e300])
    async def test_price_above_column_limit(self, db_session, restaurant, category, precio):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(
                db_session, product_fields(restaurant, category, precio=precio), partial=False
            )
        assert exc_info.value.errors == {"precio": ["El precio no puede superar 99999999.99"]}

    @pytest.mark.asyncio
    async def test_price_at_column_limit(self, db_session, restaurant, category):
        result = await validate_product(
            db_session, product_fields(restaurant, category, precio="99999999.99"), partial=False
        )
        assert result.fields["precio"] == 99999999.99

    @pytest.mark.asyncio
    async def test_reference_ids_beyond_key_range(self, db_session):
        raw = {
            "restaurante_id": str(2 ** 63),
            "categoria_id": "0",
            "nombre": "Taco",
            "precio": "3",
            "disponible": "1",
        }
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, raw, partial=False)

        assert exc_info.value.errors == {
            "restaurante_id": ["El restaurante seleccionado no existe"],
            "categoria_id": ["La categoría seleccionada no existe"],
        }

    @pytest.mark.asyncio
    async def test_partial_reference_beyond_key_range(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, {"categoria_id": 2 ** 31}, partial=True)
        assert exc_info.value.errors == {"categoria_id": ["La categoría seleccionada no existe"]}

    @pytest.mark.asyncio
    async def test_non_numeric_price(self, db_session, restaurant, category):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(
                db_session, product_fields(restaurant, category, precio="gratis"), partial=False
            )
        assert exc_info.value.errors == {"precio": ["El precio debe ser un número válido"]}

    @pytest.mark.asyncio
    async def test_name_too_long(self, db_session, restaurant, category):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(
                db_session, product_fields(restaurant, category, nombre="x" * 256), partial=False
            )
        assert exc_info.value.errors["nombre"] == ["El campo nombre no debe superar 255 caracteres."]

    @pytest.mark.asyncio
    async def test_unknown_references(self, db_session):
        raw = {
            "restaurante_id": "999",
            "categoria_id": "998",
            "nombre": "Taco",
            "precio": "3",
            "disponible": "1",
        }
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, raw, partial=False)

        assert exc_info.value.errors == {
            "restaurante_id": ["El restaurante seleccionado no existe"],
            "categoria_id": ["La categoría seleccionada no existe"],
        }

    @pytest.mark.asyncio
    async def test_reference_checked_even_when_other_fields_fail(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, {"restaurante_id": "999"}, partial=False)
        assert exc_info.value.errors["restaurante_id"] == ["El restaurante seleccionado no existe"]

    @pytest.mark.asyncio
    async def test_partial_only_checks_supplied_fields(self, db_session):
        result = await validate_product(db_session, {"precio": "7"}, partial=True)
        assert result.fields == {"precio": 7.0}

    @pytest.mark.asyncio
    async def test_partial_rejects_null_for_required_column(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, {"nombre": ""}, partial=True)
        assert exc_info.value.errors == {"nombre": ["El nombre del producto es obligatorio"]}

    @pytest.mark.asyncio
    async def test_partial_allows_clearing_description(self, db_session):
        result = await validate_product(db_session, {"descripcion": ""}, partial=True)
        assert result.fields == {"descripcion": None}

    @pytest.mark.asyncio
    async def test_image_accepted(self, db_session, blob_store, restaurant, category, sample_png_bytes):
        raw = product_fields(restaurant, category)
        raw["imagen"] = UploadedImage(filename="plato.png", content=sample_png_bytes)

        result = await validate_product(db_session, raw, partial=False, blob_store=blob_store)

        assert result.image is raw["imagen"]
        assert result.image_extension == ".png"
        assert "imagen" not in result.fields

    @pytest.mark.asyncio
    async def test_image_errors_merged_with_field_errors(self, db_session, blob_store, restaurant, category):
        raw = product_fields(restaurant, category, precio="-5")
        raw["imagen"] = UploadedImage(filename="menu.pdf", content=b"%PDF-1.4")

        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, raw, partial=False, blob_store=blob_store)

        errors = exc_info.value.errors
        assert errors["precio"] == ["El precio no puede ser negativo"]
        assert errors["imagen"] == ["La imagen debe ser JPEG, PNG, JPG o GIF"]

    @pytest.mark.asyncio
    async def test_image_sent_as_text_rejected(self, db_session, restaurant, category):
        raw = product_fields(restaurant, category, imagen="foto.jpg")
        with pytest.raises(ValidationError) as exc_info:
            await validate_product(db_session, raw, partial=False)
        assert exc_info.value.errors == {"imagen": ["El archivo debe ser una imagen válida"]}


class TestValidateRestaurant:

    @pytest.mark.asyncio
    async def test_valid_create(self):
        values = await validate_restaurant(
            {
                "usuario_admin_id": "3",
                "nombre": "El Faro",
                "direccion": "Malecón 12",
                "telefono": "555-0199",
                "estado": "Cerrado",
            },
            partial=False,
        )
        assert values["usuario_admin_id"] == 3
        assert values["estado"] == "Cerrado"

    @pytest.mark.asyncio
    async def test_invalid_values(self):
        with pytest.raises(ValidationError) as exc_info:
            await validate_restaurant(
                {
                    "usuario_admin_id": "0",
                    "nombre": "El Faro",
                    "direccion": "Malecón 12",
                    "telefono": "1" * 21,
                    "estado": "Abierto 24h",
                },
                partial=False,
            )

        errors = exc_info.value.errors
        assert errors["usuario_admin_id"] == ["El usuario administrador debe ser un ID válido"]
        assert errors["telefono"] == ["El campo telefono no debe superar 20 caracteres."]
        assert errors["estado"] == ["El estado debe ser Abierto o Cerrado"]

    @pytest.mark.asyncio
    async def test_owner_id_beyond_key_range(self):
        with pytest.raises(ValidationError) as exc_info:
            await validate_restaurant({"usuario_admin_id": str(2 ** 63)}, partial=True)
        assert exc_info.value.errors == {
            "usuario_admin_id": ["El usuario administrador debe ser un ID válido"]
        }

    @pytest.mark.asyncio
    async def test_partial_estado_only(self):
        assert await validate_restaurant({"estado": "Cerrado"}, partial=True) == {"estado": "Cerrado"}


class TestValidateCategory:

    @pytest.mark.asyncio
    async def test_valid_create(self, db_session, restaurant):
        values = await validate_category(
            db_session, {"restaurante_id": restaurant.id, "nombre": "Postres"}, partial=False
        )
        assert values == {"restaurante_id": restaurant.id, "nombre": "Postres", "descripcion": None}

    @pytest.mark.asyncio
    async def test_unknown_restaurant(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await validate_category(
                db_session, {"restaurante_id": 42, "nombre": "Postres"}, partial=False
            )
        assert exc_info.value.errors == {"restaurante_id": ["El restaurante seleccionado no existe"]}


class TestExceptionContext:

    def test_validation_error_leaves_caller_context_alone(self):
        context = {"request": "abc"}

        exc = ValidationError(message="Nombre inválido", field="nombre", context=context)

        assert context == {"request": "abc"}
        assert exc.context == {"request": "abc", "field": "nombre"}
        assert exc.errors == {"nombre": ["Nombre inválido"]}

    def test_not_found_leaves_caller_context_alone(self):
        context = {"request": "abc"}

        exc = NotFoundError(resource="producto", resource_id=5, context=context)

        assert context == {"request": "abc"}
        assert exc.context["resource_id"] == 5
        assert exc.message == "Producto con ID 5 no encontrado"
