"""
Menu API Backend: Input Validation Layer
=========================================

What:  Turns a raw request mapping (form fields or JSON) into normalized,
       typed column values, or raises ValidationError with a
       field → [messages] map.
How:   1. clean_input(): trim strings, empty strings become None
       2. Parse with the operation's pydantic input model
          (create = every required field checked, update = only supplied
          fields checked)
       3. Translate pydantic errors into Spanish messages
       4. Check that referenced restaurants/categories exist
       5. Validate the uploaded image, if any
       All failures are collected before raising, so the client sees every
       problem in one 422 response.
Who:   Called by the resource services before any write.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.exceptions import ValidationError
from menu_api.models import Category, Restaurant
from menu_api.schemas.category import CategoryCreate, CategoryUpdate
from menu_api.schemas.common import is_record_id
from menu_api.schemas.product import ProductCreate, ProductUpdate
from menu_api.schemas.restaurant import RestaurantCreate, RestaurantUpdate
from menu_api.services.file_service import FileService, UploadedImage, file_service

logger = logging.getLogger(__name__)

ErrorMap = Dict[str, List[str]]

_INT = TypeAdapter(int)

RESTAURANT_NOT_FOUND = "El restaurante seleccionado no existe"
CATEGORY_NOT_FOUND = "La categoría seleccionada no existe"
INVALID_IMAGE = "El archivo debe ser una imagen válida"

# ── Message Tables ────────────────────────────────────────────────────────
# Keyed by pydantic error type; {field} and the error's ctx keys
# (max_length, ge, ...) are available as placeholders.
GENERIC_MESSAGES: Dict[str, str] = {
    "missing": "El campo {field} es obligatorio.",
    "int_parsing": "El campo {field} debe ser un número entero.",
    "int_type": "El campo {field} debe ser un número entero.",
    "int_from_float": "El campo {field} debe ser un número entero.",
    "float_parsing": "El campo {field} debe ser un número.",
    "float_type": "El campo {field} debe ser un número.",
    "finite_number": "El campo {field} debe ser un número.",
    "string_type": "El campo {field} debe ser una cadena de texto.",
    "string_too_long": "El campo {field} no debe superar {max_length} caracteres.",
    "greater_than_equal": "El campo {field} debe ser al menos {ge}.",
    "less_than_equal": "El campo {field} no debe ser mayor que {le}.",
    "literal_error": "El valor seleccionado para {field} no es válido.",
    "availability": "El campo {field} debe ser true o false.",
}

# No row can have an id outside the key range
_OUT_OF_RANGE_REFERENCES: Dict[Tuple[str, str], str] = {
    ("restaurante_id", "greater_than_equal"): RESTAURANT_NOT_FOUND,
    ("restaurante_id", "less_than_equal"): RESTAURANT_NOT_FOUND,
    ("categoria_id", "greater_than_equal"): CATEGORY_NOT_FOUND,
    ("categoria_id", "less_than_equal"): CATEGORY_NOT_FOUND,
}

PRODUCT_MESSAGES: Dict[Tuple[str, str], str] = {
    **_OUT_OF_RANGE_REFERENCES,
    ("restaurante_id", "missing"): "El ID del restaurante es obligatorio",
    ("categoria_id", "missing"): "El ID de la categoría es obligatorio",
    ("nombre", "missing"): "El nombre del producto es obligatorio",
    ("precio", "missing"): "El precio es obligatorio",
    ("precio", "float_parsing"): "El precio debe ser un número válido",
    ("precio", "float_type"): "El precio debe ser un número válido",
    ("precio", "finite_number"): "El precio debe ser un número válido",
    ("precio", "greater_than_equal"): "El precio no puede ser negativo",
    ("precio", "less_than_equal"): "El precio no puede superar 99999999.99",
    ("disponible", "missing"): "La disponibilidad es obligatoria",
    ("disponible", "availability"): "La disponibilidad debe ser true o false",
}

RESTAURANT_MESSAGES: Dict[Tuple[str, str], str] = {
    ("usuario_admin_id", "greater_than_equal"): "El usuario administrador debe ser un ID válido",
    ("usuario_admin_id", "less_than_equal"): "El usuario administrador debe ser un ID válido",
    ("estado", "literal_error"): "El estado debe ser Abierto o Cerrado",
}

CATEGORY_MESSAGES: Dict[Tuple[str, str], str] = {
    **_OUT_OF_RANGE_REFERENCES,
    ("restaurante_id", "missing"): "El ID del restaurante es obligatorio",
    ("nombre", "missing"): "El nombre de la categoría es obligatorio",
}


@dataclass
class ProductInput:
    """Validated product write: column values plus an optional image."""

    fields: Dict[str, Any] = field(default_factory=dict)
    image: Optional[UploadedImage] = None
    image_extension: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════


def clean_input(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Trims string values and converts empty strings to None."""
    cleaned: Dict[str, Any] = {}
    for key, value in raw.items():
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                value = None
        cleaned[key] = value
    return cleaned


def translate_errors(
    exc: PydanticValidationError,
    overrides: Mapping[Tuple[str, str], str],
) -> ErrorMap:
    """Maps pydantic errors to {field: [message, ...]} using the message tables."""
    errors: ErrorMap = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        field_name = str(loc[0]) if loc else "general"
        error_type = err.get("type", "")
        template = overrides.get((field_name, error_type)) or GENERIC_MESSAGES.get(error_type)
        if template is None:
            message = err.get("msg", "Valor no válido")
        else:
            try:
                message = template.format(**{**(err.get("ctx") or {}), "field": field_name})
            except (KeyError, IndexError):
                message = err.get("msg", "Valor no válido")
        errors.setdefault(field_name, []).append(message)
    return errors


def _parse(
    model: Type[BaseModel],
    data: Dict[str, Any],
    overrides: Mapping[Tuple[str, str], str],
    partial: bool,
) -> Tuple[Dict[str, Any], ErrorMap]:
    """
    Runs the pydantic model. Returns (values, errors); values only holds the
    supplied fields in update mode.
    """
    if not partial:
        # In create mode a null value is the same as an absent one
        data = {k: v for k, v in data.items() if v is not None}
    try:
        parsed = model.model_validate(data)
    except PydanticValidationError as exc:
        return {}, translate_errors(exc, overrides)
    return parsed.model_dump(exclude_unset=partial), {}


def _reference_id(
    name: str,
    values: Dict[str, Any],
    data: Dict[str, Any],
    errors: ErrorMap,
) -> Optional[int]:
    """
    The integer to run an existence check with, or None when the field was
    not supplied or already failed type validation.
    """
    if name in errors:
        return None
    if name in values:
        return values[name]
    if data.get(name) is None:
        return None
    return _INT.validate_python(data[name])


async def _check_exists(
    db: AsyncSession,
    model: type,
    name: str,
    pk: Optional[int],
    message: str,
    errors: ErrorMap,
) -> None:
    if pk is None:
        return
    if not is_record_id(pk) or await db.get(model, pk) is None:
        errors.setdefault(name, []).append(message)


def _raise_if_errors(errors: ErrorMap, resource: str) -> None:
    if errors:
        logger.info("Validation failed for %s: %s", resource, sorted(errors))
        raise ValidationError(errors=errors)


# ══════════════════════════════════════════════════════════════════════════
# Per-resource validation
# ══════════════════════════════════════════════════════════════════════════


async def validate_product(
    db: AsyncSession,
    raw: Mapping[str, Any],
    *,
    partial: bool,
    blob_store: Optional[FileService] = None,
) -> ProductInput:
    """
    Validate a product create (partial=False) or update (partial=True).

    Field rules:
        restaurante_id  integer, must exist in restaurantes
        categoria_id    integer, must exist in categorias_menu
        nombre          string, max 255
        descripcion     string or null
        precio          number, 0 to 99999999.99
        disponible      true/false/1/0 (bool or string) → bool
        imagen          jpeg/png/jpg/gif file, max 2 MiB

    Raises:
        ValidationError carrying every failing field.
    """
    blob_store = blob_store or file_service
    data = clean_input(raw)
    image = data.pop("imagen", None)

    values, errors = _parse(
        ProductUpdate if partial else ProductCreate, data, PRODUCT_MESSAGES, partial
    )

    await _check_exists(
        db, Restaurant, "restaurante_id",
        _reference_id("restaurante_id", values, data, errors),
        RESTAURANT_NOT_FOUND, errors,
    )
    await _check_exists(
        db, Category, "categoria_id",
        _reference_id("categoria_id", values, data, errors),
        CATEGORY_NOT_FOUND, errors,
    )

    result = ProductInput(fields=values)
    if image is not None:
        if not isinstance(image, UploadedImage):
            errors.setdefault("imagen", []).append(INVALID_IMAGE)
        else:
            try:
                result.image_extension = blob_store.validate_image(image)
                result.image = image
            except ValidationError as exc:
                for messages in exc.errors.values():
                    errors.setdefault("imagen", []).extend(messages)

    _raise_if_errors(errors, "producto")
    return result


async def validate_restaurant(raw: Mapping[str, Any], *, partial: bool) -> Dict[str, Any]:
    """
    Validate a restaurant create/update.

    usuario_admin_id integer >= 1, nombre max 255, direccion string,
    telefono max 20, estado "Abierto" | "Cerrado".
    """
    data = clean_input(raw)
    values, errors = _parse(
        RestaurantUpdate if partial else RestaurantCreate, data, RESTAURANT_MESSAGES, partial
    )
    _raise_if_errors(errors, "restaurante")
    return values


async def validate_category(
    db: AsyncSession,
    raw: Mapping[str, Any],
    *,
    partial: bool,
) -> Dict[str, Any]:
    data = clean_input(raw)
    values, errors = _parse(
        CategoryUpdate if partial else CategoryCreate, data, CATEGORY_MESSAGES, partial
    )
    await _check_exists(
        db, Restaurant, "restaurante_id",
        _reference_id("restaurante_id", values, data, errors),
        RESTAURANT_NOT_FOUND, errors,
    )
    _raise_if_errors(errors, "categoria")
    return values
