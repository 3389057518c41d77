"""
Menu API Backend: Product Schemas
==================================

What:  Input models for product create/update and the product record.
How:   Form fields arrive as strings; pydantic coerces ids and price, and
       `disponible` goes through parse_availability so "true", "1" and a
       JSON true all end up as the same bool.

imagen_url:
    Filled in by the service that builds the record, using its blob store's
    URL rule. The serializer leaves the key out when there is no image.
"""

from datetime import datetime
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)

from menu_api.schemas.common import RecordId, parse_availability, reject_null

# precio is NUMERIC(10, 2)
MAX_PRICE = 99_999_999.99


class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    restaurante_id: RecordId
    categoria_id: RecordId
    nombre: str = Field(max_length=255)
    descripcion: Optional[str] = None
    precio: float = Field(ge=0, le=MAX_PRICE, allow_inf_nan=False)
    disponible: bool

    @field_validator("disponible", mode="before")
    @classmethod
    def _availability(cls, v):
        return parse_availability(v)


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    restaurante_id: Optional[RecordId] = None
    categoria_id: Optional[RecordId] = None
    nombre: Optional[str] = Field(default=None, max_length=255)
    descripcion: Optional[str] = None
    precio: Optional[float] = Field(default=None, ge=0, le=MAX_PRICE, allow_inf_nan=False)
    disponible: Optional[bool] = None

    @field_validator("restaurante_id", "categoria_id", "nombre", "precio", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)

    @field_validator("disponible", mode="before")
    @classmethod
    def _availability(cls, v):
        return parse_availability(v)


class ProductRecord(BaseModel):
    """A product row, without relations."""

    id: int
    restaurante_id: int
    categoria_id: int
    nombre: str
    descripcion: Optional[str] = None
    precio: float
    disponible: bool
    imagen: Optional[str] = None
    imagen_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @model_serializer(mode="wrap")
    def _drop_empty_image_url(self, handler: SerializerFunctionWrapHandler):
        data = handler(self)
        if data.get("imagen_url") is None:
            data.pop("imagen_url", None)
        return data
