"""
Menu API Backend: Restaurant Schemas
=====================================

What:  Input models for creating/updating restaurants and the bare
       restaurant record returned by the API.

Input models:
    RestaurantCreate: every field required
    RestaurantUpdate: every field optional; a supplied field is checked with
                      the same rules as on create
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from menu_api.schemas.common import RecordId, reject_null

RestaurantState = Literal["Abierto", "Cerrado"]


class RestaurantCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    usuario_admin_id: RecordId
    nombre: str = Field(max_length=255)
    direccion: str
    telefono: str = Field(max_length=20)
    estado: RestaurantState


class RestaurantUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    usuario_admin_id: Optional[RecordId] = None
    nombre: Optional[str] = Field(default=None, max_length=255)
    direccion: Optional[str] = None
    telefono: Optional[str] = Field(default=None, max_length=20)
    estado: Optional[RestaurantState] = None

    @field_validator(
        "usuario_admin_id", "nombre", "direccion", "telefono", "estado",
        mode="before",
    )
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class RestaurantRecord(BaseModel):
    """A restaurant row as returned by create/update."""

    id: int
    usuario_admin_id: int
    nombre: str
    direccion: str
    telefono: str
    estado: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
