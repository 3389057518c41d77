"""
Menu API Backend: Menu Category Schemas
========================================
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from menu_api.schemas.common import RecordId, reject_null


class CategoryCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    restaurante_id: RecordId
    nombre: str = Field(max_length=255)
    descripcion: Optional[str] = None


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    restaurante_id: Optional[RecordId] = None
    nombre: Optional[str] = Field(default=None, max_length=255)
    descripcion: Optional[str] = None

    @field_validator("restaurante_id", "nombre", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class CategoryRecord(BaseModel):
    id: int
    restaurante_id: int
    nombre: str
    descripcion: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
