"""
Menu API Backend: Menu Category SQLAlchemy Model
=================================================

What:  ORM model for the `categorias_menu` table (menu sections such as
       "Entradas" or "Bebidas"), owned by a restaurant.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from menu_api.database import Base
from menu_api.models._timestamps import TimestampMixin


class Category(TimestampMixin, Base):
    __tablename__ = "categorias_menu"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    restaurante_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("restaurantes.id"),
        nullable=False,
        index=True,
    )

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)

    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, nombre='{self.nombre}', restaurante_id={self.restaurante_id})>"
