"""
Menu API Backend: Product SQLAlchemy Model
===========================================

What:  ORM model for the `productos` table (menu items).
Who:   Used by ProductService for CRUD operations and by Alembic.

Table Design:
    - restaurante_id / categoria_id: foreign keys; existence is checked by the
      validation layer before every write
    - precio: NUMERIC(10, 2) read back as float; never negative
    - imagen: relative path inside the storage root (e.g. productos/ab12.jpg),
      NULL when the product has no image. The public URL is derived at
      serialization time and never stored.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from menu_api.database import Base
from menu_api.models._timestamps import TimestampMixin


class Product(TimestampMixin, Base):
    """
    A menu item.

    Lifecycle:
        1. Created with or without an image
        2. Updated partially; a new image replaces (and deletes) the old file
        3. Deleted together with its image file
    """

    __tablename__ = "productos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    restaurante_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("restaurantes.id"),
        nullable=False,
        index=True,
    )

    categoria_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categorias_menu.id"),
        nullable=False,
        index=True,
    )

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)

    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    precio: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False),
        nullable=False,
    )

    disponible: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
    )

    imagen: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Relative path from storage root to the product image",
    )

    def __repr__(self) -> str:
        return (
            f"<Product(id={self.id}, nombre='{self.nombre}', "
            f"restaurante_id={self.restaurante_id}, categoria_id={self.categoria_id})>"
        )
