"""
Menu API Backend: Restaurant SQLAlchemy Model
==============================================

What:  ORM model for the `restaurantes` table.
Who:   Used by RestaurantService for CRUD and by the validation layer for
       restaurante_id existence checks.

Table Design:
    - usuario_admin_id: owner reference; the users table lives in another
      service, so this is a plain integer without a foreign key
    - estado: "Abierto" | "Cerrado", stored as a short string
    - Categories and products point here through their restaurante_id
      column; relations are composed by the services, not declared as ORM
      relationships
"""

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from menu_api.database import Base
from menu_api.models._timestamps import TimestampMixin

RESTAURANT_STATES = ("Abierto", "Cerrado")


class Restaurant(TimestampMixin, Base):
    __tablename__ = "restaurantes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    usuario_admin_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Owner (admin user) of this restaurant",
    )

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)

    direccion: Mapped[str] = mapped_column(Text, nullable=False)

    telefono: Mapped[str] = mapped_column(String(20), nullable=False)

    estado: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Abierto | Cerrado",
    )

    # "Restaurants by owner" is the only filtered listing on this table
    __table_args__ = (
        Index("idx_restaurantes_usuario_admin_id", "usuario_admin_id"),
    )

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, nombre='{self.nombre}', estado='{self.estado}')>"
