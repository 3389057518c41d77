"""Create restaurantes, categorias_menu and productos

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Initial schema: restaurants, their menu categories and products.
How:   Foreign keys point from categorias_menu and productos to restaurantes,
       and from productos to categorias_menu. Tables are created parent
       first and dropped child first.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "restaurantes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "usuario_admin_id",
            sa.Integer(),
            nullable=False,
            comment="Owner (admin user) of this restaurant",
        ),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("direccion", sa.Text(), nullable=False),
        sa.Column("telefono", sa.String(20), nullable=False),
        sa.Column("estado", sa.String(20), nullable=False, comment="Abierto | Cerrado"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_restaurantes_usuario_admin_id", "restaurantes", ["usuario_admin_id"])

    op.create_table(
        "categorias_menu",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("restaurante_id", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurante_id"], ["restaurantes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_categorias_menu_restaurante_id", "categorias_menu", ["restaurante_id"]
    )

    op.create_table(
        "productos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("restaurante_id", sa.Integer(), nullable=False),
        sa.Column("categoria_id", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(255), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("precio", sa.Numeric(10, 2), nullable=False),
        sa.Column("disponible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "imagen",
            sa.String(255),
            nullable=True,
            comment="Relative path from storage root to the product image",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurante_id"], ["restaurantes.id"]),
        sa.ForeignKeyConstraint(["categoria_id"], ["categorias_menu.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_productos_restaurante_id", "productos", ["restaurante_id"])
    op.create_index("ix_productos_categoria_id", "productos", ["categoria_id"])


def downgrade() -> None:
    op.drop_index("ix_productos_categoria_id", table_name="productos")
    op.drop_index("ix_productos_restaurante_id", table_name="productos")
    op.drop_table("productos")
    op.drop_index("ix_categorias_menu_restaurante_id", table_name="categorias_menu")
    op.drop_table("categorias_menu")
    op.drop_index("idx_restaurantes_usuario_admin_id", table_name="restaurantes")
    op.drop_table("restaurantes")
