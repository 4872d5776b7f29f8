"""products, cost components, product costs and price schemes

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0002"
down_revision: Union[str, Sequence[str], None] = "20261019_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    component_type_enum = sa.Enum(
        "DIRECT_MATERIAL",
        "INDIRECT_MATERIAL",
        "DIRECT_LABOR",
        "OVERHEAD",
        "PACKAGING",
        "OTHER",
        name="componenttype",
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("sku", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("hpp", sa.Numeric(14, 2), nullable=True),
        sa.Column("selling_price", sa.Numeric(14, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_products_id"), "products", ["id"], unique=False)
    op.create_index(op.f("ix_products_name"), "products", ["name"], unique=False)
    op.create_index(op.f("ix_products_sku"), "products", ["sku"], unique=True)
    op.create_index(op.f("ix_products_user_id"), "products", ["user_id"], unique=False)

    op.create_table(
        "cost_components",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("component_type", component_type_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cost_components_component_type"), "cost_components", ["component_type"], unique=False)
    op.create_index(op.f("ix_cost_components_id"), "cost_components", ["id"], unique=False)
    op.create_index(op.f("ix_cost_components_name"), "cost_components", ["name"], unique=False)
    op.create_index(op.f("ix_cost_components_user_id"), "cost_components", ["user_id"], unique=False)

    op.create_table(
        "product_costs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("cost_component_id", sa.Integer(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 2), nullable=False),
        sa.Column("conversion_qty", sa.Numeric(14, 2), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["cost_component_id"], ["cost_components.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_id", "cost_component_id", name="uq_product_costs_product_component"),
    )
    op.create_index(op.f("ix_product_costs_cost_component_id"), "product_costs", ["cost_component_id"], unique=False)
    op.create_index(op.f("ix_product_costs_id"), "product_costs", ["id"], unique=False)
    op.create_index(op.f("ix_product_costs_product_id"), "product_costs", ["product_id"], unique=False)

    op.create_table(
        "price_schemes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("level_name", sa.String(length=100), nullable=False),
        sa.Column("level_order", sa.Integer(), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(7, 2), nullable=False),
        sa.Column("purchase_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("selling_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("profit_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_id", "level_order", name="uq_price_schemes_product_level"),
    )
    op.create_index(op.f("ix_price_schemes_id"), "price_schemes", ["id"], unique=False)
    op.create_index(op.f("ix_price_schemes_product_id"), "price_schemes", ["product_id"], unique=False)
    op.create_index(op.f("ix_price_schemes_user_id"), "price_schemes", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_price_schemes_user_id"), table_name="price_schemes")
    op.drop_index(op.f("ix_price_schemes_product_id"), table_name="price_schemes")
    op.drop_index(op.f("ix_price_schemes_id"), table_name="price_schemes")
    op.drop_table("price_schemes")

    op.drop_index(op.f("ix_product_costs_product_id"), table_name="product_costs")
    op.drop_index(op.f("ix_product_costs_id"), table_name="product_costs")
    op.drop_index(op.f("ix_product_costs_cost_component_id"), table_name="product_costs")
    op.drop_table("product_costs")

    op.drop_index(op.f("ix_cost_components_user_id"), table_name="cost_components")
    op.drop_index(op.f("ix_cost_components_name"), table_name="cost_components")
    op.drop_index(op.f("ix_cost_components_id"), table_name="cost_components")
    op.drop_index(op.f("ix_cost_components_component_type"), table_name="cost_components")
    op.drop_table("cost_components")

    op.drop_index(op.f("ix_products_user_id"), table_name="products")
    op.drop_index(op.f("ix_products_sku"), table_name="products")
    op.drop_index(op.f("ix_products_name"), table_name="products")
    op.drop_index(op.f("ix_products_id"), table_name="products")
    op.drop_table("products")

    sa.Enum(name="componenttype").drop(op.get_bind(), checkfirst=True)
