"""expense categories, operational expenses and sales records

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0003"
down_revision: Union[str, Sequence[str], None] = "20261019_0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "expense_categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_salary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_expense_categories_id"), "expense_categories", ["id"], unique=False)
    op.create_index(op.f("ix_expense_categories_user_id"), "expense_categories", ["user_id"], unique=False)

    op.create_table(
        "operational_expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("expense_category_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["expense_category_id"], ["expense_categories.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id",
            "expense_category_id",
            "year",
            "month",
            name="uq_operational_expenses_category_period",
        ),
    )
    op.create_index(
        op.f("ix_operational_expenses_expense_category_id"),
        "operational_expenses",
        ["expense_category_id"],
        unique=False,
    )
    op.create_index(op.f("ix_operational_expenses_id"), "operational_expenses", ["id"], unique=False)
    op.create_index(op.f("ix_operational_expenses_month"), "operational_expenses", ["month"], unique=False)
    op.create_index(op.f("ix_operational_expenses_user_id"), "operational_expenses", ["user_id"], unique=False)
    op.create_index(op.f("ix_operational_expenses_year"), "operational_expenses", ["year"], unique=False)

    op.create_table(
        "sales_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("number_of_sales", sa.Integer(), nullable=False),
        sa.Column("hpp", sa.Numeric(14, 2), nullable=False),
        sa.Column("selling_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "product_id", "year", "month", name="uq_sales_records_product_period"),
    )
    op.create_index(op.f("ix_sales_records_id"), "sales_records", ["id"], unique=False)
    op.create_index(op.f("ix_sales_records_month"), "sales_records", ["month"], unique=False)
    op.create_index(op.f("ix_sales_records_product_id"), "sales_records", ["product_id"], unique=False)
    op.create_index(op.f("ix_sales_records_user_id"), "sales_records", ["user_id"], unique=False)
    op.create_index(op.f("ix_sales_records_year"), "sales_records", ["year"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_sales_records_year"), table_name="sales_records")
    op.drop_index(op.f("ix_sales_records_user_id"), table_name="sales_records")
    op.drop_index(op.f("ix_sales_records_product_id"), table_name="sales_records")
    op.drop_index(op.f("ix_sales_records_month"), table_name="sales_records")
    op.drop_index(op.f("ix_sales_records_id"), table_name="sales_records")
    op.drop_table("sales_records")

    op.drop_index(op.f("ix_operational_expenses_year"), table_name="operational_expenses")
    op.drop_index(op.f("ix_operational_expenses_user_id"), table_name="operational_expenses")
    op.drop_index(op.f("ix_operational_expenses_month"), table_name="operational_expenses")
    op.drop_index(op.f("ix_operational_expenses_id"), table_name="operational_expenses")
    op.drop_index(op.f("ix_operational_expenses_expense_category_id"), table_name="operational_expenses")
    op.drop_table("operational_expenses")

    op.drop_index(op.f("ix_expense_categories_user_id"), table_name="expense_categories")
    op.drop_index(op.f("ix_expense_categories_id"), table_name="expense_categories")
    op.drop_table("expense_categories")
