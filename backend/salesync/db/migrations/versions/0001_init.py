"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]


def upgrade():
    op.create_table(
        "store",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=10), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_store_code", "store", ["code"], unique=True)

    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ref_code", sa.String(length=20), nullable=False),
        sa.Column("product_code", sa.String(length=20), nullable=True),
        sa.Column("section", sa.String(length=50), nullable=True),
        sa.Column("group_name", sa.String(length=50), nullable=True),
        sa.Column("subgroup", sa.String(length=50), nullable=True),
        sa.Column("brand", sa.String(length=50), nullable=True),
        sa.Column("description", sa.String(length=250), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_product_ref_code", "product", ["ref_code"], unique=True)

    op.create_table(
        "sale_line",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sale_code", sa.String(length=20), nullable=False),
        sa.Column("product_ref_code", sa.String(length=20), sa.ForeignKey("product.ref_code"), nullable=False),
        sa.Column("item_sequence", sa.Integer(), nullable=False),
        sa.Column("store_code", sa.String(length=10), nullable=False),
        sa.Column("collaborator_code", sa.String(length=10), nullable=True),
        sa.Column("channel", sa.String(length=16), nullable=False, server_default="invoiced"),
        sa.Column("ncm", sa.String(length=8), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unit_price", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("total_price", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("sold_at", sa.DateTime(), nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("sale_code", "product_ref_code", "item_sequence", name="uq_sale_line_key"),
    )
    op.create_index("ix_sale_line_sale_code", "sale_line", ["sale_code"])
    op.create_index("ix_sale_line_product_ref_code", "sale_line", ["product_ref_code"])
    op.create_index("ix_sale_line_sale_date", "sale_line", ["sale_date"])
    op.create_index("ix_sale_line_store_date", "sale_line", ["store_code", "sale_date"])

    op.create_table(
        "daily_sale",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store_code", sa.String(length=10), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("invoiced", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("pos", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("exchange", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(15, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("store_code", "date", name="uq_daily_sale_store_date"),
    )
    op.create_index("ix_daily_sale_store_code", "daily_sale", ["store_code"])
    op.create_index("ix_daily_sale_date", "daily_sale", ["date"])

    op.create_table(
        "monthly_sale",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store_code", sa.String(length=10), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("total", sa.Numeric(15, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("store_code", "month", name="uq_monthly_sale_store_month"),
    )
    op.create_index("ix_monthly_sale_store_code", "monthly_sale", ["store_code"])
    op.create_index("ix_monthly_sale_month", "monthly_sale", ["month"])

    op.create_table(
        "yearly_sale",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store_code", sa.String(length=10), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total", sa.Numeric(15, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("store_code", "year", name="uq_yearly_sale_store_year"),
    )
    op.create_index("ix_yearly_sale_store_code", "yearly_sale", ["store_code"])
    op.create_index("ix_yearly_sale_year", "yearly_sale", ["year"])


def downgrade():
    op.drop_table("yearly_sale")
    op.drop_table("monthly_sale")
    op.drop_table("daily_sale")
    op.drop_table("sale_line")
    op.drop_table("product")
    op.drop_table("store")
