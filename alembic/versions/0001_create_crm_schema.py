from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "0001_create_crm_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    existing = set(inspector.get_table_names())

    if "customers" not in existing:
        op.create_table(
            "customers",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("first_name", sa.String(length=120), nullable=False),
            sa.Column("last_name", sa.String(length=120), nullable=False),
            sa.Column("phone", sa.String(length=10), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("account_type", sa.String(length=20), nullable=False, server_default="basic"),
            sa.UniqueConstraint("phone", name="uq_customers_phone"),
            sa.UniqueConstraint("email", name="uq_customers_email"),
        )

    if "addresses" not in existing:
        op.create_table(
            "addresses",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "customer_id",
                sa.Integer(),
                sa.ForeignKey("customers.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("line1", sa.String(length=255), nullable=False),
            sa.Column("city", sa.String(length=100), nullable=False),
            sa.Column("state", sa.String(length=100), nullable=True),
            sa.Column("pincode", sa.String(length=6), nullable=True),
        )
        op.create_index("ix_addresses_customer_id", "addresses", ["customer_id"], unique=False)
        op.create_index("ix_addresses_city", "addresses", ["city"], unique=False)

    if "orders" not in existing:
        op.create_table(
            "orders",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "customer_id",
                sa.Integer(),
                sa.ForeignKey("customers.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("order_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("status", sa.String(length=30), nullable=False),
        )
        op.create_index("ix_orders_customer_id", "orders", ["customer_id"], unique=False)
        op.create_index("ix_orders_order_date", "orders", ["order_date"], unique=False)

    if "payments" not in existing:
        op.create_table(
            "payments",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "customer_id",
                sa.Integer(),
                sa.ForeignKey("customers.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("method", sa.String(length=30), nullable=False),
        )
        op.create_index("ix_payments_customer_id", "payments", ["customer_id"], unique=False)
        op.create_index("ix_payments_payment_date", "payments", ["payment_date"], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    existing = set(inspector.get_table_names())

    for table_name in ("payments", "orders", "addresses", "customers"):
        if table_name in existing:
            op.drop_table(table_name)
