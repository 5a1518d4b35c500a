"""initial orders schema (projects, budgets, order counters, orders, items)

Revision ID: 5b1f0c2a9e41
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1f0c2a9e41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE_VALUES = ("ADMIN", "SITE_ENGINEER", "PROCUREMENT", "PROJECT_MANAGER")
ORDER_STATUS_VALUES = (
    "DRAFT",
    "PENDING_APPROVAL",
    "APPROVED",
    "REJECTED",
    "ORDERED",
    "PARTIALLY_RECEIVED",
    "COMPLETED",
    "CANCELLED",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("role", sa.Enum(*ROLE_VALUES, name="user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
    )
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(64), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("phase", sa.String(64), nullable=False),
        sa.Column("location", sa.String(200)),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
    )
    op.create_table(
        "user_projects",
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "material_catalog",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("sku", sa.String(64), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("unit_of_measure", sa.String(32), nullable=False),
        sa.Column("phase_hint", sa.String(64)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "project_budgets",
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("total_budget", sa.Numeric(14, 2), nullable=False),
        sa.Column("committed_amount", sa.Numeric(28, 5), nullable=False),
        sa.Column("spent_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("committed_amount >= 0", name="ck_budget_committed_nonneg"),
        sa.CheckConstraint("spent_amount >= 0", name="ck_budget_spent_nonneg"),
    )
    op.create_table(
        "project_order_counters",
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("last_value", sa.BigInteger(), nullable=False),
        sa.CheckConstraint("last_value >= 0", name="ck_order_counter_nonneg"),
    )
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_by_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("requested_by_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("order_number", sa.String(32), nullable=False),
        sa.Column("status", sa.Enum(*ORDER_STATUS_VALUES, name="order_status"), nullable=False),
        sa.Column("required_date", sa.Date()),
        sa.Column("total_estimated", sa.Numeric(28, 5), nullable=False),
        sa.Column("total_received", sa.Numeric(28, 5), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("project_id", "order_number", name="uq_order_project_number"),
        sa.CheckConstraint("total_estimated >= 0", name="ck_order_total_estimated_nonneg"),
        sa.CheckConstraint("total_received >= 0", name="ck_order_total_received_nonneg"),
    )
    op.create_index("ix_orders_project_created", "orders", ["project_id", "created_at"])
    op.create_table(
        "order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("order_id", sa.Uuid(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "material_id",
            sa.String(64),
            sa.ForeignKey("material_catalog.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Numeric(14, 3), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 2)),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("attributes", sa.JSON()),
        sa.Column("line_total", sa.Numeric(28, 5), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_order_item_qty_pos"),
        sa.CheckConstraint("unit_price IS NULL OR unit_price >= 0", name="ck_order_item_unit_price_nonneg"),
        sa.CheckConstraint("line_total >= 0", name="ck_order_item_line_total_nonneg"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])


def downgrade() -> None:
    op.drop_index("ix_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("ix_orders_project_created", table_name="orders")
    op.drop_table("orders")
    op.drop_table("project_order_counters")
    op.drop_table("project_budgets")
    op.drop_table("material_catalog")
    op.drop_table("user_projects")
    op.drop_table("projects")
    op.drop_table("users")
    # Types enum Postgres créés par create_table
    sa.Enum(name="order_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
