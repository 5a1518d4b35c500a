from __future__ import annotations

import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    JSON,
    Uuid,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buildorders.app.db.base import Base
from buildorders.app.db.models.core_types import Role, OrderStatus


def _enum_values(enum_cls) -> list[str]:
    # stocke les valeurs ("PENDING_APPROVAL"), pas les noms Python
    return [m.value for m in enum_cls]


# ---------- AUTH / MASTER DATA ----------
class User(Base):
    __tablename__ = "users"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role, name="user_role", values_callable=_enum_values), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Project(Base):
    __tablename__ = "projects"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    phase: Mapped[str] = mapped_column(String(64), nullable=False)
    location: Mapped[str | None] = mapped_column(String(200))
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class UserProject(Base):
    __tablename__ = "user_projects"
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    project_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)


class Material(Base):
    __tablename__ = "material_catalog"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # ex: MAT-001
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    unit_of_measure: Mapped[str] = mapped_column(String(32), default="unit", nullable=False)
    phase_hint: Mapped[str | None] = mapped_column(String(64))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


# ---------- BUDGET ----------
class ProjectBudget(Base):
    __tablename__ = "project_budgets"
    project_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    total_budget: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    committed_amount: Mapped[Decimal] = mapped_column(Numeric(28, 5), default=0, nullable=False)
    spent_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)  # maintenu hors création
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("committed_amount >= 0", name="ck_budget_committed_nonneg"),
        CheckConstraint("spent_amount >= 0", name="ck_budget_spent_nonneg"),
    )


class OrderNumberCounter(Base):
    """
    Compteur de numéros de commande, une ligne par projet.

    Seule source de vérité pour le prochain numéro : jamais de COUNT(*)
    sur orders. La ligne est verrouillée (FOR UPDATE) jusqu'au commit.
    """

    __tablename__ = "project_order_counters"
    project_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    last_value: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    __table_args__ = (CheckConstraint("last_value >= 0", name="ck_order_counter_nonneg"),)


# ---------- ORDERS ----------
class Order(Base):
    __tablename__ = "orders"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False)
    created_by_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    requested_by_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    order_number: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        default=OrderStatus.draft,
        nullable=False,
    )
    required_date: Mapped[date | None] = mapped_column(Date)
    total_estimated: Mapped[Decimal] = mapped_column(Numeric(28, 5), default=0, nullable=False)
    total_received: Mapped[Decimal] = mapped_column(Numeric(28, 5), default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    __table_args__ = (
        UniqueConstraint("project_id", "order_number", name="uq_order_project_number"),
        CheckConstraint("total_estimated >= 0", name="ck_order_total_estimated_nonneg"),
        CheckConstraint("total_received >= 0", name="ck_order_total_received_nonneg"),
        Index("ix_orders_project_created", "project_id", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # ordre de saisie
    material_id: Mapped[str] = mapped_column(ForeignKey("material_catalog.id", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    attributes: Mapped[dict[str, Any] | None] = mapped_column(JSON)  # opaque, jamais interprété
    line_total: Mapped[Decimal] = mapped_column(Numeric(28, 5), nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_item_qty_pos"),
        CheckConstraint("unit_price IS NULL OR unit_price >= 0", name="ck_order_item_unit_price_nonneg"),
        CheckConstraint("line_total >= 0", name="ck_order_item_line_total_nonneg"),
    )
