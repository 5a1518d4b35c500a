from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class OrderItemCreate(BaseModel):
    material_id: str = Field(min_length=1, max_length=64)
    quantity: Decimal = Field(gt=0, max_digits=14, decimal_places=3)
    unit_price: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    attributes: dict[str, Any] | None = None  # opaque, renvoyé tel quel


class OrderCreate(BaseModel):
    project_id: uuid.UUID
    required_date: date | None = None
    notes: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    requested_by_id: uuid.UUID | None = None
    items: list[OrderItemCreate] = Field(min_length=1)


class BudgetImpactRead(BaseModel):
    percent_after: float
    near_threshold: bool
    over_budget: bool
