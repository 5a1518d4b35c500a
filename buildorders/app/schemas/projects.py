from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=64)
    phase: str = Field(min_length=1, max_length=64)
    description: str | None = None
    location: str | None = Field(default=None, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    # optionnel : crée la ligne project_budgets avec ce montant
    total_budget: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
