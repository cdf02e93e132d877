# FILE: app/schemas/catalog.py
from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class BranchMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class IngredientMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    unit: str
    cost_per_unit: Decimal
