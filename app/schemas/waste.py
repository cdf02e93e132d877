from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.waste import WasteReason
from app.schemas.catalog import BranchMini, IngredientMini


class WasteCreate(BaseModel):
    branch_id: int
    ingredient_id: int
    quantity: Decimal = Field(gt=0)
    reason: WasteReason
    unit: Optional[str] = Field(default=None, max_length=50)
    notes: str = ""


class WasteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    ingredient_id: int
    quantity: Decimal
    unit: str
    reason: WasteReason
    loss_value: Decimal
    notes: str
    recorded_by: str
    created_at: datetime

    ingredient: Optional[IngredientMini] = None
    branch: Optional[BranchMini] = None
