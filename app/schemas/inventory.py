from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.models.inventory import TxnType
from app.schemas.catalog import IngredientMini


class InventoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    ingredient_id: int
    current_stock: Decimal
    reserved_stock: Decimal
    available_stock: Decimal
    expiry_date: Optional[date]
    last_restock_at: Optional[datetime]
    updated_at: datetime

    ingredient: IngredientMini


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    ingredient_id: int
    transaction_type: TxnType
    quantity_change: Decimal
    stock_before: Decimal
    stock_after: Decimal
    reason: str
    ref_type: Optional[str]
    ref_id: Optional[int]
    created_by: str
    created_at: datetime

    ingredient: Optional[IngredientMini] = None
