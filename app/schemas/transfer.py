from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.transfer import TransferStatus
from app.schemas.catalog import BranchMini, IngredientMini


class TransferItemIn(BaseModel):
    ingredient_id: int
    quantity: Decimal = Field(gt=0)
    unit: str = Field(min_length=1, max_length=50)


class TransferCreate(BaseModel):
    transfer_number: str = Field(min_length=1, max_length=50)
    source_branch_id: int
    target_branch_id: int
    notes: str = ""

    items: List[TransferItemIn] = Field(min_length=1)


class TransferUpdate(BaseModel):
    status: Optional[TransferStatus] = None
    notes: Optional[str] = None


class TransferItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ingredient_id: int
    source_inventory_id: int
    target_inventory_id: Optional[int]
    quantity: Decimal
    unit: str

    ingredient: Optional[IngredientMini] = None


class TransferOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transfer_number: str
    source_branch_id: int
    target_branch_id: int
    status: TransferStatus
    notes: str

    requested_by: str
    requested_at: datetime
    approved_by: Optional[str]
    approved_at: Optional[datetime]
    completed_by: Optional[str]
    completed_at: Optional[datetime]
    cancelled_at: Optional[datetime]

    source_branch: Optional[BranchMini] = None
    target_branch: Optional[BranchMini] = None
    items: List[TransferItemOut]
