from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.purchase_order import POStatus
from app.schemas.catalog import BranchMini, IngredientMini


class POItemIn(BaseModel):
    ingredient_id: int
    quantity: Decimal = Field(gt=0)
    unit: str = Field(min_length=1, max_length=50)
    unit_price: Decimal = Field(gt=0)


class POCreate(BaseModel):
    order_number: str = Field(min_length=1, max_length=50)
    supplier_id: int
    branch_id: int
    expected_at: Optional[datetime] = None
    notes: str = ""

    items: List[POItemIn] = Field(min_length=1)


class POUpdate(BaseModel):
    status: Optional[POStatus] = None
    expected_at: Optional[datetime] = None
    notes: Optional[str] = None


class ReceiveLineIn(BaseModel):
    item_id: int
    received_qty: Decimal = Field(ge=0)
    expiry_date: Optional[date] = None


class POActionIn(BaseModel):
    action: Literal["receive", "approve", "cancel"]
    items: List[ReceiveLineIn] = Field(default_factory=list)


class POItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ingredient_id: int
    quantity: Decimal
    unit: str
    unit_price: Decimal
    received_qty: Decimal

    # computed for UI
    pending_qty: Decimal

    ingredient: Optional[IngredientMini] = None


class SupplierMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None


class POOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str

    supplier_id: int
    branch_id: int
    status: POStatus
    total_amount: Decimal

    ordered_at: datetime
    expected_at: Optional[datetime]
    received_at: Optional[datetime]

    notes: str

    created_by: str
    approved_by: Optional[str]
    approved_at: Optional[datetime]
    cancelled_by: Optional[str]
    cancelled_at: Optional[datetime]

    updated_at: datetime

    supplier: Optional[SupplierMini] = None
    branch: Optional[BranchMini] = None
    items: List[POItemOut]
