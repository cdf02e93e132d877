from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.purchase_order import POStatus


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    contact_person: str = ""
    phone: str = Field(min_length=1, max_length=50)
    email: Union[EmailStr, Literal[""]] = ""
    address: str = ""
    notes: str = ""
    is_active: bool = True


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact_person: Optional[str] = None
    phone: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[Union[EmailStr, Literal[""]]] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class SupplierOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    contact_person: str
    phone: str
    email: str
    address: str
    notes: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SupplierOrderMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    branch_id: int
    status: POStatus
    total_amount: Decimal
    ordered_at: datetime


class SupplierDetailOut(SupplierOut):
    purchase_order_count: int = 0
    recent_orders: List[SupplierOrderMini] = Field(default_factory=list)
