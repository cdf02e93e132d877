# FILE: app/models/purchase_order.py
from __future__ import annotations

import enum
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric,
    ForeignKey, Text, Enum, CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.timezone import now_local

Money = Numeric(14, 2)
Qty = Numeric(14, 4)


class POStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PARTIAL = "PARTIAL"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


PO_TERMINAL = {POStatus.RECEIVED, POStatus.CANCELLED}


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    __table_args__ = (
        UniqueConstraint("order_number", name="uq_purchase_orders_order_number"),
        Index("ix_po_supplier_date", "supplier_id", "ordered_at"),
        Index("ix_po_branch_date", "branch_id", "ordered_at"),
        Index("ix_po_status_date", "status", "ordered_at"),
    )

    id = Column(Integer, primary_key=True)
    order_number = Column(String(50), nullable=False, index=True)

    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)

    status = Column(Enum(POStatus, name="po_status"), nullable=False, default=POStatus.PENDING)

    # fixed at creation, never recomputed
    total_amount = Column(Money, nullable=False, default=Decimal("0.00"))

    ordered_at = Column(DateTime, nullable=False, default=now_local)
    expected_at = Column(DateTime, nullable=True)
    received_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=False, default="")

    created_by = Column(String(64), nullable=False)
    approved_by = Column(String(64), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    cancelled_by = Column(String(64), nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    updated_at = Column(DateTime, nullable=False, default=now_local, onupdate=now_local)

    supplier = relationship("Supplier", back_populates="purchase_orders")
    branch = relationship("Branch")

    items = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )


class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_po_item_qty_pos"),
        CheckConstraint("unit_price > 0", name="ck_po_item_price_pos"),
        CheckConstraint("received_qty >= 0", name="ck_po_item_received_nonneg"),
        Index("ix_po_items_po", "purchase_order_id"),
    )

    id = Column(Integer, primary_key=True)

    purchase_order_id = Column(
        Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)

    quantity = Column(Qty, nullable=False)
    unit = Column(String(50), nullable=False)
    unit_price = Column(Numeric(14, 4), nullable=False)
    received_qty = Column(Qty, nullable=False, default=Decimal("0"))

    purchase_order = relationship("PurchaseOrder", back_populates="items")
    ingredient = relationship("Ingredient")

    @property
    def pending_qty(self) -> Decimal:
        left = Decimal(self.quantity or 0) - Decimal(self.received_qty or 0)
        return left if left > 0 else Decimal("0")
