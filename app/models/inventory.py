# FILE: app/models/inventory.py
from __future__ import annotations

import enum
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric,
    ForeignKey, Enum, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.timezone import now_local

Qty = Numeric(14, 4)


class TxnType(str, enum.Enum):
    RESTOCK = "RESTOCK"
    WASTE = "WASTE"
    ADJUSTMENT = "ADJUSTMENT"
    SALE = "SALE"


class RefType(str, enum.Enum):
    PURCHASE_ORDER = "PURCHASE_ORDER"
    TRANSFER = "TRANSFER"
    WASTE = "WASTE"


class BranchInventory(Base):
    """
    Ledger row: current stock of one ingredient at one branch.
    Created lazily on the first stock movement into the branch.
    """
    __tablename__ = "branch_inventory"
    __table_args__ = (
        UniqueConstraint("branch_id", "ingredient_id", name="uq_branch_inventory_branch_ingredient"),
        Index("ix_branch_inventory_branch_expiry", "branch_id", "expiry_date"),
    )

    id = Column(Integer, primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)

    current_stock = Column(Qty, nullable=False, default=Decimal("0"))
    reserved_stock = Column(Qty, nullable=False, default=Decimal("0"))

    expiry_date = Column(Date, nullable=True)
    last_restock_at = Column(DateTime, nullable=True)

    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    branch = relationship("Branch", back_populates="inventory")
    ingredient = relationship("Ingredient", back_populates="stock")

    @property
    def available_stock(self) -> Decimal:
        return Decimal(self.current_stock or 0) - Decimal(self.reserved_stock or 0)


class InventoryTransaction(Base):
    """Append-only audit of every stock delta. Rows are never updated."""
    __tablename__ = "inventory_transactions"
    __table_args__ = (
        Index("ix_inv_txn_branch_time", "branch_id", "created_at"),
        Index("ix_inv_txn_ingredient_time", "ingredient_id", "created_at"),
        Index("ix_inv_txn_ref", "ref_type", "ref_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)

    transaction_type = Column(Enum(TxnType, name="inventory_txn_type"), nullable=False)
    quantity_change = Column(Qty, nullable=False)  # +IN / -OUT
    stock_before = Column(Qty, nullable=False)
    stock_after = Column(Qty, nullable=False)

    reason = Column(String(1000), nullable=False, default="")
    ref_type = Column(String(30), nullable=True)
    ref_id = Column(Integer, nullable=True)

    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=now_local, nullable=False)

    ingredient = relationship("Ingredient")
