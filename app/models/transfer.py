# FILE: app/models/transfer.py
from __future__ import annotations

import enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric,
    ForeignKey, Text, Enum, CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.timezone import now_local

Qty = Numeric(14, 4)


class TransferStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TRANSFER_TERMINAL = {TransferStatus.COMPLETED, TransferStatus.CANCELLED}


class InventoryTransfer(Base):
    __tablename__ = "inventory_transfers"
    __table_args__ = (
        UniqueConstraint("transfer_number", name="uq_inventory_transfers_number"),
        CheckConstraint("source_branch_id <> target_branch_id", name="ck_transfer_distinct_branches"),
        Index("ix_transfer_source_date", "source_branch_id", "requested_at"),
        Index("ix_transfer_target_date", "target_branch_id", "requested_at"),
    )

    id = Column(Integer, primary_key=True)
    transfer_number = Column(String(50), nullable=False, index=True)

    source_branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    target_branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)

    status = Column(Enum(TransferStatus, name="transfer_status"), nullable=False, default=TransferStatus.PENDING)
    notes = Column(Text, nullable=False, default="")

    requested_by = Column(String(64), nullable=False)
    requested_at = Column(DateTime, nullable=False, default=now_local)
    approved_by = Column(String(64), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    completed_by = Column(String(64), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    updated_at = Column(DateTime, nullable=False, default=now_local, onupdate=now_local)

    source_branch = relationship("Branch", foreign_keys=[source_branch_id])
    target_branch = relationship("Branch", foreign_keys=[target_branch_id])

    items = relationship(
        "InventoryTransferItem",
        back_populates="transfer",
        cascade="all, delete-orphan",
        order_by="InventoryTransferItem.id",
    )


class InventoryTransferItem(Base):
    __tablename__ = "inventory_transfer_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transfer_item_qty_pos"),
    )

    id = Column(Integer, primary_key=True)
    transfer_id = Column(
        Integer, ForeignKey("inventory_transfers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)

    source_inventory_id = Column(Integer, ForeignKey("branch_inventory.id"), nullable=False)
    target_inventory_id = Column(Integer, ForeignKey("branch_inventory.id"), nullable=True)

    quantity = Column(Qty, nullable=False)
    unit = Column(String(50), nullable=False)

    transfer = relationship("InventoryTransfer", back_populates="items")
    ingredient = relationship("Ingredient")
