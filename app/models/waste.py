# FILE: app/models/waste.py
from __future__ import annotations

import enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric,
    ForeignKey, Text, Enum, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.timezone import now_local


class WasteReason(str, enum.Enum):
    EXPIRED = "EXPIRED"
    SPOILED = "SPOILED"
    DAMAGED = "DAMAGED"
    PREPARATION = "PREPARATION"
    MISTAKE = "MISTAKE"
    THEFT = "THEFT"
    OTHER = "OTHER"


class WasteLog(Base):
    """Append-only record of destroyed stock."""
    __tablename__ = "waste_logs"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_waste_qty_pos"),
        Index("ix_waste_branch_time", "branch_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)

    quantity = Column(Numeric(14, 4), nullable=False)
    unit = Column(String(50), nullable=False)
    reason = Column(Enum(WasteReason, name="waste_reason"), nullable=False)
    loss_value = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=False, default="")

    recorded_by = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=now_local, nullable=False)

    branch = relationship("Branch")
    ingredient = relationship("Ingredient")
