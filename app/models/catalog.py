# FILE: app/models/catalog.py
from __future__ import annotations

from decimal import Decimal
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.timezone import now_local


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    address = Column(String(500), nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)

    inventory = relationship("BranchInventory", back_populates="branch")


class Ingredient(Base):
    """
    Reference data shared by every branch.
    Never deleted while referenced by inventory, orders or logs.
    """
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    unit = Column(String(50), nullable=False, default="unit")

    cost_per_unit = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    alert_threshold = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    reorder_threshold = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    stock = relationship("BranchInventory", back_populates="ingredient")

    @property
    def effective_threshold(self) -> Decimal:
        # alert threshold wins; reorder threshold is the fallback
        return Decimal(self.alert_threshold or 0) or Decimal(self.reorder_threshold or 0)
