# FILE: app/models/supplier.py
from __future__ import annotations

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.timezone import now_local


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    contact_person = Column(String(255), nullable=False, default="")
    phone = Column(String(50), nullable=False, default="")
    email = Column(String(255), nullable=False, default="", index=True)
    address = Column(String(1000), nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    purchase_orders = relationship("PurchaseOrder", back_populates="supplier")
