# FILE: app/models/sales.py
from __future__ import annotations

from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.timezone import now_local


class SalesOrder(Base):
    """
    Point-of-sale orders. Written by the POS, read here by reports only.
    """
    __tablename__ = "sales_orders"
    __table_args__ = (
        Index("ix_sales_orders_branch_time", "branch_id", "order_timestamp"),
    )

    id = Column(Integer, primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)

    order_timestamp = Column(DateTime, nullable=False, default=now_local)
    total_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    payment_method = Column(String(30), nullable=False, default="CASH")
    order_type = Column(String(30), nullable=False, default="DINE_IN")
    customer_name = Column(String(255), nullable=True)

    items = relationship("SalesOrderItem", back_populates="order", cascade="all, delete-orphan")


class SalesOrderItem(Base):
    __tablename__ = "sales_order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False, index=True)

    menu_item_id = Column(Integer, nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    subtotal = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    order = relationship("SalesOrder", back_populates="items")
