# app/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """All back-office tables inherit from this."""
    pass


# Import all models so metadata is complete for create_all()
from app.models import (  # noqa: F401,E402
    catalog,
    inventory,
    supplier,
    purchase_order,
    transfer,
    waste,
    notification,
    sales,
)
