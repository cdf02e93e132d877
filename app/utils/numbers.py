# FILE: app/utils/numbers.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation


def D(v) -> Decimal:
    try:
        if v is None:
            return Decimal("0")
        if isinstance(v, Decimal):
            return v
        return Decimal(str(v).strip())
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def money2(v) -> Decimal:
    return D(v).quantize(Decimal("0.01"))
