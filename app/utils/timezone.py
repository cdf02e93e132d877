# FILE: app/utils/timezone.py
from __future__ import annotations

from datetime import datetime, date, time, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.config import settings

TZ = ZoneInfo(settings.TIMEZONE)


def now_local() -> datetime:
    """
    Returns a *naive* datetime in the configured business timezone.
    DateTime columns are naive, so tz info is dropped before storing.
    """
    return datetime.now(TZ).replace(tzinfo=None)


def today_local() -> date:
    return now_local().date()


def day_bounds(d_from: Optional[date], d_to: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """[start of d_from, start of the day after d_to) for DateTime range filters."""
    start = datetime.combine(d_from, time.min) if d_from else None
    end = datetime.combine(d_to + timedelta(days=1), time.min) if d_to else None
    return start, end
