# utils/date_utils.py
from datetime import date, datetime, timezone
from typing import Optional


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision and a `Z` suffix,
    e.g. "2025-03-01T12:30:00.000Z" (the format saved library records carry).
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def br_date(day: Optional[date] = None) -> str:
    """Date as printed on assessment headers: dd/mm/yyyy."""
    day = day or date.today()
    return day.strftime("%d/%m/%Y")
