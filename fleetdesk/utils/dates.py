"""Date parsing and business-timezone helpers."""
from datetime import datetime, date, timezone

import pytz
from flask import current_app, has_app_context

DEFAULT_TZ = "Asia/Kuala_Lumpur"


def as_date(x) -> date:
    """
    Coerce any date-like to a naive date.
    Supports date, datetime, 'YYYY-MM-DD' and ISO strings with a time part
    ('2024-06-01T10:00:00Z'); the time part is dropped.
    Raises ValueError on anything else.
    """
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    if isinstance(x, str):
        base = x.strip().split("T", 1)[0].split(" ", 1)[0]
        return date.fromisoformat(base)
    raise ValueError(f"Unsupported date: {x!r}")


def business_tz(name: str | None = None):
    """Configured APP_TIMEZONE when inside an app context, else the default."""
    if name is None and has_app_context():
        name = current_app.config.get("APP_TIMEZONE")
    return pytz.timezone(name or DEFAULT_TZ)


def to_local_iso(value: datetime | None, tz_name: str | None = None) -> str | None:
    """
    Render a stored timestamp as ISO-8601 in the business timezone.
    Naive datetimes are assumed to be UTC (that is how they are stored).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(business_tz(tz_name)).isoformat(timespec="seconds")


def utcnow() -> datetime:
    """Naive UTC timestamp for storage columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
