# inspection/dates.py

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from dateutil import parser as dtp

_MDY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def to_iso_date(value: str, today: Optional[date] = None) -> str:
    """
    Normalize a spoken or typed date to YYYY-MM-DD.

    Accepts "today", "tomorrow", MM/DD/YYYY, ISO dates and anything
    dateutil can parse that names a month and a day ("August 20 2025",
    "20 Aug"). Times and bare weekdays are rejected. Returns "" when the
    value cannot be normalized; callers must treat "" as a failure.
    """
    if today is None:
        today = utc_today()
    raw = (value or "").strip()
    v = raw.lower()
    if not v:
        return ""
    if v == "today":
        return today.isoformat()
    if v == "tomorrow":
        return (today + timedelta(days=1)).isoformat()

    mdy = _MDY.match(v)
    if mdy:
        mm, dd, yyyy = (int(g) for g in mdy.groups())
        try:
            return date(yyyy, mm, dd).isoformat()
        except ValueError:
            return ""

    if _ISO.match(raw):
        try:
            return date.fromisoformat(raw).isoformat()
        except ValueError:
            return ""

    # month and day must be spoken; a missing year is the current one
    try:
        first = dtp.parse(raw, default=datetime(today.year, 1, 1))
        second = dtp.parse(raw, default=datetime(today.year, 12, 28))
    except (ValueError, OverflowError):
        return ""
    if first.date() != second.date():
        return ""
    return first.date().isoformat()
