"""
Date helpers

Clinical dates are date-only values. They travel as YYYY-MM-DD strings at
every boundary so no timezone conversion can shift them by a day.
"""

from datetime import date, datetime
from typing import Optional, Union

ISO_FORMAT = "%Y-%m-%d"
FORM_FORMAT = "%d-%m-%Y"  # user-facing DD-MM-YYYY

DateLike = Union[date, datetime, str, None]


def parse_form_date(value: str) -> date:
    """
    Parse a date typed into a form. Accepts DD-MM-YYYY (user-facing) and
    YYYY-MM-DD (what browser date inputs submit).
    """
    value = (value or "").strip()
    for fmt in (FORM_FORMAT, ISO_FORMAT):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date: {value!r}")


def parse_iso_date(value: str) -> date:
    return datetime.strptime(value, ISO_FORMAT).date()


def to_iso(value: DateLike) -> Optional[str]:
    """Normalise a date coming out of the database to YYYY-MM-DD"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    # Raw SQL on SQLite hands back text, sometimes with a time part
    return str(value)[:10]


def _as_date(value: DateLike) -> Optional[date]:
    iso = to_iso(value)
    return parse_iso_date(iso) if iso else None


def format_long(value: DateLike) -> str:
    """15 March 2024"""
    d = _as_date(value)
    return f"{d.day} {d.strftime('%B %Y')}" if d else "N/A"


def format_short(value: DateLike) -> str:
    """15 Mar 2024"""
    d = _as_date(value)
    return f"{d.day} {d.strftime('%b %Y')}" if d else "N/A"
