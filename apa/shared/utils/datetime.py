"""Dates and times.

Stored timestamps are timezone-aware UTC; exports show dates the way the
back office reads them (dd/mm/yyyy).
"""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime, convert an aware one; None passes through."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_br_date(value: object) -> str:
    """
    Render a stored date as dd/mm/yyyy.

    Accepts datetimes, dates and ISO strings ("2024-03-01" or a full
    timestamp). A string that is not ISO is returned as is; anything else
    renders as an empty string.
    """
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    return ""
