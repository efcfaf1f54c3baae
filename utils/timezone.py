"""UTC-everywhere time handling plus calendar-date helpers for invoice forms."""

import re
from datetime import date, datetime, timedelta, timezone

DEFAULT_PAYMENT_TERM_DAYS = 30

# Strict YYYY-MM-DD. fromisoformat alone also takes 20260301 and 2026-W09-7.
_CALENDAR_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """Current calendar date in UTC."""
    return now_utc().date()


def parse_calendar_date(value: str | date | None) -> date | None:
    """
    Parse an ISO calendar date (YYYY-MM-DD).

    Returns None for empty or invalid input instead of raising, so form
    validators can report a field message.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if not _CALENDAR_DATE.fullmatch(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def format_api_date(value: date) -> str:
    """Render a date the way the Invoice API expects it."""
    return value.isoformat()


def default_due_date(invoice_date: date, term_days: int = DEFAULT_PAYMENT_TERM_DAYS) -> date:
    """Due date suggested for a new invoice: invoice date plus the payment term."""
    return invoice_date + timedelta(days=term_days)
