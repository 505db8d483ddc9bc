# argfolio/utils/date_utils.py
"""
Date helpers shared by the ledger, accrual and fixed-deposit code.

Movements carry local ISO datetimes ("2025-03-01T00:01:00") without a
timezone; "today" is therefore the calendar date in Buenos Aires, not UTC.

Usage:
    from argfolio.utils.date_utils import today_local, date_of

    date_of("2025-03-01T00:01:00")  # date(2025, 3, 1)
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

LOCAL_TZ = ZoneInfo("America/Argentina/Buenos_Aires")


def today_local() -> date:
    """Current calendar date in Argentina."""
    return datetime.now(LOCAL_TZ).date()


def now_iso() -> str:
    """Current UTC timestamp as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def date_of(datetime_iso: str) -> date:
    """
    Calendar date of an ISO date or datetime string.

    Args:
        datetime_iso: "YYYY-MM-DD" or "YYYY-MM-DDTHH:MM[:SS][offset]"

    Returns:
        The date part

    Raises:
        ValueError: If the string does not start with a valid ISO date
    """
    return date.fromisoformat(datetime_iso[:10])
