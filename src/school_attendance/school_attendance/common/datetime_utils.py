from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str | date | datetime) -> date:
    """Parse an ISO date or datetime string into a calendar day.

    Accepts 'YYYY-MM-DD' as well as full timestamps such as
    '2026-01-05T10:30:00.000Z'; only the day part is kept.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = (value or "").strip()
    if not text:
        raise ValueError("empty date")
    if len(text) == 10:
        return datetime.strptime(text, "%Y-%m-%d").date()
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def now_millis() -> int:
    return int(now_local().timestamp() * 1000)


def format_hhmm(value: datetime) -> str:
    return value.strftime("%H:%M")
