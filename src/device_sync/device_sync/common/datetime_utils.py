from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_api_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def parse_log_date(value: str) -> datetime:
    """Parse a device LogDate into a naive datetime.

    Aware values are converted to UTC first so they can be sorted together
    with the naive timestamps most devices send.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid LogDate: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def today_utc() -> date:
    """Current UTC date.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).date()


def window_for(today: date, days: int) -> tuple[date, date]:
    """Inclusive [start, end] window covering `days` days ending today."""
    if days < 1:
        raise ValueError("window must cover at least one day")
    return today - timedelta(days=days - 1), today
