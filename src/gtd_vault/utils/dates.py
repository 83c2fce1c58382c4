"""Date helpers shared by the codec, the gateway and the services."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from gtd_vault.utils.logger import get_logger


def today() -> date:
    """Return the current local day."""
    return date.today()


def tomorrow() -> date:
    return today() + timedelta(days=1)


def format_date(value: date) -> str:
    """Format a day as YYYY-MM-DD."""
    return value.strftime("%Y-%m-%d")


def month_folder(value: date) -> str:
    """Format a day as the YYYY-MM archive folder name."""
    return value.strftime("%Y-%m")


def parse_date_soft(value: object) -> date:
    """Parse a front matter date, falling back to today on garbage.

    Hand-edited documents regularly carry things like ``date: next week``;
    those must not make the document unreadable.

    Args:
        value: A ``date``, ``datetime`` or string value from a document

    Returns:
        The parsed day, or today's date if *value* is not a recognisable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
    get_logger(__name__).warning("Unparseable date %r, using today", value)
    return today()


def week_bounds(day: date, week_start_day: str = "monday") -> tuple[date, date]:
    """Return the first and last day of the week containing *day*.

    Args:
        day: Any day in the week
        week_start_day: "monday" or "sunday"

    Returns:
        Tuple of (first_day, last_day), both inclusive
    """
    if week_start_day == "sunday":
        offset = (day.weekday() + 1) % 7
    else:
        offset = day.weekday()
    start = day - timedelta(days=offset)
    return start, start + timedelta(days=6)


def parse_day(text: str, base: date | None = None) -> date:
    """Parse a command-line day: ``today``, ``tomorrow``, ``yesterday`` or ISO.

    Raises:
        ValueError: If *text* is none of those
    """
    base = base or today()
    keyword = text.strip().lower()
    if keyword == "today":
        return base
    if keyword == "tomorrow":
        return base + timedelta(days=1)
    if keyword == "yesterday":
        return base - timedelta(days=1)
    try:
        return date.fromisoformat(keyword)
    except ValueError:
        raise ValueError(f"Invalid date: {text!r} (use today, tomorrow or YYYY-MM-DD)") from None
