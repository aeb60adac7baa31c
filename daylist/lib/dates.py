import re
from datetime import date, datetime, timedelta

from dateutil.parser import isoparse

from . import clock

_WEEK_ID_RE = re.compile(r"(\d{4})-W(\d{2})")


def date_key(value: date | datetime | None = None) -> str:
    """Calendar-date key used for history entries and the lastDate marker."""
    if value is None:
        value = clock.today()
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def parse_date_key(key: str) -> date | None:
    try:
        return date.fromisoformat(key)
    except ValueError:
        return None


def timestamp_date(value: str) -> date | None:
    """Calendar date of an ISO-8601 timestamp, as recorded (no timezone shift)."""
    if not value:
        return None
    try:
        return isoparse(value).date()
    except (ValueError, OverflowError):
        return None


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return isoparse(value)
    except (ValueError, OverflowError):
        return None


def format_date(value: date) -> str:
    """Heading form used in exports, e.g. 'Tuesday, 2 January 2024'."""
    return f"{value:%A}, {value.day} {value:%B} {value.year}"


def is_new_day(last_date: str, today: date | None = None) -> bool:
    return date_key(today) != last_date


# ── ISO weeks ────────────────────────────────────────────────────────────────


def week_id_from_date(value: date | datetime) -> str:
    """ISO 8601 week id ("YYYY-Www"); weeks start Monday, week 1 holds the first Thursday."""
    if isinstance(value, datetime):
        value = value.date()
    year, week, _ = value.isocalendar()
    return f"{year}-W{week:02d}"


def current_week_id(today: date | None = None) -> str:
    return week_id_from_date(today or clock.today())


def parse_week_id(week_id: str) -> tuple[int, int]:
    match = _WEEK_ID_RE.fullmatch(week_id)
    if not match:
        raise ValueError(f"Invalid week id '{week_id}', expected YYYY-Www")
    return int(match.group(1)), int(match.group(2))


def week_start_date(week_id: str) -> date:
    year, week = parse_week_id(week_id)
    return date.fromisocalendar(year, week, 1)


def is_valid_week_id(week_id: str) -> bool:
    """True when week_id names a real ISO week (2024-W60 and 2023-W53 do not)."""
    try:
        week_start_date(week_id)
    except ValueError:
        return False
    return True


def week_end_date(week_id: str) -> date:
    return week_start_date(week_id) + timedelta(days=6)


def week_bounds(week_id: str) -> tuple[str, str]:
    return week_start_date(week_id).isoformat(), week_end_date(week_id).isoformat()


def is_new_week(last_week_id: str, today: date | None = None) -> bool:
    return current_week_id(today) != last_week_id


def format_week_id(week_id: str) -> str:
    year, week = parse_week_id(week_id)
    return f"Week {week:02d}, {year}"


def week_date_range_string(week_id: str) -> str:
    start = week_start_date(week_id)
    end = week_end_date(week_id)
    if start.month == end.month:
        return f"{start:%b} {start.day} - {end.day}, {end.year}"
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"


def week_display_string(week_id: str) -> str:
    return f"{format_week_id(week_id)} ({week_date_range_string(week_id)})"


def add_weeks(week_id: str, weeks: int) -> str:
    return week_id_from_date(week_start_date(week_id) + timedelta(weeks=weeks))


def previous_week(week_id: str) -> str:
    return add_weeks(week_id, -1)


def next_week(week_id: str) -> str:
    return add_weeks(week_id, 1)


def weeks_between(start_week: str, end_week: str) -> list[str]:
    """All week ids from start_week to end_week inclusive."""
    weeks: list[str] = []
    current = start_week
    while current <= end_week:
        weeks.append(current)
        current = next_week(current)
    return weeks


def is_future_week(week_id: str, today: date | None = None) -> bool:
    return week_id > current_week_id(today)


def week_month(week_id: str) -> str:
    """Month ("YYYY-MM") a week is attributed to: the month of its Monday."""
    return week_start_date(week_id).strftime("%Y-%m")
