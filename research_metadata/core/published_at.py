from __future__ import annotations

import html
import re
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

MIN_PLAUSIBLE_YEAR = 1990
RELATIVE_DATE_RE = re.compile(r"(\d+)\s+(day|month|year)s?\s+ago\b", re.IGNORECASE)
SLASH_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
FOUR_DIGIT_YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")
STRPTIME_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def is_plausible_year(year: int, *, today: date | None = None) -> bool:
    today = today or today_utc()
    return MIN_PLAUSIBLE_YEAR < year <= today.year + 1


def parse_flexible_date(value: str | None, *, today: date | None = None) -> str | None:
    """Normalize a date-ish string to ``YYYY-MM-DD``.

    Relative phrases ("3 days ago") are anchored to ``today``. Anything that
    does not parse, or parses to a year outside (1990, today.year + 1], gives
    ``None``.
    """
    if value is None:
        return None
    raw = html.unescape(value).strip()
    if not raw:
        return None

    today = today or today_utc()
    if "ago" in raw.lower():
        return parse_relative_date(raw, today=today)

    parsed = _parse_date_value(raw, today=today)
    if parsed is None or not is_plausible_year(parsed.year, today=today):
        return None
    return parsed.isoformat()


def parse_relative_date(value: str, *, today: date | None = None) -> str | None:
    match = RELATIVE_DATE_RE.search(value)
    if not match:
        return None

    today = today or today_utc()
    count = int(match.group(1))
    unit = match.group(2).lower()
    if unit == "day":
        delta = relativedelta(days=count)
    elif unit == "month":
        delta = relativedelta(months=count)
    else:
        delta = relativedelta(years=count)

    try:
        resolved = today - delta
    except (OverflowError, ValueError):
        return None
    if not is_plausible_year(resolved.year, today=today):
        return None
    return resolved.isoformat()


def _parse_date_value(value: str, *, today: date) -> date | None:
    try:
        dt = parsedate_to_datetime(value)
        return _to_utc_date(dt)
    except (TypeError, ValueError, IndexError, OverflowError):
        pass

    normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
    try:
        dt = datetime.fromisoformat(normalized)
        return _to_utc_date(dt)
    except (ValueError, OverflowError):
        pass

    for pattern in STRPTIME_FORMATS:
        try:
            return datetime.strptime(value, pattern).date()
        except ValueError:
            continue

    slash_match = SLASH_DATE_RE.match(value)
    if slash_match:
        return _parse_slash_date(*(int(part) for part in slash_match.groups()))

    # Free-form text such as "December 5, 2023"; a bare "12" or "Monday" is not a date.
    if not FOUR_DIGIT_YEAR_RE.search(value):
        return None
    default = datetime(today.year, 1, 1)
    for fuzzy in (False, True):
        try:
            dt = dateutil_parser.parse(value, default=default, fuzzy=fuzzy)
        except (ValueError, OverflowError, TypeError):
            continue
        try:
            return _to_utc_date(dt)
        except OverflowError:
            return None
    return None


def _parse_slash_date(first: int, second: int, year: int) -> date | None:
    # Month-first wins; day-first only when month-first is not a real date.
    for month, day in ((first, second), (second, first)):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    return None


def _to_utc_date(dt: datetime) -> date:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()
