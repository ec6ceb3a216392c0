"""
Date parsing for hackathon listings.

Handles the human formats found on event cards:
- ISO fragments (2026-01-15, 2026-01-15T09:00:00Z)
- Ordinal dates, single or concatenated (Sep 26th, 2025Sep 28th, 2025)
- Same-month ranges (Jan 15 - 17, 2026)
- Cross-month ranges (Jan 30 - Feb 2, 2026)
- Full ranges (Dec 30, 2025 - Jan 2, 2026)
- Day-first ranges (15-17 January 2026)

All results are timezone-aware UTC datetimes.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, NamedTuple, Optional

import structlog

logger = structlog.get_logger(__name__)


MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_MONTH = (
    r"(?<![a-z])(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b\.?"
)
_DAY = r"(?<!\d)(\d{1,2})(?:st|nd|rd|th)?"
_YEAR = r"(\d{4})"
_SEP = r"\s*(?:-|–|—|\bto\b)\s*"

_ISO_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?")
_ORDINAL_RE = re.compile(rf"{_MONTH}\s+{_DAY},?\s*{_YEAR}", re.IGNORECASE)
_RANGE_TAIL_RE = re.compile(rf"{_MONTH}\s+{_DAY},?{_SEP}$", re.IGNORECASE)
_SAME_MONTH_RE = re.compile(rf"{_MONTH}\s+{_DAY}{_SEP}{_DAY},?\s*{_YEAR}", re.IGNORECASE)
_CROSS_MONTH_RE = re.compile(rf"{_MONTH}\s+{_DAY}{_SEP}{_MONTH}\s+{_DAY},?\s*{_YEAR}", re.IGNORECASE)
_FULL_RANGE_RE = re.compile(
    rf"{_MONTH}\s+{_DAY},?\s*{_YEAR}{_SEP}{_MONTH}\s+{_DAY},?\s*{_YEAR}", re.IGNORECASE
)
_DAY_FIRST_RE = re.compile(rf"{_DAY}{_SEP}{_DAY}\s+{_MONTH},?\s+{_YEAR}", re.IGNORECASE)


class DateRange(NamedTuple):
    """Start and end of an event window."""
    start_date: datetime
    end_date: datetime


def _month(name: str) -> int:
    return MONTHS[name.lower().rstrip(".")[:3]]


def _date(year, month: int, day) -> datetime:
    return datetime(int(year), month, int(day), tzinfo=timezone.utc)


def _trailing_year_range(year, start_month: int, start_day, end_month: int, end_day) -> DateRange:
    """Range written with one trailing year, which belongs to the end date."""
    year = int(year)
    start_year = year - 1 if end_month < start_month else year
    return DateRange(_date(start_year, start_month, start_day), _date(year, end_month, end_day))


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an API timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (with or without "Z"), epoch seconds or
    milliseconds, and datetimes. Naive values are taken as UTC.

    Returns:
        datetime or None if the value cannot be parsed
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_iso(text: str) -> Optional[DateRange]:
    dates = [d for d in (parse_iso_datetime(m.group(0)) for m in _ISO_RE.finditer(text)) if d]
    if not dates:
        return None
    return DateRange(dates[0], dates[1] if len(dates) > 1 else dates[0])


def _parse_ordinal(text: str) -> Optional[DateRange]:
    matches = list(_ORDINAL_RE.finditer(text))
    if not matches:
        return None

    # A lone match preceded by "Jan 30 -" is the tail of a range
    # handled by a later family.
    if len(matches) == 1 and _RANGE_TAIL_RE.search(text[: matches[0].start()]):
        return None

    def to_date(match: re.Match) -> datetime:
        month_name, day, year = match.groups()
        return _date(year, _month(month_name), day)

    start = to_date(matches[0])
    end = to_date(matches[1]) if len(matches) > 1 else start
    return DateRange(start, end)


def _parse_same_month(text: str) -> Optional[DateRange]:
    match = _SAME_MONTH_RE.search(text)
    if not match:
        return None

    month_name, start_day, end_day, year = match.groups()
    month = _month(month_name)
    end_month = month % 12 + 1 if int(end_day) < int(start_day) else month
    return _trailing_year_range(year, month, start_day, end_month, end_day)


def _parse_cross_month(text: str) -> Optional[DateRange]:
    match = _CROSS_MONTH_RE.search(text)
    if not match:
        return None

    start_month_name, start_day, end_month_name, end_day, year = match.groups()
    return _trailing_year_range(
        year, _month(start_month_name), start_day, _month(end_month_name), end_day
    )


def _parse_full_range(text: str) -> Optional[DateRange]:
    match = _FULL_RANGE_RE.search(text)
    if not match:
        return None

    sm, sd, sy, em, ed, ey = match.groups()
    return DateRange(_date(sy, _month(sm), sd), _date(ey, _month(em), ed))


def _parse_day_first(text: str) -> Optional[DateRange]:
    match = _DAY_FIRST_RE.search(text)
    if not match:
        return None

    start_day, end_day, month_name, year = match.groups()
    month = _month(month_name)
    # "30 - 2 March": the month names the end, the start is in the month before
    start_month = (month - 2) % 12 + 1 if int(end_day) < int(start_day) else month
    return _trailing_year_range(year, start_month, start_day, month, end_day)


_PATTERN_FAMILIES: tuple[tuple[str, Callable[[str], Optional[DateRange]]], ...] = (
    ("iso", _parse_iso),
    ("ordinal", _parse_ordinal),
    ("same_month", _parse_same_month),
    ("cross_month", _parse_cross_month),
    ("full_range", _parse_full_range),
    ("day_first", _parse_day_first),
)


def parse_date_range(text: Optional[str]) -> Optional[DateRange]:
    """
    Parse a free-text date or date range.

    Pattern families are tried in a fixed order and the first one that
    yields a valid calendar date wins. A family that matches but builds
    an impossible date (Feb 30) is skipped.

    Args:
        text: Date text from a listing card or detail page

    Returns:
        DateRange or None when nothing could be parsed
    """
    if not text or not isinstance(text, str):
        return None

    text = " ".join(text.split())
    for family, parse in _PATTERN_FAMILIES:
        try:
            result = parse(text)
        except (ValueError, KeyError, OverflowError) as e:
            logger.debug("invalid_date", text=text, family=family, error=str(e))
            continue
        if result is not None:
            return result

    return None


def estimate_dates_from_status(status: Any, now: Optional[datetime] = None) -> DateRange:
    """
    Guess an event window when a listing shows no usable dates.

    - completed: 60 to 30 days ago
    - ongoing: a week either side of now
    - anything else: now to 30 days ahead
    """
    now = now or datetime.now(timezone.utc)
    value = getattr(status, "value", status)

    if value == "completed":
        return DateRange(now - timedelta(days=60), now - timedelta(days=30))
    if value == "ongoing":
        return DateRange(now - timedelta(days=7), now + timedelta(days=7))
    return DateRange(now, now + timedelta(days=30))
