"""
Status mapping.

Each source shows its own status badges ("Live", "Ended", "실시간",
"Winner Announced"). Keyword tables map them onto the canonical
hackathon and grant statuses; unknown text falls back to the most
conservative value instead of failing.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from .models import GrantStatus, HackathonStatus


@dataclass(frozen=True)
class StatusKeywordTable:
    """
    Ordered (keyword, status) rules for one source or locale.

    The first rule whose keyword occurs in the text wins, so more
    specific phrases go before the generic ones they contain.
    """
    name: str
    rules: tuple[tuple[str, HackathonStatus], ...]
    case_sensitive: bool = False

    def match(self, text: str) -> Optional[HackathonStatus]:
        if not text:
            return None
        haystack = text if self.case_sensitive else text.lower()
        for keyword, status in self.rules:
            needle = keyword if self.case_sensitive else keyword.lower()
            if needle in haystack:
                return status
        return None


_S = HackathonStatus

DEFAULT_STATUS_TABLE = StatusKeywordTable(
    name="default",
    rules=(
        ("registration open", _S.REGISTRATION_OPEN),
        ("applications open", _S.REGISTRATION_OPEN),
        ("judging", _S.JUDGING),
        ("winner announced", _S.COMPLETED),
        ("completed", _S.COMPLETED),
        ("ended", _S.COMPLETED),
        ("closed", _S.COMPLETED),
        ("past", _S.COMPLETED),
        ("ongoing", _S.ONGOING),
        ("in progress", _S.ONGOING),
        ("live", _S.ONGOING),
        ("upcoming", _S.UPCOMING),
        ("coming soon", _S.UPCOMING),
        ("open", _S.REGISTRATION_OPEN),
    ),
)

DORAHACKS_STATUS_TABLE = StatusKeywordTable(
    name="dorahacks",
    rules=(
        ("Ongoing", _S.ONGOING),
        ("Ended", _S.COMPLETED),
        ("Winner Announced", _S.COMPLETED),
        ("Pre-registration", _S.UPCOMING),
        ("Extended", _S.ONGOING),
        ("Upcoming", _S.UPCOMING),
    ),
    case_sensitive=True,
)

AKINDO_STATUS_TABLE = StatusKeywordTable(
    name="akindo",
    rules=(
        ("judging", _S.JUDGING),
        ("building", _S.ONGOING),
        ("live", _S.ONGOING),
        ("closed", _S.COMPLETED),
        ("ended", _S.COMPLETED),
        ("coming soon", _S.UPCOMING),
        ("open", _S.REGISTRATION_OPEN),
    ),
)

HACKQUEST_STATUS_TABLE = StatusKeywordTable(
    name="hackquest",
    rules=(
        ("실시간", _S.ONGOING),
        ("Live", _S.ONGOING),
        ("live", _S.ONGOING),
        ("종료됨", _S.COMPLETED),
        ("Ended", _S.COMPLETED),
        ("ended", _S.COMPLETED),
        # Voting still counts as running
        ("투표", _S.ONGOING),
        ("Voting", _S.ONGOING),
        ("voting", _S.ONGOING),
        ("다가오는", _S.UPCOMING),
        ("Upcoming", _S.UPCOMING),
        ("upcoming", _S.UPCOMING),
        ("등록", _S.REGISTRATION_OPEN),
        ("Register", _S.REGISTRATION_OPEN),
        ("Open", _S.REGISTRATION_OPEN),
    ),
    case_sensitive=True,
)

DEVPOST_STATUS_TABLE = StatusKeywordTable(
    name="devpost",
    rules=(
        ("ended", _S.COMPLETED),
        ("upcoming", _S.UPCOMING),
        ("open", _S.ONGOING),
    ),
)

STATUS_TABLES = {
    table.name: table
    for table in (
        DEFAULT_STATUS_TABLE,
        DORAHACKS_STATUS_TABLE,
        AKINDO_STATUS_TABLE,
        HACKQUEST_STATUS_TABLE,
        DEVPOST_STATUS_TABLE,
    )
}

_GRANT_RULES: tuple[tuple[str, GrantStatus], ...] = (
    ("paused", GrantStatus.PAUSED),
    ("on hold", GrantStatus.PAUSED),
    ("closed", GrantStatus.CLOSED),
    ("ended", GrantStatus.CLOSED),
    ("inactive", GrantStatus.CLOSED),
    ("coming soon", GrantStatus.UPCOMING),
    ("upcoming", GrantStatus.UPCOMING),
    ("open", GrantStatus.ACTIVE),
    ("active", GrantStatus.ACTIVE),
    ("rolling", GrantStatus.ACTIVE),
)


def map_hackathon_status(
    text: Optional[str],
    table: Union[StatusKeywordTable, str, None] = None,
) -> HackathonStatus:
    """
    Map free status text to a hackathon status.

    Args:
        text: Badge or card text
        table: Keyword table or its name; defaults to the generic table

    Returns:
        Matched status, ``upcoming`` when nothing matches
    """
    if isinstance(table, str):
        table = STATUS_TABLES.get(table, DEFAULT_STATUS_TABLE)
    table = table or DEFAULT_STATUS_TABLE
    return table.match(text or "") or HackathonStatus.UPCOMING


def map_grant_status(text: Optional[str]) -> GrantStatus:
    """Map free status text to a grant status; ``active`` when unknown."""
    if not text:
        return GrantStatus.ACTIVE
    lowered = text.lower()
    for keyword, status in _GRANT_RULES:
        if keyword in lowered:
            return status
    return GrantStatus.ACTIVE


def status_from_dates(
    start: Optional[datetime],
    end: Optional[datetime],
    now: Optional[datetime] = None,
) -> Optional[HackathonStatus]:
    """
    Derive status from the event window.

    Returns None when neither date is known.
    """
    if start is None and end is None:
        return None

    now = now or datetime.now(timezone.utc)
    if start is not None and now < start:
        return HackathonStatus.UPCOMING
    if end is not None and now > end:
        return HackathonStatus.COMPLETED
    if start is None:
        # Only an end date in the future is known
        return HackathonStatus.UPCOMING
    return HackathonStatus.ONGOING


def resolve_hackathon_status(
    explicit: Optional[HackathonStatus],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> HackathonStatus:
    """
    Pick the status shown for a hackathon.

    An explicit upstream signal always wins. Otherwise the status is
    derived from the dates, and ``upcoming`` is used when those are
    unknown too.
    """
    if explicit is not None:
        return HackathonStatus(explicit)
    return status_from_dates(start, end, now) or HackathonStatus.UPCOMING


def first_matching_status(texts: Iterable[str], table: StatusKeywordTable) -> Optional[HackathonStatus]:
    """Return the first status any of ``texts`` matches in ``table``."""
    for text in texts:
        status = table.match(text)
        if status is not None:
            return status
    return None
