"""Week identifiers used as execution-log keys.

Format ``<YYYY>-W<n>`` with n = ceil((days since Jan 1 + weekday of Jan 1 + 1) / 7),
where weekdays count from Sunday = 0. This is not ISO-8601 week numbering.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime

_WEEK_ID_RE = re.compile(r"^(\d{4})-W(\d+)$")


def _sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def week_id(moment: date | datetime | None = None) -> str:
    """Return the week id of ``moment`` (local now when omitted).

    A datetime contributes its time of day as a fractional day, so the week
    can advance during the last day of a seven-day block.
    """
    moment = moment or datetime.now()
    start_of_year = date(moment.year, 1, 1)
    if isinstance(moment, datetime):
        start = datetime(moment.year, 1, 1, tzinfo=moment.tzinfo)
        days_since = (moment - start).total_seconds() / 86400.0
    else:
        days_since = float((moment - start_of_year).days)
    number = math.ceil((days_since + _sunday_based_weekday(start_of_year) + 1) / 7)
    return f"{moment.year}-W{number}"


def week_sort_key(value: str) -> tuple[int, int, str]:
    """Order week ids chronologically; unparseable ids sort last by text."""
    match = _WEEK_ID_RE.match(value)
    if match is None:
        return (10**9, 0, value)
    return (int(match.group(1)), int(match.group(2)), value)
