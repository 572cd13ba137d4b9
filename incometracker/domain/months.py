"""Mini README: ``MM-YYYY`` month tags used by filters and monthly reports.

Structure:
    * month_tag - tag of the UTC calendar month containing a timestamp.
    * parse_month_tag - strict parser returning ``(year, month)``.
    * month_window - inclusive first/last instant of a tagged month.
    * as_utc - normalise naive or offset datetimes to UTC.

All month arithmetic happens in UTC so a shipment completed late on the last
day of a month in a local timezone is reported under its UTC month.
"""

from __future__ import annotations

import calendar
import re
from datetime import datetime, timezone
from typing import Tuple

from ..errors import InvalidFilter

_MONTH_TAG_PATTERN = re.compile(r"^(\d{2})-(\d{4})$")


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` as an aware UTC datetime; naive values are taken as UTC."""

    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def month_tag(moment: datetime) -> str:
    return as_utc(moment).strftime("%m-%Y")


def format_month_tag(year: int, month: int) -> str:
    """Build a tag from numbers, validating the month range."""

    if not 1 <= month <= 12:
        raise InvalidFilter(f"Month must be between 1 and 12, got {month}")
    return f"{month:02d}-{year:04d}"


def parse_month_tag(tag: str) -> Tuple[int, int]:
    """Parse ``MM-YYYY`` into ``(year, month)`` or raise ``InvalidFilter``."""

    match = _MONTH_TAG_PATTERN.match(tag.strip()) if isinstance(tag, str) else None
    if match is None:
        raise InvalidFilter(f"Month tag must look like MM-YYYY, got {tag!r}")
    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidFilter(f"Month tag {tag!r} has no month {month}")
    if year < 1:
        raise InvalidFilter(f"Month tag {tag!r} has no year {year}")
    return year, month


def month_window(tag: str) -> Tuple[datetime, datetime]:
    """Return the first and last instant (inclusive) of the tagged month."""

    year, month = parse_month_tag(tag)
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    last_day = calendar.monthrange(year, month)[1]
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=timezone.utc)
    return start, end
