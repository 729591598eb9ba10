"""
Period utilities for monthly ranking snapshots.

A period is identified by the naive UTC datetime of its first instant, which
is how the ranking store stamps monthly records.
"""

import re
from datetime import datetime
from typing import Tuple

from rankstats.constants import CacheConstants
from rankstats.utils.ranking_exceptions import InvalidArgumentError

_MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})$')


def month_start(year: int, month: int) -> datetime:
    """
    First instant of a calendar month.

    Raises:
        InvalidArgumentError: If the month is out of range
    """
    if not 1 <= month <= 12:
        raise InvalidArgumentError('month', f"month must be between 1 and 12, got {month}")
    try:
        return datetime(year, month, 1)
    except ValueError as e:
        raise InvalidArgumentError('month', str(e)) from e


def next_month_start(period: datetime) -> datetime:
    if period.month == 12:
        return period.replace(year=period.year + 1, month=1, day=1)
    return period.replace(month=period.month + 1, day=1)


def month_range(year: int, month: int) -> Tuple[datetime, datetime]:
    """Half-open [start, end) range covering a calendar month."""
    start = month_start(year, month)
    return start, next_month_start(start)


def parse_month(value: str) -> datetime:
    """
    Parse a 'YYYY-MM' string into the first instant of that month.

    Raises:
        InvalidArgumentError: If the string is not a valid month
    """
    match = _MONTH_PATTERN.match((value or '').strip())
    if not match:
        raise InvalidArgumentError('month', f"expected YYYY-MM, got {value!r}")
    return month_start(int(match.group(1)), int(match.group(2)))


def period_key(period: datetime) -> str:
    """Calendar key used to memoize per-period results."""
    return period.strftime(CacheConstants.PERIOD_KEY_FORMAT)
