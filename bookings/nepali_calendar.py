"""Gregorian to Bikram Sambat conversion.

Two tiers: walk the month table from a fixed new-year anchor, and if that
fails, fall back to a rough constant-offset approximation (of today's date when
the input has no usable date). The result carries an ``exact`` flag so callers
can tell the tiers apart.
"""
import logging
import re
from datetime import date, datetime
from typing import NamedTuple, Union

logger = logging.getLogger(__name__)

# 2024-04-13 is 1 Baisakh 2081.
EPOCH_GREGORIAN = date(2024, 4, 13)
EPOCH_YEAR = 2081
EPOCH_MONTH = 0
EPOCH_DAY = 1

DEFAULT_MONTH_DAYS = 30
OFFSET_YEARS = 57

MONTH_NAMES = (
    'बैशाख',
    'जेठ',
    'आषाढ',
    'श्रावण',
    'भाद्र',
    'आश्विन',
    'कार्तिक',
    'मंसिर',
    'पौष',
    'माघ',
    'फाल्गुन',
    'चैत्र',
)

MONTH_DAYS = {
    2080: (31, 31, 32, 32, 31, 30, 30, 29, 30, 29, 30, 30),
    2081: (31, 31, 32, 32, 31, 30, 30, 30, 29, 29, 30, 31),
    2082: (30, 32, 31, 32, 31, 30, 30, 30, 29, 30, 29, 31),
    2083: (31, 31, 32, 31, 31, 31, 30, 29, 30, 29, 30, 30),
    2084: (31, 31, 32, 32, 31, 30, 30, 29, 30, 29, 30, 30),
    2085: (31, 32, 31, 32, 31, 30, 30, 30, 29, 29, 30, 31),
}

_ISO_PARTS = re.compile(r'^\s*(\d{4})-(\d{1,2})-(\d{1,2})')

DateLike = Union[date, datetime, str]


class ConversionFailure(ValueError):
    pass


class NepaliDate(NamedTuple):
    year: int
    month: int
    day: int
    exact: bool

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month]

    @property
    def label(self) -> str:
        return f"{self.year} {self.month_name} {self.day}"

    def __str__(self):
        return self.label


def month_length(year: int, month: int, table=None) -> tuple:
    """Return ``(days, known)`` for a BS month, defaulting to 30 days."""
    table = MONTH_DAYS if table is None else table
    months = table.get(year)
    if months is None:
        return DEFAULT_MONTH_DAYS, False
    return months[month], True


def _gregorian_parts(value: DateLike) -> tuple:
    if isinstance(value, (date, datetime)):
        return value.year, value.month, value.day
    match = _ISO_PARTS.match(str(value))
    if not match:
        raise ConversionFailure(f"Not a YYYY-MM-DD date: {value!r}")
    return tuple(int(part) for part in match.groups())


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date(*_gregorian_parts(value))


def _walk_table(gregorian: date, table) -> NepaliDate:
    diff_days = (gregorian - EPOCH_GREGORIAN).days

    year, month, day = EPOCH_YEAR, EPOCH_MONTH, EPOCH_DAY + diff_days
    exact = True

    while day <= 0:
        month -= 1
        if month < 0:
            month = 11
            year -= 1
        days, known = month_length(year, month, table)
        exact = exact and known
        day += days

    while True:
        days, known = month_length(year, month, table)
        exact = exact and known
        if day <= days:
            break
        day -= days
        month += 1
        if month > 11:
            month = 0
            year += 1

    return NepaliDate(year, month, day, exact)


def _offset_approximation(value: DateLike) -> NepaliDate:
    year, month, day = _gregorian_parts(value)
    if not 1 <= month <= 12:
        raise ConversionFailure(f"Month out of range: {value!r}")
    return NepaliDate(year + OFFSET_YEARS, month - 1, day, False)


def convert(value: DateLike, table=None) -> NepaliDate:
    """Convert a Gregorian date (or ISO string) to a :class:`NepaliDate`.

    Dates outside the table still walk month by month using 30-day months and
    come back with ``exact=False``. If the walk itself fails, for example on
    an impossible date such as ``2024-02-30``, the year is shifted by 57 and
    the Gregorian month and day are reused. Input with no usable year, month
    and day is approximated from today's date. Never raises.
    """
    try:
        return _walk_table(_as_date(value), table)
    except (ValueError, TypeError, OverflowError, IndexError):
        logger.warning("Falling back to offset approximation for %r", value)

    try:
        return _offset_approximation(value)
    except ConversionFailure:
        logger.warning("No usable date in %r, approximating from today", value)
        return _offset_approximation(date.today())


def to_nepali_date(value: DateLike, table=None) -> str:
    return convert(value, table).label
