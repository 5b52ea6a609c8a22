# File: src/parkledger/domain/chronology.py
"""
Calendar and Time Value Objects

This module contains:
1. CalendarDate / DateTime: immutable, validated Gregorian date-times
2. Parsing of the DD-MM-YYYY / HH:MM text forms used by operators
3. Ordering helpers (compare, minutes_between)
4. The leap-year rule and the closed-day rule (February 29)

Day arithmetic uses a proleptic Gregorian day count computed in this module,
not the datetime module.
"""

from dataclasses import dataclass
from enum import Enum
import re

from .exceptions import ClosedDayError, InvalidDateError


MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

MIN_YEAR = 1
MAX_YEAR = 9999

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

_DATE_PATTERN = re.compile(r'([0-9]{2})-([0-9]{2})-([0-9]{4})')
_TIME_PATTERN = re.compile(r'([0-9]{2}):([0-9]{2})')


# ============================================================================
# CALENDAR RULES
# ============================================================================

def is_leap_year(year: int) -> bool:
    """Gregorian rule: divisible by 4 and (not by 100 or by 400)"""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(month: int, year: int) -> int:
    """Number of days of a month, honouring leap years"""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12: {month}")
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def _days_before_year(year: int) -> int:
    previous = year - 1
    return previous * 365 + previous // 4 - previous // 100 + previous // 400


def _days_before_month(month: int, year: int) -> int:
    days = sum(_DAYS_IN_MONTH[:month - 1])
    if month > 2 and is_leap_year(year):
        days += 1
    return days


# ============================================================================
# VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True, order=True)
class CalendarDate:
    """
    Value Object: a valid Gregorian calendar date
    Field order gives the (year, month, day) total order.
    """
    year: int
    month: int
    day: int

    def __post_init__(self):
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise ValueError(f"Year out of range: {self.year}")
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month out of range: {self.month}")
        if not 1 <= self.day <= days_in_month(self.month, self.year):
            raise ValueError(f"Day out of range: {self.day:02d}-{self.month:02d}-{self.year}")

    @property
    def ordinal(self) -> int:
        """Days since 31-12-0000 (01-01-0001 is day 1)"""
        return _days_before_year(self.year) + _days_before_month(self.month, self.year) + self.day

    def __str__(self) -> str:
        return f"{self.day:02d}-{self.month:02d}-{self.year:04d}"


@dataclass(frozen=True, order=True)
class DateTime:
    """
    Value Object: a calendar date plus a minute-resolution time of day
    Ordered by (year, month, day, hour, minute).
    """
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0

    def __post_init__(self):
        # Delegate date validation
        CalendarDate(self.year, self.month, self.day)

        if not 0 <= self.hour <= 23:
            raise ValueError(f"Hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Minute out of range: {self.minute}")

    @property
    def date(self) -> CalendarDate:
        return CalendarDate(self.year, self.month, self.day)

    def to_minutes(self) -> int:
        """Absolute minute count on the proleptic Gregorian timeline"""
        return (self.date.ordinal * MINUTES_PER_DAY
                + self.hour * MINUTES_PER_HOUR + self.minute)

    def format_date(self) -> str:
        return str(self.date)

    def format_time(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return f"{self.format_date()} {self.format_time()}"


class Ordering(Enum):
    """Result of comparing two date-times"""
    BEFORE = -1
    EQUAL = 0
    AFTER = 1


# ============================================================================
# OPERATIONS
# ============================================================================

def is_closed_day(date: CalendarDate) -> bool:
    """February 29 is a closed day: no events, no charge"""
    return date.month == 2 and date.day == 29


def next_day(date: CalendarDate) -> CalendarDate:
    """The calendar day after date"""
    if date.day < days_in_month(date.month, date.year):
        return CalendarDate(date.year, date.month, date.day + 1)
    if date.month < 12:
        return CalendarDate(date.year, date.month + 1, 1)
    return CalendarDate(date.year + 1, 1, 1)


def day_ordinal(date: CalendarDate) -> int:
    """Proleptic Gregorian day number, 01-01-0001 being day 1"""
    return date.ordinal


def compare(a: DateTime, b: DateTime) -> Ordering:
    """Compare two date-times: BEFORE means a happens before b"""
    if a < b:
        return Ordering.BEFORE
    if a > b:
        return Ordering.AFTER
    return Ordering.EQUAL


def minutes_between(start: DateTime, end: DateTime) -> int:
    """
    Whole minutes elapsed from start to end
    Raises: ValueError if end is before start (never clamps)
    """
    if end < start:
        raise ValueError(f"{end} is before {start}")
    return end.to_minutes() - start.to_minutes()


def parse_date(text: str, allow_closed_day: bool = True) -> CalendarDate:
    """
    Parse a DD-MM-YYYY date
    Raises: InvalidDateError for malformed or non-existent dates,
            ClosedDayError for February 29 when closed days are refused
    """
    match = _DATE_PATTERN.fullmatch(text or "")
    if not match:
        raise InvalidDateError()

    day, month, year = (int(group) for group in match.groups())
    try:
        date = CalendarDate(year, month, day)
    except ValueError:
        raise InvalidDateError() from None

    if not allow_closed_day and is_closed_day(date):
        raise ClosedDayError()

    return date


def parse_time(text: str) -> tuple:
    """Parse an HH:MM time into (hour, minute)"""
    match = _TIME_PATTERN.fullmatch(text or "")
    if not match:
        raise InvalidDateError()

    hour, minute = (int(group) for group in match.groups())
    if hour > 23 or minute > 59:
        raise InvalidDateError()
    return hour, minute


def parse_date_time(date_text: str, time_text: str,
                    allow_closed_day: bool = False) -> DateTime:
    """
    Parse the date and time arguments of an entry or exit event
    February 29 is refused by default since no lot operates that day.
    """
    date = parse_date(date_text, allow_closed_day=allow_closed_day)
    hour, minute = parse_time(time_text)
    return DateTime(date.year, date.month, date.day, hour, minute)
