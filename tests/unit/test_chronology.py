# File: tests/unit/test_chronology.py
"""
Calendar/Time Unit Tests

Parsing of DD-MM-YYYY / HH:MM, the leap-year and closed-day rules, ordering
and minute arithmetic.
"""

import unittest

from parkledger.domain.chronology import (
    CalendarDate, DateTime, Ordering, compare, day_ordinal, days_in_month,
    is_closed_day, is_leap_year, minutes_between, next_day, parse_date,
    parse_date_time, parse_time
)
from parkledger.domain.exceptions import ClosedDayError, InvalidDateError


class TestCalendarRules(unittest.TestCase):
    """Leap years, month lengths and the closed day"""

    def test_leap_years(self):
        self.assertTrue(is_leap_year(2024))
        self.assertTrue(is_leap_year(2000))
        self.assertFalse(is_leap_year(1900))
        self.assertFalse(is_leap_year(2023))

    def test_days_in_month(self):
        self.assertEqual(days_in_month(2, 2024), 29)
        self.assertEqual(days_in_month(2, 2023), 28)
        self.assertEqual(days_in_month(4, 2023), 30)
        self.assertEqual(days_in_month(12, 2023), 31)

    def test_february_29_is_closed(self):
        self.assertTrue(is_closed_day(CalendarDate(2024, 2, 29)))
        self.assertFalse(is_closed_day(CalendarDate(2024, 2, 28)))
        self.assertFalse(is_closed_day(CalendarDate(2024, 3, 1)))

    def test_next_day_rolls_over(self):
        self.assertEqual(next_day(CalendarDate(2024, 2, 28)), CalendarDate(2024, 2, 29))
        self.assertEqual(next_day(CalendarDate(2023, 2, 28)), CalendarDate(2023, 3, 1))
        self.assertEqual(next_day(CalendarDate(2023, 12, 31)), CalendarDate(2024, 1, 1))

    def test_day_ordinal_is_consecutive(self):
        self.assertEqual(day_ordinal(CalendarDate(1, 1, 1)), 1)
        self.assertEqual(
            day_ordinal(CalendarDate(2024, 3, 1)) - day_ordinal(CalendarDate(2024, 2, 28)), 2
        )
        self.assertEqual(
            day_ordinal(CalendarDate(2024, 1, 1)) - day_ordinal(CalendarDate(2023, 1, 1)), 365
        )


class TestParsing(unittest.TestCase):
    """Text forms accepted and refused"""

    def test_parse_valid_date_time(self):
        moment = parse_date_time("01-04-2024", "08:05")
        self.assertEqual(moment, DateTime(2024, 4, 1, 8, 5))
        self.assertEqual(str(moment), "01-04-2024 08:05")

    def test_malformed_dates_are_refused(self):
        for text in ["1-04-2024", "01/04/2024", "01-04-24", "", "aa-bb-cccc", "01-04-2024 ", "01-04-2024\n"]:
            with self.subTest(text=text):
                with self.assertRaises(InvalidDateError):
                    parse_date(text)

    def test_non_existent_dates_are_refused(self):
        for text in ["31-04-2024", "29-02-2023", "00-01-2024", "01-13-2024", "01-01-0000"]:
            with self.subTest(text=text):
                with self.assertRaises(InvalidDateError):
                    parse_date(text)

    def test_malformed_times_are_refused(self):
        for text in ["24:00", "12:60", "8:00", "0800", "", "08:00\n"]:
            with self.subTest(text=text):
                with self.assertRaises(InvalidDateError):
                    parse_time(text)

    def test_closed_day_refused_for_events(self):
        with self.assertRaises(ClosedDayError):
            parse_date_time("29-02-2024", "10:00")

    def test_closed_day_error_is_an_invalid_date(self):
        self.assertTrue(issubclass(ClosedDayError, InvalidDateError))
        self.assertEqual(str(ClosedDayError()), "invalid date.")

    def test_closed_day_allowed_for_queries(self):
        self.assertEqual(parse_date("29-02-2024"), CalendarDate(2024, 2, 29))
        with self.assertRaises(ClosedDayError):
            parse_date("29-02-2024", allow_closed_day=False)


class TestOrdering(unittest.TestCase):
    """compare and minutes_between"""

    def test_compare(self):
        earlier = DateTime(2024, 1, 1, 23, 59)
        later = DateTime(2024, 1, 2, 0, 0)
        self.assertEqual(compare(earlier, later), Ordering.BEFORE)
        self.assertEqual(compare(later, earlier), Ordering.AFTER)
        self.assertEqual(compare(later, DateTime(2024, 1, 2)), Ordering.EQUAL)

    def test_minutes_between_crosses_leap_day(self):
        start = DateTime(2024, 2, 28, 12, 0)
        end = DateTime(2024, 3, 1, 12, 0)
        self.assertEqual(minutes_between(start, end), 2 * 1440)

    def test_minutes_between_crosses_year(self):
        start = DateTime(2023, 12, 31, 23, 30)
        end = DateTime(2024, 1, 1, 0, 15)
        self.assertEqual(minutes_between(start, end), 45)

    def test_minutes_between_refuses_reversed_range(self):
        with self.assertRaises(ValueError):
            minutes_between(DateTime(2024, 1, 2), DateTime(2024, 1, 1))

    def test_invalid_value_objects(self):
        with self.assertRaises(ValueError):
            CalendarDate(2023, 2, 29)
        with self.assertRaises(ValueError):
            DateTime(2024, 1, 1, 24, 0)


if __name__ == '__main__':
    unittest.main()
