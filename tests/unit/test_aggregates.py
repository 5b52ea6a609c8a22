# File: tests/unit/test_aggregates.py
"""
Aggregate Unit Tests

ParkingLot occupancy, domain events and the per-date billing ledger.
"""

import unittest
from decimal import Decimal

from parkledger.domain.aggregates import DailyAggregate, BillingLine, ParkingLot
from parkledger.domain.chronology import CalendarDate, DateTime
from parkledger.domain.exceptions import InvalidCapacityError
from parkledger.domain.models import (
    ParkingLotCreatedEvent, ParkingRecord, RateSchedule, VehicleEnteredEvent,
    VehicleExitedEvent
)


def completed_record(lot_name, entry, exit, amount):
    record = ParkingRecord(lot_name, entry)
    record.close(exit, Decimal(amount))
    return record


class TestParkingLot(unittest.TestCase):
    """Test ParkingLot aggregate"""

    def setUp(self):
        self.rates = RateSchedule(Decimal("0.25"), Decimal("0.30"), Decimal("15.00"))
        self.lot = ParkingLot("Saldanha", 2, self.rates)

    def test_creation_raises_event(self):
        events = self.lot.clear_events()
        self.assertEqual(len(events), 1)
        self.assertIsInstance(events[0], ParkingLotCreatedEvent)
        self.assertFalse(self.lot.has_changes)

    def test_invalid_capacity(self):
        for capacity in [0, -3]:
            with self.subTest(capacity=capacity):
                with self.assertRaises(InvalidCapacityError) as ctx:
                    ParkingLot("Alameda", capacity, self.rates)
                self.assertEqual(str(ctx.exception), f"{capacity}: invalid capacity.")

    def test_admit_until_full(self):
        self.lot.admit("AA-00-AA", DateTime(2024, 4, 1, 8, 0))
        self.assertEqual(self.lot.available_spaces, 1)
        self.lot.admit("BB-00-BB", DateTime(2024, 4, 1, 8, 5))

        self.assertTrue(self.lot.is_full)
        self.assertEqual(self.lot.parked_plates, ["AA-00-AA", "BB-00-BB"])
        with self.assertRaises(ValueError):
            self.lot.admit("CC-00-CC", DateTime(2024, 4, 1, 8, 10))

    def test_admit_same_plate_twice_is_refused(self):
        self.lot.admit("AA-00-AA", DateTime(2024, 4, 1, 8, 0))
        with self.assertRaises(ValueError):
            self.lot.admit("AA-00-AA", DateTime(2024, 4, 1, 9, 0))

    def test_discharge_books_the_exit_date(self):
        self.lot.clear_events()
        entry = DateTime(2024, 4, 1, 8, 0)
        self.lot.admit("AA-00-AA", entry)
        record = completed_record("Saldanha", entry, DateTime(2024, 4, 2, 9, 0), "16.00")

        line = self.lot.discharge("AA-00-AA", record)

        self.assertEqual(line.amount, Decimal("16.00"))
        self.assertEqual(self.lot.available_spaces, 2)
        self.assertEqual(self.lot.daily_totals(), [(CalendarDate(2024, 4, 2), Decimal("16.00"))])
        events = self.lot.clear_events()
        self.assertIsInstance(events[0], VehicleEnteredEvent)
        self.assertIsInstance(events[1], VehicleExitedEvent)

    def test_discharge_of_absent_plate_is_refused(self):
        record = completed_record(
            "Saldanha", DateTime(2024, 4, 1, 8, 0), DateTime(2024, 4, 1, 9, 0), "1.00"
        )
        with self.assertRaises(ValueError):
            self.lot.discharge("AA-00-AA", record)

    def test_open_record_cannot_be_booked(self):
        with self.assertRaises(ValueError):
            self.lot.record_completed_stay("AA-00-AA", ParkingRecord("Saldanha", DateTime(2024, 4, 1)))

    def test_daily_totals_sorted_by_date(self):
        for plate, exit, amount in [
            ("AA-00-AA", DateTime(2024, 4, 3, 10, 0), "3.00"),
            ("BB-00-BB", DateTime(2024, 4, 1, 10, 0), "1.00"),
            ("CC-00-CC", DateTime(2024, 4, 3, 9, 0), "2.00"),
        ]:
            record = completed_record("Saldanha", DateTime(2024, 4, 1, 8, 0), exit, amount)
            self.lot.record_completed_stay(plate, record)

        self.assertEqual(self.lot.daily_totals(), [
            (CalendarDate(2024, 4, 1), Decimal("1.00")),
            (CalendarDate(2024, 4, 3), Decimal("5.00")),
        ])
        self.assertEqual(self.lot.total_revenue, Decimal("6.00"))

    def test_billing_lines_sorted_by_exit_time_ties_in_recording_order(self):
        entry = DateTime(2024, 4, 1, 8, 0)
        for plate, exit in [
            ("AA-00-AA", DateTime(2024, 4, 1, 12, 0)),
            ("BB-00-BB", DateTime(2024, 4, 1, 9, 0)),
            ("CC-00-CC", DateTime(2024, 4, 1, 12, 0)),
        ]:
            self.lot.record_completed_stay(plate, completed_record("Saldanha", entry, exit, "1.00"))

        lines = self.lot.billing_lines(CalendarDate(2024, 4, 1))
        self.assertEqual([line.license_plate for line in lines], ["BB-00-BB", "AA-00-AA", "CC-00-CC"])
        self.assertEqual(self.lot.billing_lines(CalendarDate(2024, 4, 2)), [])

    def test_str_lists_capacity_and_free_spaces(self):
        self.assertEqual(str(self.lot), "Saldanha 2 2")


class TestDailyAggregate(unittest.TestCase):

    def test_running_total(self):
        daily = DailyAggregate(CalendarDate(2024, 4, 1))
        daily.add(BillingLine("AA-00-AA", DateTime(2024, 4, 1, 9, 0), Decimal("1.25")))
        daily.add(BillingLine("BB-00-BB", DateTime(2024, 4, 1, 8, 0), Decimal("2.50")))

        self.assertEqual(daily.total, Decimal("3.75"))
        self.assertEqual(len(daily), 2)
        self.assertEqual(daily.lines[0].license_plate, "AA-00-AA")


if __name__ == '__main__':
    unittest.main()
