# File: tests/unit/test_repositories_messaging.py
"""
Infrastructure Unit Tests

In-memory repositories and the in-process event bus.
"""

import unittest
from decimal import Decimal
from unittest.mock import Mock

from parkledger.domain.aggregates import ParkingLot
from parkledger.domain.chronology import DateTime
from parkledger.domain.models import (
    LicensePlate, ParkingLotCreatedEvent, RateSchedule, Vehicle, VehicleEnteredEvent
)
from parkledger.infrastructure.messaging import WILDCARD, AuditLogHandler, EventBus
from parkledger.infrastructure.repositories import ParkingLotRepository, VehicleRepository


RATES = RateSchedule(Decimal("0.25"), Decimal("0.30"), Decimal("15.00"))


class TestParkingLotRepository(unittest.TestCase):

    def setUp(self):
        self.repository = ParkingLotRepository()

    def test_keeps_creation_order(self):
        for name in ["Saldanha", "Alameda", "Baixa"]:
            self.repository.add(ParkingLot(name, 10, RATES))

        self.assertEqual(self.repository.names(), ["Saldanha", "Alameda", "Baixa"])
        self.assertEqual(self.repository.count(), 3)
        self.assertTrue(self.repository.exists("Alameda"))

    def test_duplicate_key_is_refused(self):
        self.repository.add(ParkingLot("Saldanha", 10, RATES))
        with self.assertRaises(KeyError):
            self.repository.add(ParkingLot("Saldanha", 5, RATES))

    def test_delete(self):
        self.repository.add(ParkingLot("Saldanha", 10, RATES))
        self.assertTrue(self.repository.delete("Saldanha"))
        self.assertFalse(self.repository.delete("Saldanha"))
        self.assertIsNone(self.repository.get("Saldanha"))

    def test_clear(self):
        self.repository.add(ParkingLot("Saldanha", 10, RATES))
        self.repository.clear()
        self.assertEqual(self.repository.get_all(), [])


class TestVehicleRepository(unittest.TestCase):

    def test_find_parked_in(self):
        repository = VehicleRepository()
        inside = repository.add(Vehicle(LicensePlate("AA-00-AA")))
        elsewhere = repository.add(Vehicle(LicensePlate("BB-00-BB")))
        repository.add(Vehicle(LicensePlate("CC-00-CC")))
        inside.park("Saldanha", DateTime(2024, 4, 1, 8, 0))
        elsewhere.park("Alameda", DateTime(2024, 4, 1, 8, 0))

        self.assertEqual(repository.find_parked_in("Saldanha"), [inside])
        self.assertIs(repository.find_by_license_plate("BB-00-BB"), elsewhere)
        self.assertIsNone(repository.find_by_license_plate("DD-00-DD"))


class TestEventBus(unittest.TestCase):
    """Test in-memory publish/subscribe"""

    def setUp(self):
        self.bus = EventBus()
        self.event = VehicleEnteredEvent("Saldanha", "AA-00-AA", DateTime(2024, 4, 1, 8, 0), 9)

    def test_typed_and_wildcard_subscribers(self):
        typed = Mock()
        typed.can_handle.return_value = True
        everything = Mock()
        everything.can_handle.return_value = True
        self.bus.subscribe("vehicle.entered", typed)
        self.bus.subscribe(WILDCARD, everything)

        self.bus.publish(self.event)
        self.bus.publish(ParkingLotCreatedEvent("Saldanha", 10, RATES))

        typed.handle.assert_called_once_with(self.event)
        self.assertEqual(everything.handle.call_count, 2)

    def test_unsubscribe(self):
        handler = Mock()
        self.bus.subscribe("vehicle.entered", handler)
        self.bus.unsubscribe("vehicle.entered", handler)
        self.bus.publish(self.event)
        handler.handle.assert_not_called()

    def test_clear_subscribers(self):
        handler = Mock()
        self.bus.subscribe(WILDCARD, handler)
        self.bus.clear_subscribers()
        self.bus.publish(self.event)
        handler.handle.assert_not_called()

    def test_failing_handler_does_not_stop_others(self):
        failing = Mock()
        failing.handle.side_effect = RuntimeError("boom")
        working = Mock()
        self.bus.subscribe("vehicle.entered", failing)
        self.bus.subscribe("vehicle.entered", working)

        with self.assertLogs("EventBus", level="ERROR"):
            self.bus.publish(self.event)
        working.handle.assert_called_once_with(self.event)

    def test_audit_log_handler(self):
        with self.assertLogs("parkledger.audit", level="INFO") as logs:
            AuditLogHandler().handle(self.event)
        self.assertIn("vehicle.entered", logs.output[0])
        self.assertIn("AA-00-AA", logs.output[0])


if __name__ == '__main__':
    unittest.main()
