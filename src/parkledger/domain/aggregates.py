# File: src/parkledger/domain/aggregates.py
"""
Aggregate Roots for the Parking Ledger
Following Domain-Driven Design (DDD) Aggregate Pattern

Aggregates:
1. ParkingLot - occupancy of a lot and its per-day billing ledger

Key Concepts:
- Aggregate Roots enforce business invariants
- Ledger lines are copies of the completed stay, never shared records
- Domain events are raised for important state changes
- All modifications go through aggregate root methods
"""

from dataclasses import dataclass
from typing import List, Optional, Dict, Tuple, Any
from decimal import Decimal
import logging

from .chronology import CalendarDate, DateTime
from .exceptions import InvalidCapacityError
from .models import (
    Entity, RateSchedule, ParkingRecord, DomainEvent,
    ParkingLotCreatedEvent, ParkingLotRemovedEvent,
    VehicleEnteredEvent, VehicleExitedEvent
)
from .sorting import stable_sort


# ============================================================================
# BASE AGGREGATE ROOT
# ============================================================================

class AggregateRoot(Entity):
    """
    Base class for all aggregate roots
    Provides domain event collection and versioning
    """

    def __init__(self, id: Optional[str] = None):
        super().__init__(id)
        self._version: int = 1
        self._changes: List[DomainEvent] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def version(self) -> int:
        """Get current aggregate version"""
        return self._version

    def _increment_version(self) -> None:
        self._version += 1

    def _add_domain_event(self, event: DomainEvent) -> None:
        """Add a domain event to the list of changes"""
        self._changes.append(event)
        self._logger.debug(f"Added domain event: {event.__class__.__name__}")

    def clear_events(self) -> List[DomainEvent]:
        """Clear and return all domain events"""
        events = self._changes.copy()
        self._changes.clear()
        return events

    @property
    def has_changes(self) -> bool:
        return len(self._changes) > 0

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants - to be overridden by subclasses"""
        pass


# ============================================================================
# BILLING LEDGER
# ============================================================================

@dataclass(frozen=True)
class BillingLine:
    """Value Object: one paid stay as listed in a daily report"""
    license_plate: str
    exit_time: DateTime
    amount: Decimal


class DailyAggregate:
    """
    Running total and itemised lines of one lot for one calendar date
    Lines are kept in recording order.
    """

    def __init__(self, date: CalendarDate):
        self.date = date
        self.total: Decimal = Decimal('0')
        self._lines: List[BillingLine] = []

    def add(self, line: BillingLine) -> None:
        self._lines.append(line)
        self.total += line.amount

    @property
    def lines(self) -> Tuple[BillingLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


# ============================================================================
# PARKING LOT AGGREGATE
# ============================================================================

class ParkingLot(AggregateRoot):
    """
    Aggregate Root: a named lot with fixed capacity and tariff
    Tracks which plates are inside and the revenue of every exit date.
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        rates: RateSchedule
    ):
        super().__init__(name)
        self.name = name
        self.capacity = capacity
        self.rates = rates

        # Internal state
        self._parked: Dict[str, DateTime] = {}          # plate -> entry time
        self._daily: Dict[CalendarDate, DailyAggregate] = {}

        self._validate_invariants()
        self._add_domain_event(ParkingLotCreatedEvent(name, capacity, rates))
        self._logger.info(f"Created ParkingLot: {self.name} (capacity {self.capacity})")

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants"""
        if not self.name:
            raise ValueError("Parking lot name cannot be empty")

        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity <= 0:
            raise InvalidCapacityError(str(self.capacity))

        if not 0 <= len(self._parked) <= self.capacity:
            raise ValueError(
                f"Occupancy {len(self._parked)} outside 0..{self.capacity} for {self.name}"
            )

    # ------------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------------

    @property
    def occupied(self) -> int:
        return len(self._parked)

    @property
    def available_spaces(self) -> int:
        return self.capacity - self.occupied

    @property
    def is_full(self) -> bool:
        return self.occupied >= self.capacity

    @property
    def parked_plates(self) -> List[str]:
        """Plates currently inside, in arrival order"""
        return list(self._parked)

    def is_parked_here(self, license_plate: str) -> bool:
        return license_plate in self._parked

    def admit(self, license_plate: str, entry_time: DateTime) -> None:
        """
        Register a vehicle entering the lot
        Raises: ValueError if the lot is full or the plate is already inside
        """
        if self.is_full:
            raise ValueError(f"Parking lot {self.name} is full")
        if license_plate in self._parked:
            raise ValueError(f"Vehicle {license_plate} is already inside {self.name}")

        self._parked[license_plate] = entry_time
        self._increment_version()
        self._add_domain_event(
            VehicleEnteredEvent(self.name, license_plate, entry_time, self.available_spaces)
        )

    def discharge(self, license_plate: str, record: ParkingRecord) -> BillingLine:
        """
        Register a paid exit: frees the space and books the amount
        Returns: the ledger line created for the exit date
        """
        if license_plate not in self._parked:
            raise ValueError(f"Vehicle {license_plate} is not inside {self.name}")

        del self._parked[license_plate]
        line = self.record_completed_stay(license_plate, record)
        self._increment_version()
        self._add_domain_event(
            VehicleExitedEvent(
                self.name, license_plate, record.entry_time, record.exit_time, record.amount_paid
            )
        )
        return line

    def mark_removed(self) -> None:
        """Raise the removal event; the caller drops the aggregate"""
        self._add_domain_event(ParkingLotRemovedEvent(self.name, self.parked_plates))
        self._logger.info(f"Removed ParkingLot: {self.name}")

    # ------------------------------------------------------------------------
    # Billing ledger
    # ------------------------------------------------------------------------

    def record_completed_stay(self, license_plate: str, record: ParkingRecord) -> BillingLine:
        """Add a completed stay to the aggregate of its exit date"""
        if record.is_active:
            raise ValueError(f"Parking record {record.id} is still open")

        line = BillingLine(license_plate, record.exit_time, record.amount_paid)
        date = record.exit_time.date
        if date not in self._daily:
            self._daily[date] = DailyAggregate(date)
        self._daily[date].add(line)
        return line

    def daily_totals(self) -> List[Tuple[CalendarDate, Decimal]]:
        """One (date, total) per date with at least one paid stay, by date"""
        totals = [(daily.date, daily.total) for daily in self._daily.values()]
        return stable_sort(totals, key=lambda item: item[0])

    def billing_lines(self, date: CalendarDate) -> List[BillingLine]:
        """Paid stays of a date ordered by exit time, ties in recording order"""
        daily = self._daily.get(date)
        if daily is None:
            return []
        return stable_sort(daily.lines, key=lambda line: line.exit_time)

    @property
    def total_revenue(self) -> Decimal:
        total = Decimal('0')
        for daily in self._daily.values():
            total += daily.total
        return total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "name": self.name,
            "capacity": self.capacity,
            "occupied": self.occupied,
            "available_spaces": self.available_spaces,
            "rates": self.rates.to_dict(),
            "total_revenue": str(self.total_revenue),
            "version": self.version
        }

    def __str__(self) -> str:
        return f"{self.name} {self.capacity} {self.available_spaces}"
