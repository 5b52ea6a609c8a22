# File: src/parkledger/domain/models.py
"""
Domain Models for the Parking Ledger
Following Domain-Driven Design (DDD) principles with rich domain models

This module contains:
1. Value Objects: LicensePlate, RateSchedule
2. Entities: ParkingRecord, Vehicle
3. Enums: ParkingStatus, VehicleState
4. Domain Events: Events representing business occurrences

All models validate themselves on construction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
from decimal import Decimal, getcontext
import re
import uuid
from enum import Enum

from .chronology import DateTime, minutes_between
from .exceptions import InvalidPlateFormatError, InvalidRateScheduleError


# ============================================================================
# DOMAIN PRIMITIVES / VALUE OBJECTS
# ============================================================================

_PLATE_PATTERN = re.compile(r'([A-Z]{2}|[0-9]{2})-([A-Z]{2}|[0-9]{2})-([A-Z]{2}|[0-9]{2})')

# Digits kept free above the largest rate so day multiples and lot totals
# still quantize to cents in the active decimal context
RATE_HEADROOM_DIGITS = 16


@dataclass(frozen=True)  # Value objects are immutable
class LicensePlate:
    """
    Value Object: License plate in PP-PP-PP form
    Each pair is two uppercase letters or two digits, never mixed, and the
    plate has at least one letter pair and at least one digit pair.
    """
    value: str

    def __post_init__(self):
        """Validate license plate after initialization"""
        match = _PLATE_PATTERN.fullmatch(self.value or "")
        if not match:
            raise InvalidPlateFormatError(self.value)

        pairs = match.groups()
        if not any(pair.isalpha() for pair in pairs):
            raise InvalidPlateFormatError(self.value)
        if not any(pair.isdigit() for pair in pairs):
            raise InvalidPlateFormatError(self.value)

    def __str__(self) -> str:
        return self.value


def validate_license_plate(text: str) -> LicensePlate:
    """
    Validate a plate string and wrap it as a value object
    Raises: InvalidPlateFormatError
    """
    return LicensePlate(text)


@dataclass(frozen=True)
class RateSchedule:
    """
    Value Object: three-tier tariff of a parking lot
    - per_quarter_first_hour (X): per 15 minutes during the first hour
    - per_quarter_after_first_hour (Y): per 15 minutes after the first hour
    - daily_cap (Z): maximum charge for any 24-hour period
    Invariant: 0 < X < Y < Z, each below 10**(prec - RATE_HEADROOM_DIGITS)
    """
    per_quarter_first_hour: Decimal
    per_quarter_after_first_hour: Decimal
    daily_cap: Decimal

    def __post_init__(self):
        """Validate rate values"""
        x = self.per_quarter_first_hour
        y = self.per_quarter_after_first_hour
        z = self.daily_cap

        for rate in (x, y, z):
            if not isinstance(rate, Decimal) or not rate.is_finite():
                raise InvalidRateScheduleError()
            if rate.adjusted() >= getcontext().prec - RATE_HEADROOM_DIGITS:
                raise InvalidRateScheduleError()

        if not Decimal('0') < x < y < z:
            raise InvalidRateScheduleError()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "per_quarter_first_hour": str(self.per_quarter_first_hour),
            "per_quarter_after_first_hour": str(self.per_quarter_after_first_hour),
            "daily_cap": str(self.daily_cap)
        }


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class ParkingStatus(Enum):
    """Status of a parking record"""
    ACTIVE = "active"          # Vehicle is still inside
    COMPLETED = "completed"    # Exit registered and paid


class VehicleState(Enum):
    """Per-vehicle state machine"""
    NOT_PARKED = "not_parked"
    PARKED = "parked"


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class Entity:
    """
    Base class for all domain entities
    Provides common functionality for entities with identity
    """

    def __init__(self, id: Optional[str] = None):
        self._id = id or str(uuid.uuid4())

    @property
    def id(self) -> str:
        """Get entity ID"""
        return self._id

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same ID and type"""
        if not isinstance(other, Entity):
            return False
        return self.id == other.id and type(self) == type(other)

    def __hash__(self) -> int:
        return hash((self.id, type(self).__name__))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


class ParkingRecord(Entity):
    """
    Entity: one stay of a vehicle in a lot
    Opened at entry, closed at exit; immutable once completed.
    """

    def __init__(
        self,
        lot_name: str,
        entry_time: DateTime,
        id: Optional[str] = None
    ):
        super().__init__(id)
        self.lot_name = lot_name
        self.entry_time = entry_time
        self._exit_time: Optional[DateTime] = None
        self._amount_paid: Optional[Decimal] = None

    @property
    def exit_time(self) -> Optional[DateTime]:
        return self._exit_time

    @property
    def amount_paid(self) -> Optional[Decimal]:
        return self._amount_paid

    @property
    def status(self) -> ParkingStatus:
        if self._exit_time is None:
            return ParkingStatus.ACTIVE
        return ParkingStatus.COMPLETED

    @property
    def is_active(self) -> bool:
        return self.status == ParkingStatus.ACTIVE

    @property
    def duration_minutes(self) -> Optional[int]:
        """Length of a completed stay in minutes"""
        if self._exit_time is None:
            return None
        return minutes_between(self.entry_time, self._exit_time)

    def close(self, exit_time: DateTime, amount: Decimal) -> None:
        """
        Complete the stay
        Raises: ValueError if already closed or exit precedes entry
        """
        if not self.is_active:
            raise ValueError(f"Parking record {self.id} is already closed")

        if exit_time < self.entry_time:
            raise ValueError(f"Exit {exit_time} precedes entry {self.entry_time}")

        if amount < Decimal('0'):
            raise ValueError("Amount paid cannot be negative")

        self._exit_time = exit_time
        self._amount_paid = amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "lot_name": self.lot_name,
            "entry_time": str(self.entry_time),
            "exit_time": str(self._exit_time) if self._exit_time else None,
            "amount_paid": str(self._amount_paid) if self._amount_paid is not None else None,
            "status": self.status.value
        }

    def __str__(self) -> str:
        exit_str = str(self._exit_time) if self._exit_time else "..."
        return f"{self.lot_name} {self.entry_time} -> {exit_str}"


class Vehicle(Entity):
    """
    Entity: a vehicle identified by its license plate
    Owns its parking records and drives the NotParked/ParkedAt state machine.
    """

    def __init__(self, license_plate: LicensePlate):
        super().__init__(license_plate.value)
        self.license_plate = license_plate
        self.current_lot: Optional[str] = None
        self.last_event_time: Optional[DateTime] = None
        self._records: List[ParkingRecord] = []

    @property
    def state(self) -> VehicleState:
        if self.current_lot is None:
            return VehicleState.NOT_PARKED
        return VehicleState.PARKED

    @property
    def is_parked(self) -> bool:
        return self.state == VehicleState.PARKED

    @property
    def records(self) -> Tuple[ParkingRecord, ...]:
        """Records in insertion (entry) order"""
        return tuple(self._records)

    def active_record(self) -> Optional[ParkingRecord]:
        """The open record while parked"""
        if not self._records or not self._records[-1].is_active:
            return None
        return self._records[-1]

    def park(self, lot_name: str, entry_time: DateTime) -> ParkingRecord:
        """
        Transition NotParked -> ParkedAt(lot_name)
        Raises: ValueError if already parked or time goes backwards
        """
        if self.is_parked:
            raise ValueError(f"Vehicle {self.license_plate} is already parked in {self.current_lot}")

        if self.last_event_time is not None and entry_time < self.last_event_time:
            raise ValueError(f"Entry {entry_time} precedes last event {self.last_event_time}")

        record = ParkingRecord(lot_name, entry_time)
        self._records.append(record)
        self.current_lot = lot_name
        self.last_event_time = entry_time
        return record

    def leave(self, exit_time: DateTime, amount: Decimal) -> ParkingRecord:
        """Transition ParkedAt(lot) -> NotParked, closing the open record"""
        record = self.active_record()
        if record is None:
            raise ValueError(f"Vehicle {self.license_plate} is not parked")

        record.close(exit_time, amount)
        self.current_lot = None
        self.last_event_time = exit_time
        return record

    def release(self) -> Optional[ParkingRecord]:
        """
        Drop the open stay when its lot disappears
        The last event time is kept so chronology still holds.
        """
        record = self.active_record()
        if record is not None:
            self._records.pop()
        self.current_lot = None
        return record

    def purge_lot(self, lot_name: str) -> int:
        """Remove every record of a lot; returns how many were removed"""
        kept = [record for record in self._records if record.lot_name != lot_name]
        removed = len(self._records) - len(kept)
        self._records = kept
        return removed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "license_plate": self.license_plate.value,
            "state": self.state.value,
            "current_lot": self.current_lot,
            "records": [record.to_dict() for record in self._records]
        }

    def __str__(self) -> str:
        return f"{self.license_plate} [{self.state.value}]"


# ============================================================================
# DOMAIN EVENTS (for event-driven architecture)
# ============================================================================

class DomainEvent(ABC):
    """
    Base class for all domain events
    Events represent something that happened in the domain
    """

    event_type = "domain.event"

    def __init__(self):
        self.event_id = str(uuid.uuid4())
        self.recorded_at = datetime.now()
        self.version = "1.0"

    @abstractmethod
    def payload(self) -> Dict[str, Any]:
        """Event specific data"""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "recorded_at": self.recorded_at.isoformat(),
            "version": self.version,
            "data": self.payload()
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__} at {self.recorded_at}"


class ParkingLotCreatedEvent(DomainEvent):
    """Event raised when a lot is created"""

    event_type = "lot.created"

    def __init__(self, lot_name: str, capacity: int, rates: RateSchedule):
        super().__init__()
        self.lot_name = lot_name
        self.capacity = capacity
        self.rates = rates

    def payload(self) -> Dict[str, Any]:
        return {
            "lot_name": self.lot_name,
            "capacity": self.capacity,
            "rates": self.rates.to_dict()
        }


class ParkingLotRemovedEvent(DomainEvent):
    """Event raised when a lot and its ledger are discarded"""

    event_type = "lot.removed"

    def __init__(self, lot_name: str, released_plates: List[str]):
        super().__init__()
        self.lot_name = lot_name
        self.released_plates = released_plates

    def payload(self) -> Dict[str, Any]:
        return {
            "lot_name": self.lot_name,
            "released_plates": list(self.released_plates)
        }


class VehicleEnteredEvent(DomainEvent):
    """Event raised when a vehicle enters a lot"""

    event_type = "vehicle.entered"

    def __init__(self, lot_name: str, license_plate: str, entry_time: DateTime,
                 available_spaces: int):
        super().__init__()
        self.lot_name = lot_name
        self.license_plate = license_plate
        self.entry_time = entry_time
        self.available_spaces = available_spaces

    def payload(self) -> Dict[str, Any]:
        return {
            "lot_name": self.lot_name,
            "license_plate": self.license_plate,
            "entry_time": str(self.entry_time),
            "available_spaces": self.available_spaces
        }


class VehicleExitedEvent(DomainEvent):
    """Event raised when a vehicle leaves and pays"""

    event_type = "vehicle.exited"

    def __init__(
        self,
        lot_name: str,
        license_plate: str,
        entry_time: DateTime,
        exit_time: DateTime,
        amount: Decimal
    ):
        super().__init__()
        self.lot_name = lot_name
        self.license_plate = license_plate
        self.entry_time = entry_time
        self.exit_time = exit_time
        self.amount = amount

    def payload(self) -> Dict[str, Any]:
        return {
            "lot_name": self.lot_name,
            "license_plate": self.license_plate,
            "entry_time": str(self.entry_time),
            "exit_time": str(self.exit_time),
            "duration_minutes": minutes_between(self.entry_time, self.exit_time),
            "amount": str(self.amount)
        }
