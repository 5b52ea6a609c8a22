# File: src/parkledger/application/parking_service.py
"""
Parking Ledger Application Service

This module implements the application service layer. It owns the state
container, enforces the vehicle state machine and the chronology rules, and
exposes the use cases of the system:

1. Lot lifecycle - create, list, remove
2. Vehicle movements - entry and exit (with billing)
3. Reports - vehicle history, lot daily totals, lot daily detail

Key Principles:
- Validate-then-commit: every check runs before the first mutation, so a
  rejected operation leaves lots, vehicles and ledgers untouched
- Failures are raised as ParkingError subclasses for the caller to render
- Queries never mutate state
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

from ..domain.aggregates import ParkingLot
from ..domain.chronology import DateTime, parse_date, parse_date_time
from ..domain.exceptions import (
    DuplicateLotError, InvalidCapacityError, InvalidDateError, InvalidEntryError, InvalidExitError,
    InvalidLotNameError, NoSuchParkingError, ParkingFullError, TooManyLotsError
)
from ..domain.models import ParkingRecord, RateSchedule, Vehicle, validate_license_plate
from ..domain.sorting import stable_sort
from ..domain.strategies import PricingStrategy, QuarterHourPricingStrategy
from ..infrastructure.messaging import WILDCARD, AuditLogHandler, EventBus
from ..infrastructure.repositories import ParkingLotRepository, VehicleRepository
from .config import ServiceConfig
from .dtos import (
    BillingLineDTO, CreateLotRequestDTO, DailyTotalDTO, EntryRequestDTO,
    EntryResultDTO, ExitRequestDTO, ExitResultDTO, LotRemovalDTO,
    LotStatusDTO, ParkingRecordDTO
)


# ============================================================================
# STATE CONTAINER
# ============================================================================

@dataclass
class ParkingContext:
    """
    All mutable state of one run
    The context exclusively owns the lots and the vehicles.
    """
    lots: ParkingLotRepository = field(default_factory=ParkingLotRepository)
    vehicles: VehicleRepository = field(default_factory=VehicleRepository)
    last_event_time: Optional[DateTime] = None


# ============================================================================
# MAIN PARKING SERVICE
# ============================================================================

class ParkingService:
    """
    Main application service for the parking ledger

    Coordinates the lot aggregates, the vehicle entities, the pricing
    strategy and the event bus.
    """

    def __init__(
        self,
        context: Optional[ParkingContext] = None,
        config: Optional[ServiceConfig] = None,
        pricing_strategy: Optional[PricingStrategy] = None,
        event_bus: Optional[EventBus] = None
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.context = context or ParkingContext()
        self.config = config or ServiceConfig()
        self.pricing_strategy = pricing_strategy or QuarterHourPricingStrategy()
        self.event_bus = event_bus or EventBus()

        self.logger.info(f"ParkingService initialized with {self.pricing_strategy}")

    @classmethod
    def create_default(cls, config: Optional[ServiceConfig] = None) -> 'ParkingService':
        """Service with a fresh context and the audit log subscribed to every event"""
        event_bus = EventBus()
        event_bus.subscribe(WILDCARD, AuditLogHandler())
        return cls(config=config, event_bus=event_bus)

    # ------------------------------------------------------------------------
    # Lot lifecycle
    # ------------------------------------------------------------------------

    def create_lot(self, request: CreateLotRequestDTO) -> LotStatusDTO:
        """
        Create a parking lot
        Raises: InvalidLotNameError, DuplicateLotError, InvalidCapacityError,
                InvalidRateScheduleError, TooManyLotsError
        """
        name = request.name
        self.validate_new_lot_name(name)

        if request.capacity <= 0:
            raise InvalidCapacityError(str(request.capacity))

        rates = RateSchedule(
            request.per_quarter_first_hour,
            request.per_quarter_after_first_hour,
            request.daily_cap
        )

        if self.context.lots.count() >= self.config.max_lots:
            raise TooManyLotsError()

        lot = self.context.lots.add(ParkingLot(name, request.capacity, rates))
        self._publish(lot)
        return self._lot_status(lot)

    def validate_new_lot_name(self, name: str) -> None:
        """Raises: InvalidLotNameError, DuplicateLotError"""
        if not name or len(name.encode("utf-8")) > self.config.max_lot_name_bytes:
            raise InvalidLotNameError(name)

        if self.context.lots.exists(name):
            raise DuplicateLotError(name)

    def list_lots(self) -> List[LotStatusDTO]:
        """Lots in creation order with their free spaces"""
        return [self._lot_status(lot) for lot in self.context.lots.get_all()]

    def get_lot_status(self, name: str) -> LotStatusDTO:
        return self._lot_status(self._require_lot(name))

    def remove_lot(self, name: str) -> LotRemovalDTO:
        """
        Remove a lot and its billing ledger
        Vehicles inside are released; their history is kept unless the
        configuration asks to purge it.
        Returns: the removal summary with the remaining lot names sorted
        """
        lot = self._require_lot(name)

        released = []
        for vehicle in self.context.vehicles.find_parked_in(lot.name):
            vehicle.release()
            released.append(vehicle.license_plate.value)

        if self.config.purge_history_on_removal:
            for vehicle in self.context.vehicles.get_all():
                removed = vehicle.purge_lot(lot.name)
                if removed:
                    self.logger.debug(f"Purged {removed} record(s) of {vehicle.license_plate}")

        lot.mark_removed()
        self.context.lots.delete(lot.name)
        self._publish(lot)

        remaining = stable_sort(self.context.lots.names(), key=lambda lot_name: lot_name)
        return LotRemovalDTO(removed=lot.name, released_plates=released, remaining=remaining)

    # ------------------------------------------------------------------------
    # Vehicle movements
    # ------------------------------------------------------------------------

    def register_entry(self, request: EntryRequestDTO) -> EntryResultDTO:
        """
        Register a vehicle entering a lot
        Checks, in order: lot exists, lot has space, plate format, vehicle not
        parked, date valid and not earlier than the vehicle's last event.
        """
        lot = self._require_lot(request.lot_name)
        if lot.is_full:
            raise ParkingFullError(lot.name)

        plate = validate_license_plate(request.license_plate)
        vehicle = self.context.vehicles.find_by_license_plate(plate.value)
        if vehicle is not None and vehicle.is_parked:
            raise InvalidEntryError(plate.value)

        entry_time = parse_date_time(request.date, request.time)
        self._check_chronology(vehicle, entry_time)

        # All checks passed: commit
        if vehicle is None:
            vehicle = self.context.vehicles.add(Vehicle(plate))

        vehicle.park(lot.name, entry_time)
        lot.admit(plate.value, entry_time)
        self._advance_clock(entry_time)
        self._publish(lot)

        self.logger.info(f"Vehicle {plate} entered {lot.name} at {entry_time}")
        return EntryResultDTO(
            lot_name=lot.name,
            license_plate=plate.value,
            entry_date=entry_time.format_date(),
            entry_time=entry_time.format_time(),
            available_spaces=lot.available_spaces
        )

    def register_exit(self, request: ExitRequestDTO) -> ExitResultDTO:
        """
        Register a vehicle leaving a lot and bill the stay
        Checks, in order: lot exists, plate format, vehicle parked in this
        very lot, date valid and not earlier than the entry.
        """
        lot = self._require_lot(request.lot_name)
        plate = validate_license_plate(request.license_plate)

        vehicle = self.context.vehicles.find_by_license_plate(plate.value)
        if vehicle is None or vehicle.current_lot != lot.name:
            raise InvalidExitError(plate.value)

        record = vehicle.active_record()
        exit_time = parse_date_time(request.date, request.time)
        if exit_time < record.entry_time:
            raise InvalidDateError()
        self._check_chronology(vehicle, exit_time)

        amount = self.pricing_strategy.calculate_parking_fee(
            record.entry_time, exit_time, lot.rates
        )

        # All checks passed: commit
        vehicle.leave(exit_time, amount)
        lot.discharge(plate.value, record)
        self._advance_clock(exit_time)
        self._publish(lot)

        self.logger.info(f"Vehicle {plate} left {lot.name} at {exit_time}, paid {amount}")
        return ExitResultDTO(
            lot_name=lot.name,
            license_plate=plate.value,
            entry_date=record.entry_time.format_date(),
            entry_time=record.entry_time.format_time(),
            exit_date=exit_time.format_date(),
            exit_time=exit_time.format_time(),
            amount=amount
        )

    # ------------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------------

    def query_vehicle_history(self, license_plate: str) -> List[ParkingRecordDTO]:
        """
        Every stay of a vehicle in entry order, open stays included
        An unknown vehicle has an empty history.
        """
        plate = validate_license_plate(license_plate)
        vehicle = self.context.vehicles.find_by_license_plate(plate.value)
        if vehicle is None:
            return []
        return [self._record_dto(record) for record in vehicle.records]

    def query_lot_summary(self, lot_name: str) -> List[DailyTotalDTO]:
        """Revenue per exit date, by date"""
        lot = self._require_lot(lot_name)
        return [
            DailyTotalDTO(date=str(date), total=total)
            for date, total in lot.daily_totals()
        ]

    def query_lot_detail(self, lot_name: str, date_text: str) -> List[BillingLineDTO]:
        """Paid stays of one exit date, by exit time"""
        lot = self._require_lot(lot_name)
        date = parse_date(date_text)
        return [
            BillingLineDTO(
                license_plate=line.license_plate,
                exit_time=line.exit_time.format_time(),
                amount=line.amount
            )
            for line in lot.billing_lines(date)
        ]

    # ------------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------------

    def _require_lot(self, name: str) -> ParkingLot:
        lot = self.context.lots.get(name)
        if lot is None:
            raise NoSuchParkingError(name)
        return lot

    def _check_chronology(self, vehicle: Optional[Vehicle], event_time: DateTime) -> None:
        """Events of a vehicle (or of the system, when configured) never go back in time"""
        if vehicle is not None and vehicle.last_event_time is not None:
            if event_time < vehicle.last_event_time:
                raise InvalidDateError()

        if self.config.enforce_global_chronology and self.context.last_event_time is not None:
            if event_time < self.context.last_event_time:
                raise InvalidDateError()

    def _advance_clock(self, event_time: DateTime) -> None:
        last = self.context.last_event_time
        if last is None or event_time > last:
            self.context.last_event_time = event_time

    def _publish(self, lot: ParkingLot) -> None:
        self.event_bus.publish_all(lot.clear_events())

    @staticmethod
    def _lot_status(lot: ParkingLot) -> LotStatusDTO:
        return LotStatusDTO(
            name=lot.name,
            capacity=lot.capacity,
            occupied=lot.occupied,
            available_spaces=lot.available_spaces
        )

    @staticmethod
    def _record_dto(record: ParkingRecord) -> ParkingRecordDTO:
        if record.is_active:
            return ParkingRecordDTO(
                lot_name=record.lot_name,
                entry_date=record.entry_time.format_date(),
                entry_time=record.entry_time.format_time()
            )
        return ParkingRecordDTO(
            lot_name=record.lot_name,
            entry_date=record.entry_time.format_date(),
            entry_time=record.entry_time.format_time(),
            exit_date=record.exit_time.format_date(),
            exit_time=record.exit_time.format_time(),
            amount=record.amount_paid
        )
