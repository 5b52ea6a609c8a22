# File: src/parkledger/application/commands.py
"""
Command Pattern Implementation for the Parking Ledger

Every line of input is turned into a first-class command object, executed
against the ParkingService and rendered as output lines.

Command Types:
1. Lot Commands - list, create and remove lots (p, r)
2. Movement Commands - vehicle entry and exit (e, s)
3. Report Commands - vehicle history and lot billing (v, f)
4. Session Commands - quit (q)

The CommandProcessor turns any ParkingError into its one-line message, so a
rejected command never stops the session.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, List, Optional
import logging
import re
import shlex
import uuid

from ..domain.exceptions import (
    InvalidArgumentsError, InvalidCapacityError, InvalidRateScheduleError,
    NoEntriesFoundError, ParkingError, UnknownCommandError
)
from .dtos import BillingQueryDTO, CreateLotRequestDTO, EntryRequestDTO, ExitRequestDTO
from .parking_service import ParkingService


INTERNAL_ERROR = "internal error."

_CENT = Decimal('0.01')
_INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')


def format_amount(amount: Decimal) -> str:
    """Two decimal places, halves rounded up"""
    return str(amount.quantize(_CENT, rounding=ROUND_HALF_UP))


def parse_capacity(text: str) -> int:
    """Raises: InvalidCapacityError for anything but a positive integer"""
    if not _INTEGER_PATTERN.match(text) or int(text) <= 0:
        raise InvalidCapacityError(text)
    return int(text)


def parse_rate(text: str) -> Decimal:
    """Raises: InvalidRateScheduleError for non-numeric or non-finite text"""
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise InvalidRateScheduleError() from None

    if not value.is_finite():
        raise InvalidRateScheduleError()
    return value


# ============================================================================
# COMMAND RESULT
# ============================================================================

@dataclass
class CommandResult:
    """Outcome of one command: output lines on success, one message on failure"""
    success: bool
    lines: List[str] = field(default_factory=list)
    error: Optional[str] = None
    ends_session: bool = False

    @classmethod
    def ok(cls, lines: Optional[List[str]] = None) -> 'CommandResult':
        return cls(success=True, lines=lines or [])

    @classmethod
    def failure(cls, error: str) -> 'CommandResult':
        return cls(success=False, error=error)

    def output(self) -> List[str]:
        """Lines to show the operator"""
        if self.success:
            return list(self.lines)
        return [self.error]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "lines": list(self.lines),
            "error": self.error,
            "ends_session": self.ends_session
        }


# ============================================================================
# COMMAND INTERFACE
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    A command represents one operator request. Commands are named in the
    imperative (e.g., RegisterEntryCommand).
    """

    name = ""

    def __init__(self, command_id: Optional[str] = None):
        self.command_id = command_id or str(uuid.uuid4())
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, service: ParkingService) -> CommandResult:
        """
        Execute the command using the provided service

        Raises: ParkingError when the service rejects the request
        """
        pass

    def arguments(self) -> List[str]:
        return []

    def get_description(self) -> str:
        return " ".join([self.name] + self.arguments())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "arguments": self.arguments()
        }


# ============================================================================
# LOT COMMANDS
# ============================================================================

class ListLotsCommand(Command):
    """p: every lot with its capacity and free spaces"""

    name = "p"

    def execute(self, service: ParkingService) -> CommandResult:
        return CommandResult.ok([
            f"{lot.name} {lot.capacity} {lot.available_spaces}"
            for lot in service.list_lots()
        ])


class CreateLotCommand(Command):
    """
    p <name> <capacity> <X> <Y> <Z>: create a lot, prints nothing

    Numbers are parsed after the name checks so that a duplicate name is
    reported before a malformed capacity or tariff.
    """

    name = "p"

    def __init__(self, lot_name: str, capacity: str, rates: List[str]):
        super().__init__()
        self.lot_name = lot_name
        self.capacity = capacity
        self.rates = rates

    def execute(self, service: ParkingService) -> CommandResult:
        service.validate_new_lot_name(self.lot_name)
        capacity = parse_capacity(self.capacity)
        x, y, z = (parse_rate(text) for text in self.rates)

        service.create_lot(CreateLotRequestDTO(
            name=self.lot_name,
            capacity=capacity,
            per_quarter_first_hour=x,
            per_quarter_after_first_hour=y,
            daily_cap=z
        ))
        return CommandResult.ok()

    def arguments(self) -> List[str]:
        return [self.lot_name, self.capacity] + list(self.rates)


class RemoveLotCommand(Command):
    """r <name>: remove a lot, prints the remaining lot names sorted"""

    name = "r"

    def __init__(self, lot_name: str):
        super().__init__()
        self.lot_name = lot_name

    def execute(self, service: ParkingService) -> CommandResult:
        removal = service.remove_lot(self.lot_name)
        return CommandResult.ok(list(removal.remaining))

    def arguments(self) -> List[str]:
        return [self.lot_name]


# ============================================================================
# MOVEMENT COMMANDS
# ============================================================================

class RegisterEntryCommand(Command):
    """e <name> <plate> <date> <time>: prints the lot and its free spaces"""

    name = "e"

    def __init__(self, request: EntryRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService) -> CommandResult:
        result = service.register_entry(self.request)
        return CommandResult.ok([f"{result.lot_name} {result.available_spaces}"])

    def arguments(self) -> List[str]:
        r = self.request
        return [r.lot_name, r.license_plate, r.date, r.time]


class RegisterExitCommand(Command):
    """s <name> <plate> <date> <time>: prints the stay and the amount paid"""

    name = "s"

    def __init__(self, request: ExitRequestDTO):
        super().__init__()
        self.request = request

    def execute(self, service: ParkingService) -> CommandResult:
        r = service.register_exit(self.request)
        return CommandResult.ok([
            f"{r.license_plate} {r.entry_date} {r.entry_time} "
            f"{r.exit_date} {r.exit_time} {format_amount(r.amount)}"
        ])

    def arguments(self) -> List[str]:
        r = self.request
        return [r.lot_name, r.license_plate, r.date, r.time]


# ============================================================================
# REPORT COMMANDS
# ============================================================================

class VehicleHistoryCommand(Command):
    """v <plate>: every stay of a vehicle, exit fields omitted while parked"""

    name = "v"

    def __init__(self, license_plate: str):
        super().__init__()
        self.license_plate = license_plate

    def execute(self, service: ParkingService) -> CommandResult:
        records = service.query_vehicle_history(self.license_plate)
        if not records:
            raise NoEntriesFoundError(self.license_plate)

        lines = []
        for record in records:
            line = f"{record.lot_name} {record.entry_date} {record.entry_time}"
            if not record.is_open:
                line += f" {record.exit_date} {record.exit_time}"
            lines.append(line)
        return CommandResult.ok(lines)

    def arguments(self) -> List[str]:
        return [self.license_plate]


class BillingSummaryCommand(Command):
    """f <name>: revenue per exit date"""

    name = "f"

    def __init__(self, query: BillingQueryDTO):
        super().__init__()
        self.query = query

    def execute(self, service: ParkingService) -> CommandResult:
        return CommandResult.ok([
            f"{daily.date} {format_amount(daily.total)}"
            for daily in service.query_lot_summary(self.query.lot_name)
        ])

    def arguments(self) -> List[str]:
        return [self.query.lot_name]


class BillingDetailCommand(Command):
    """f <name> <date>: paid stays of one exit date"""

    name = "f"

    def __init__(self, query: BillingQueryDTO):
        super().__init__()
        self.query = query

    def execute(self, service: ParkingService) -> CommandResult:
        return CommandResult.ok([
            f"{line.license_plate} {line.exit_time} {format_amount(line.amount)}"
            for line in service.query_lot_detail(self.query.lot_name, self.query.date)
        ])

    def arguments(self) -> List[str]:
        return [self.query.lot_name, self.query.date]


# ============================================================================
# SESSION COMMANDS
# ============================================================================

class QuitCommand(Command):
    """q: end the session"""

    name = "q"

    def execute(self, service: ParkingService) -> CommandResult:
        return CommandResult(success=True, ends_session=True)


# ============================================================================
# COMMAND PARSER (Factory)
# ============================================================================

class CommandParser:
    """Factory for creating commands from input lines"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._builders: Dict[str, Callable[[List[str]], Optional[Command]]] = {
            "q": self._build_quit,
            "p": self._build_lot,
            "e": self._build_entry,
            "s": self._build_exit,
            "v": self._build_history,
            "f": self._build_billing,
            "r": self._build_removal,
        }

    def parse(self, line: str) -> Optional[Command]:
        """
        Create a command from one input line

        Returns: Command instance, or None for a blank line
        Raises: UnknownCommandError, InvalidArgumentsError
        """
        try:
            tokens = shlex.split(line)
        except ValueError:
            raise InvalidArgumentsError(line.split()[0]) from None

        if not tokens:
            return None

        name, args = tokens[0], tokens[1:]
        builder = self._builders.get(name)
        if builder is None:
            raise UnknownCommandError(name)

        command = builder(args)
        if command is None:
            raise InvalidArgumentsError(name)

        self.logger.debug(f"Parsed {command.__class__.__name__} from {line!r}")
        return command

    @staticmethod
    def _build_quit(args: List[str]) -> Optional[Command]:
        if args:
            return None
        return QuitCommand()

    @staticmethod
    def _build_lot(args: List[str]) -> Optional[Command]:
        if not args:
            return ListLotsCommand()
        if len(args) == 5:
            return CreateLotCommand(args[0], args[1], args[2:])
        return None

    @staticmethod
    def _build_entry(args: List[str]) -> Optional[Command]:
        if len(args) != 4:
            return None
        lot_name, plate, date, time = args
        return RegisterEntryCommand(
            EntryRequestDTO(lot_name=lot_name, license_plate=plate, date=date, time=time)
        )

    @staticmethod
    def _build_exit(args: List[str]) -> Optional[Command]:
        if len(args) != 4:
            return None
        lot_name, plate, date, time = args
        return RegisterExitCommand(
            ExitRequestDTO(lot_name=lot_name, license_plate=plate, date=date, time=time)
        )

    @staticmethod
    def _build_history(args: List[str]) -> Optional[Command]:
        if len(args) != 1:
            return None
        return VehicleHistoryCommand(args[0])

    @staticmethod
    def _build_billing(args: List[str]) -> Optional[Command]:
        if len(args) == 1:
            return BillingSummaryCommand(BillingQueryDTO(lot_name=args[0]))
        if len(args) == 2:
            return BillingDetailCommand(BillingQueryDTO(lot_name=args[0], date=args[1]))
        return None

    @staticmethod
    def _build_removal(args: List[str]) -> Optional[Command]:
        if len(args) != 1:
            return None
        return RemoveLotCommand(args[0])


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Parses and executes commands against the service

    A ParkingError becomes the failed result's message; any other exception
    is logged with its traceback and reported as an internal error.
    """

    def __init__(self, service: ParkingService, parser: Optional[CommandParser] = None):
        self.service = service
        self.parser = parser or CommandParser()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.processed_count = 0

    def process(self, command: Command) -> CommandResult:
        """Execute a command; never raises"""
        self.logger.debug(f"Processing command: {command.get_description()}")
        self.processed_count += 1

        try:
            return command.execute(self.service)
        except ParkingError as e:
            self.logger.info(f"Rejected '{command.get_description()}': {e}")
            return CommandResult.failure(str(e))
        except Exception as e:
            self.logger.error(f"Error processing command {command.command_id}: {e}", exc_info=True)
            return CommandResult.failure(INTERNAL_ERROR)

    def process_line(self, line: str) -> Optional[CommandResult]:
        """
        Parse and execute one input line

        Returns: the result, or None for a blank line
        """
        try:
            command = self.parser.parse(line)
        except ParkingError as e:
            self.logger.info(f"Rejected line {line.strip()!r}: {e}")
            return CommandResult.failure(str(e))

        if command is None:
            return None
        return self.process(command)

    def process_batch(self, lines: Iterable[str]) -> List[CommandResult]:
        """Process lines until the input ends or a quit command"""
        results = []
        for line in lines:
            result = self.process_line(line)
            if result is None:
                continue
            results.append(result)
            if result.ends_session:
                break
        return results
