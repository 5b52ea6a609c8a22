# File: src/parkledger/domain/exceptions.py
"""
Domain Exceptions for the Parking Ledger

Every rejected operation raises one of the named failure conditions below.
The message of each exception is the line shown to the operator, so the
dispatcher can render any failure with ``str(error)``.
"""

from typing import Optional


class ParkingError(Exception):
    """Base exception for all parking ledger failures"""

    message = "parking error."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class SubjectError(ParkingError):
    """Failure reported against a named subject (lot name, plate, capacity)"""

    reason = "error."

    def __init__(self, subject: str):
        self.subject = subject
        super().__init__(f"{subject}: {self.reason}")


# ============================================================================
# PARKING LOT LIFECYCLE
# ============================================================================

class DuplicateLotError(SubjectError):
    reason = "parking already exists."


class InvalidLotNameError(SubjectError):
    reason = "invalid parking name."


class InvalidCapacityError(SubjectError):
    reason = "invalid capacity."


class InvalidRateScheduleError(ParkingError):
    """Rates not positive or not strictly increasing (X < Y < Z)"""
    message = "invalid cost."


class TooManyLotsError(ParkingError):
    message = "too many parks."


class NoSuchParkingError(SubjectError):
    reason = "no such parking."


# ============================================================================
# VEHICLE MOVEMENTS
# ============================================================================

class ParkingFullError(SubjectError):
    reason = "parking is full."


class InvalidPlateFormatError(SubjectError):
    reason = "invalid licence plate."


class InvalidEntryError(SubjectError):
    """Vehicle is already parked somewhere"""
    reason = "invalid vehicle entry."


class InvalidExitError(SubjectError):
    """Vehicle is not parked, or is parked in a different lot"""
    reason = "invalid vehicle exit."


class InvalidDateError(ParkingError):
    """Malformed, non-existent or chronologically inconsistent date/time"""
    message = "invalid date."


class ClosedDayError(InvalidDateError):
    """
    The date exists but is a closed day (February 29).
    Rendered like any other invalid date.
    """


# ============================================================================
# COMMAND LINES
# ============================================================================

class NoEntriesFoundError(SubjectError):
    """A vehicle history query matched no stay"""
    reason = "no entries found in any parking."


class UnknownCommandError(SubjectError):
    reason = "unknown command."


class InvalidArgumentsError(SubjectError):
    """Wrong number of arguments, or unbalanced quotes"""
    reason = "invalid arguments."
