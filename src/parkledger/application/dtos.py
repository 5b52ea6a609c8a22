# File: src/parkledger/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Parking Ledger

This module defines DTOs for data transfer between layers:
1. Input DTOs - already tokenized command arguments
2. Output DTOs - results ready for formatting

DTO Principles:
- Immutable (frozen models)
- No business logic, only data: semantic validation of plates, dates,
  rates and capacities happens in the domain
- Serialization support through pydantic (Decimal amounts as strings)
"""

from typing import Any, Dict, List, Optional
from decimal import Decimal
import json

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        data = self.model_dump(**kwargs)
        if exclude_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data

    def to_json(self, **kwargs) -> str:
        """Convert DTO to JSON string"""
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseDTO':
        """Create DTO from dictionary"""
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseDTO':
        """Create DTO from JSON string"""
        return cls(**json.loads(json_str))


# ============================================================================
# REQUEST DTOs
# ============================================================================

class CreateLotRequestDTO(BaseDTO):
    """Create a parking lot"""
    name: str
    capacity: int
    per_quarter_first_hour: Decimal = Field(description="X: per 15 minutes in the first hour")
    per_quarter_after_first_hour: Decimal = Field(description="Y: per 15 minutes after the first hour")
    daily_cap: Decimal = Field(description="Z: maximum per 24 hours")


class EntryRequestDTO(BaseDTO):
    """Register a vehicle entering a lot"""
    lot_name: str
    license_plate: str
    date: str = Field(description="DD-MM-YYYY")
    time: str = Field(description="HH:MM")


class ExitRequestDTO(BaseDTO):
    """Register a vehicle leaving a lot"""
    lot_name: str
    license_plate: str
    date: str = Field(description="DD-MM-YYYY")
    time: str = Field(description="HH:MM")


class BillingQueryDTO(BaseDTO):
    """Billing report of a lot, optionally for a single date"""
    lot_name: str
    date: Optional[str] = Field(default=None, description="DD-MM-YYYY")


# ============================================================================
# RESULT DTOs
# ============================================================================

class LotStatusDTO(BaseDTO):
    """A parking lot with its current availability"""
    name: str
    capacity: int
    occupied: int
    available_spaces: int


class EntryResultDTO(BaseDTO):
    """Accepted entry"""
    lot_name: str
    license_plate: str
    entry_date: str
    entry_time: str
    available_spaces: int


class ExitResultDTO(BaseDTO):
    """Accepted exit with the amount paid"""
    lot_name: str
    license_plate: str
    entry_date: str
    entry_time: str
    exit_date: str
    exit_time: str
    amount: Decimal


class ParkingRecordDTO(BaseDTO):
    """One stay in a vehicle history; exit fields are None while parked"""
    lot_name: str
    entry_date: str
    entry_time: str
    exit_date: Optional[str] = None
    exit_time: Optional[str] = None
    amount: Optional[Decimal] = None

    @property
    def is_open(self) -> bool:
        return self.exit_date is None


class DailyTotalDTO(BaseDTO):
    """Revenue of a lot on one exit date"""
    date: str
    total: Decimal


class BillingLineDTO(BaseDTO):
    """One paid stay in a daily billing report"""
    license_plate: str
    exit_time: str
    amount: Decimal


class LotRemovalDTO(BaseDTO):
    """Removed lot, released vehicles and the lots left"""
    removed: str
    released_plates: List[str] = Field(default_factory=list)
    remaining: List[str] = Field(default_factory=list)
