# File: src/parkledger/domain/strategies.py
"""
Strategy Pattern Implementation for Parking Fees

Pricing is encapsulated behind the PricingStrategy interface so the service
never depends on a concrete tariff algorithm.

QuarterHourPricingStrategy implements the three-tier tariff:
- the stay is split into whole 24-hour periods counted from the entry time
  plus a remainder;
- a whole period costs the daily cap (Z);
- a partial period is billed per started quarter-hour: the first four at X,
  the following ones at Y, and the sub-total never exceeds Z;
- minutes falling on a closed day are not billed.

Amounts are integer quarter-hour counts multiplied by Decimal rates.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple
from decimal import Decimal
import logging

from .chronology import (
    CalendarDate, DateTime, MINUTES_PER_DAY, is_closed_day, minutes_between,
    next_day
)
from .models import RateSchedule


MINUTES_PER_QUARTER = 15
QUARTERS_AT_FIRST_RATE = 4

ClosedDayRule = Callable[[CalendarDate], bool]


# ============================================================================
# STRATEGY INTERFACES
# ============================================================================

class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for fee calculation algorithms
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def calculate_parking_fee(
        self,
        entry_time: DateTime,
        exit_time: DateTime,
        rates: RateSchedule
    ) -> Decimal:
        """
        Calculate the fee of a stay
        Returns: non-negative amount
        """
        pass

    def get_strategy_name(self) -> str:
        """Get human-readable strategy name"""
        return self.__class__.__name__.replace("Strategy", "")

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Strategy"


# ============================================================================
# PRICING STRATEGIES
# ============================================================================

class QuarterHourPricingStrategy(PricingStrategy):
    """
    Strategy: tiered quarter-hour tariff with a daily cap
    Closed days (February 29 by default) are charged nothing, including the closed
    days a long stay runs through.
    """

    def __init__(self, closed_day_rule: Optional[ClosedDayRule] = None):
        super().__init__()
        self._is_closed = closed_day_rule or is_closed_day

    def calculate_parking_fee(
        self,
        entry_time: DateTime,
        exit_time: DateTime,
        rates: RateSchedule
    ) -> Decimal:
        elapsed = minutes_between(entry_time, exit_time)
        full_days, remainder = divmod(elapsed, MINUTES_PER_DAY)

        start = entry_time.to_minutes()
        closed = self._closed_windows(entry_time, exit_time)

        fee = rates.daily_cap * full_days
        for period in self._periods_touching(closed, start, full_days):
            lo = start + period * MINUTES_PER_DAY
            blocked = self._overlap(closed, lo, lo + MINUTES_PER_DAY)
            fee -= rates.daily_cap
            fee += self.partial_period_charge(MINUTES_PER_DAY - blocked, rates)

        if remainder:
            lo = start + full_days * MINUTES_PER_DAY
            blocked = self._overlap(closed, lo, lo + remainder)
            fee += self.partial_period_charge(remainder - blocked, rates)

        self.logger.debug(
            f"Fee {entry_time} -> {exit_time}: {full_days} day(s) + "
            f"{remainder} min = {fee}"
        )
        return fee

    @staticmethod
    def partial_period_charge(minutes: int, rates: RateSchedule) -> Decimal:
        """
        Charge of less than one day of parking
        Started quarter-hours are billed in full; capped at the daily rate.
        """
        if minutes <= 0:
            return Decimal('0')

        quarters = -(-minutes // MINUTES_PER_QUARTER)
        first_hour = min(quarters, QUARTERS_AT_FIRST_RATE)
        charge = (rates.per_quarter_first_hour * first_hour
                  + rates.per_quarter_after_first_hour * (quarters - first_hour))
        return min(charge, rates.daily_cap)

    def _closed_windows(self, entry_time: DateTime, exit_time: DateTime) -> List[Tuple[int, int]]:
        """Absolute [start, end) minute windows of the closed days the stay touches"""
        windows = []
        day, last = entry_time.date, exit_time.date
        while True:
            if self._is_closed(day):
                lo = day.ordinal * MINUTES_PER_DAY
                windows.append((lo, lo + MINUTES_PER_DAY))
            if day >= last:
                break
            day = next_day(day)
        return windows

    @staticmethod
    def _overlap(windows: List[Tuple[int, int]], lo: int, hi: int) -> int:
        """Minutes of [lo, hi) covered by the windows"""
        covered = 0
        for w_lo, w_hi in windows:
            covered += max(0, min(hi, w_hi) - max(lo, w_lo))
        return covered

    @staticmethod
    def _periods_touching(windows: List[Tuple[int, int]], start: int, full_days: int) -> List[int]:
        """Indexes of the whole 24-hour periods overlapping a closed window"""
        periods: List[int] = []
        for w_lo, w_hi in windows:
            first = max(0, (w_lo - start) // MINUTES_PER_DAY)
            last = min(full_days - 1, (w_hi - 1 - start) // MINUTES_PER_DAY)
            for period in range(first, last + 1):
                if period not in periods:
                    periods.append(period)
        return periods
