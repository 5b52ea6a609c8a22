"""
parkledger - in-memory parking lot ledger

Tracks parking lots, vehicle entries and exits, and bills stays with a
tiered quarter-hour tariff capped per day.
"""

__version__ = "1.0.0"
