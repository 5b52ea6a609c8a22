# File: src/parkledger/application/config.py
"""
Service configuration

Limits and behaviour switches of the parking service. Defaults match the
documented behaviour; every field can be overridden through PARKLEDGER_*
environment variables.
"""

from dataclasses import dataclass
from typing import Mapping, Optional
import logging
import os


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got: {raw}")


@dataclass(frozen=True)
class ServiceConfig:
    """Value Object: parking service configuration"""
    max_lots: int = 20
    max_lot_name_bytes: int = 50
    # Entries/exits must not precede the latest event of any vehicle
    enforce_global_chronology: bool = False
    # Drop vehicle history of a lot when the lot is removed
    purge_history_on_removal: bool = False
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate configuration values"""
        if self.max_lots <= 0:
            raise ValueError("Max lots must be positive")

        if self.max_lot_name_bytes <= 0:
            raise ValueError("Max lot name length must be positive")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ServiceConfig':
        """Build a configuration from PARKLEDGER_* environment variables"""
        env = os.environ if environ is None else environ
        defaults = cls()

        def read_int(name: str, default: int) -> int:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{name} must be an integer, got: {raw}") from None

        def read_bool(name: str, default: bool) -> bool:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            return _parse_bool(name, raw)

        return cls(
            max_lots=read_int("PARKLEDGER_MAX_LOTS", defaults.max_lots),
            max_lot_name_bytes=read_int("PARKLEDGER_MAX_LOT_NAME_BYTES", defaults.max_lot_name_bytes),
            enforce_global_chronology=read_bool(
                "PARKLEDGER_GLOBAL_CHRONOLOGY", defaults.enforce_global_chronology
            ),
            purge_history_on_removal=read_bool(
                "PARKLEDGER_PURGE_HISTORY", defaults.purge_history_on_removal
            ),
            log_level=env.get("PARKLEDGER_LOG_LEVEL") or defaults.log_level
        )
