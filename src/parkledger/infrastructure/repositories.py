# File: src/parkledger/infrastructure/repositories.py
"""
Repository Pattern Implementation for the Parking Ledger

Repositories provide a collection-like interface for accessing domain
aggregates while hiding how they are stored. All state lives in memory for
the lifetime of the process; insertion order is preserved because listings
rely on it.

Repository Types:
1. ParkingLotRepository - lots keyed by name
2. VehicleRepository - vehicles keyed by license plate
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Generic, List, Optional, TypeVar
import logging

from ..domain.aggregates import ParkingLot
from ..domain.models import Vehicle

# Type variables for generic repositories
T = TypeVar('T')    # Entity type
ID = TypeVar('ID')  # ID type


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class Repository(ABC, Generic[T, ID]):
    """Base repository interface"""

    @abstractmethod
    def add(self, entity: T) -> T:
        """Add an entity to the repository"""
        pass

    @abstractmethod
    def get(self, id: ID) -> Optional[T]:
        """Get an entity by ID"""
        pass

    @abstractmethod
    def get_all(self) -> List[T]:
        """Get all entities in insertion order"""
        pass

    @abstractmethod
    def delete(self, id: ID) -> bool:
        """Delete an entity by ID"""
        pass

    @abstractmethod
    def exists(self, id: ID) -> bool:
        """Check if an entity exists"""
        pass

    @abstractmethod
    def count(self) -> int:
        """Count all entities"""
        pass


# ============================================================================
# IN-MEMORY REPOSITORIES
# ============================================================================

class InMemoryRepository(Repository[T, str]):
    """In-memory repository keyed by a string identity"""

    def __init__(self, key: Optional[Callable[[T], str]] = None):
        self._storage: Dict[str, T] = {}
        self._key = key or (lambda entity: getattr(entity, 'id'))
        self._logger = logging.getLogger(self.__class__.__name__)

    def add(self, entity: T) -> T:
        entity_id = self._key(entity)
        if entity_id in self._storage:
            raise KeyError(f"Entity {entity_id} already exists")

        self._storage[entity_id] = entity
        self._logger.debug(f"Added entity {entity_id}")
        return entity

    def get(self, id: str) -> Optional[T]:
        return self._storage.get(id)

    def get_all(self) -> List[T]:
        return list(self._storage.values())

    def delete(self, id: str) -> bool:
        if id in self._storage:
            del self._storage[id]
            self._logger.debug(f"Deleted entity {id}")
            return True
        return False

    def exists(self, id: str) -> bool:
        return id in self._storage

    def count(self) -> int:
        return len(self._storage)

    def clear(self):
        """Clear all data (for testing)"""
        self._storage.clear()


class ParkingLotRepository(InMemoryRepository[ParkingLot]):
    """In-memory repository for parking lots, keyed by name"""

    def __init__(self):
        super().__init__(key=lambda lot: lot.name)

    def names(self) -> List[str]:
        """Lot names in creation order"""
        return list(self._storage)


class VehicleRepository(InMemoryRepository[Vehicle]):
    """In-memory repository for vehicles, keyed by license plate"""

    def __init__(self):
        super().__init__(key=lambda vehicle: vehicle.license_plate.value)

    def find_by_license_plate(self, license_plate: str) -> Optional[Vehicle]:
        return self.get(license_plate)

    def find_parked_in(self, lot_name: str) -> List[Vehicle]:
        """Vehicles currently inside a lot"""
        return [v for v in self._storage.values() if v.current_lot == lot_name]
