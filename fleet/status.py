"""Enums for maintenance, vehicle and user categories."""

from enum import Enum


class MaintenanceType(Enum):
    """Why a maintenance event was opened."""

    SCHEDULED = "scheduled"
    EMERGENCY = "emergency"
    REPAIR = "repair"


class MaintenanceStatus(Enum):
    """Where a maintenance event is in its lifecycle."""

    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_open(self) -> bool:
        return self in (MaintenanceStatus.PENDING, MaintenanceStatus.IN_PROGRESS)


class VehicleStatus(Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "outOfService"
    PENDING_MAINTENANCE = "pendingMaintenance"


class UserRole(Enum):
    ADMIN = "admin"
    STAFF = "staff"
    DRIVER = "driver"


class Granularity(Enum):
    """Reporting window size. Value = number of buckets produced."""

    WEEK = 7
    MONTH = 5
    YEAR = 12

    @classmethod
    def from_name(cls, name: str) -> "Granularity":
        """Look up by case-insensitive name ('week', 'month', 'year')."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown granularity: {name!r}") from None
