"""MaintenanceEvent class for scheduled and unscheduled vehicle work."""
from datetime import datetime
from typing import Optional

from .calculations import parse_timestamp
from .status import MaintenanceStatus, MaintenanceType


class InvalidEventData(ValueError):
    """A maintenance event carries a timestamp that can't be parsed."""

    def __init__(self, event_id: Optional[str], field: str, value):
        super().__init__(f"Event {event_id or '?'}: invalid {field} {value!r}")
        self.event_id = event_id
        self.field = field
        self.value = value


class MaintenanceEvent:
    """A block of maintenance work on one vehicle."""

    def __init__(
            self,
            vehicle_id: str,
            title: str,
            type: MaintenanceType,
            status: MaintenanceStatus,
            start_date: str,
            end_date: str,
            created_by: str,
            description: str = "",
            cost: Optional[float] = None,
            service_provider_id: Optional[str] = None,
            id: Optional[str] = None,
            created_at: Optional[str] = None,
            updated_at: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.title = title
        self.description = description or ""
        self.type = type
        self.status = status
        self.start_date = start_date
        self.end_date = end_date
        self.cost = cost
        self.service_provider_id = service_provider_id
        self.created_by = created_by
        self.created_at = created_at
        self.updated_at = updated_at

    def __repr__(self) -> str:
        return f"MaintenanceEvent(id={self.id!r}, title={self.title!r}, start_date={self.start_date!r})"

    def _parse(self, field: str) -> datetime:
        value = getattr(self, field)
        try:
            return parse_timestamp(value)
        except (ValueError, OverflowError) as e:
            raise InvalidEventData(self.id, field, value) from e

    @property
    def start(self) -> datetime:
        """Parsed start_date. Raises InvalidEventData."""
        return self._parse("start_date")

    @property
    def end(self) -> datetime:
        """Parsed end_date. Raises InvalidEventData."""
        return self._parse("end_date")

    @property
    def is_open(self) -> bool:
        return self.status.is_open
