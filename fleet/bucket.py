"""Dataclasses for bucketed maintenance reporting."""

from dataclasses import dataclass, field
from datetime import date
from typing import List, TYPE_CHECKING

from .status import Granularity

if TYPE_CHECKING:
    from .maintenance_event import MaintenanceEvent


@dataclass
class ReportingBucket:
    """Events grouped into one half-open span of calendar days."""

    label: str
    range_start: date
    range_end: date
    count: int = 0
    events: List["MaintenanceEvent"] = field(default_factory=list)

    @property
    def days(self) -> int:
        return (self.range_end - self.range_start).days

    @property
    def is_empty_range(self) -> bool:
        """True for the degenerate 5th week of a month shorter than 29 days."""
        return self.range_end <= self.range_start

    def contains(self, day: date) -> bool:
        return self.range_start <= day < self.range_end


@dataclass
class BucketReport:
    """Buckets for one reporting window plus the events that couldn't be placed."""

    granularity: Granularity
    reference_date: date
    buckets: List[ReportingBucket]
    skipped: int = 0

    @property
    def total(self) -> int:
        return sum(b.count for b in self.buckets)

    @property
    def window_start(self) -> date:
        return self.buckets[0].range_start

    @property
    def window_end(self) -> date:
        """Exclusive end of the reporting window."""
        return max(b.range_end for b in self.buckets)


@dataclass
class DashboardStats:
    """Headline counts for the dashboard."""

    total_vehicles: int = 0
    active_drivers: int = 0
    pending_maintenance: int = 0
    scheduled_services: int = 0
