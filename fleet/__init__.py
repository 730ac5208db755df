"""
Fleet maintenance models and reporting.

This package provides:
- Status enums: MaintenanceType, MaintenanceStatus, VehicleStatus, UserRole, Granularity
- MaintenanceEvent: a block of work on a vehicle
- Vehicle, User, ServiceProvider, Department, ActivityLog: directory records
- ReportingBucket / BucketReport: derived chart data
- aggregator: bucketing and calendar lookups over a snapshot of events
- FleetStore: YAML-file backed tables returning Ok/Err results
- ObjectStorage: directory-backed file storage
"""

from .status import MaintenanceType, MaintenanceStatus, VehicleStatus, UserRole, Granularity
from .maintenance_event import MaintenanceEvent, InvalidEventData
from .vehicle import Vehicle
from .user import User
from .service_provider import ServiceProvider
from .department import Department, ActivityLog
from .bucket import ReportingBucket, BucketReport, DashboardStats
from .aggregator import (
    bucketize,
    build_report,
    events_on_day,
    events_in_month,
    calendar_month,
    vehicle_timeline,
    dashboard_stats,
)
from .result import Ok, Err, ErrorKind, FleetError
from .store import FleetStore, EventFilter
from .storage import ObjectStorage, FileRef

__all__ = [
    "MaintenanceType",
    "MaintenanceStatus",
    "VehicleStatus",
    "UserRole",
    "Granularity",
    "MaintenanceEvent",
    "InvalidEventData",
    "Vehicle",
    "User",
    "ServiceProvider",
    "Department",
    "ActivityLog",
    "ReportingBucket",
    "BucketReport",
    "DashboardStats",
    "bucketize",
    "build_report",
    "events_on_day",
    "events_in_month",
    "calendar_month",
    "vehicle_timeline",
    "dashboard_stats",
    "Ok",
    "Err",
    "ErrorKind",
    "FleetError",
    "FleetStore",
    "EventFilter",
    "ObjectStorage",
    "FileRef",
]
