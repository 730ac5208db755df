"""
YAML-file backed store for the fleet tables.

The whole data file is loaded, changed and written back on every call, the
same way the tracker has always edited its YAML files. Every public method
returns a tagged result (Ok/Err) instead of raising, so callers can show
the failure and let the user retry.

A DataFile serializes its load-modify-save cycles with a lock and replaces
the file atomically, so one store may be shared by a threaded web server.
"""

import logging
import os
import tempfile
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

import yaml

from . import mapping
from .calculations import DateLike, as_date, local_datetime
from .department import ActivityLog, Department
from .maintenance_event import InvalidEventData, MaintenanceEvent
from .result import Err, ErrorKind, Ok, Result
from .service_provider import ServiceProvider
from .status import MaintenanceStatus, MaintenanceType
from .user import User
from .validation import normalize_dates, validate_row
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

T = TypeVar("T")

TABLES = (
    "vehicles",
    "users",
    "departments",
    "service_providers",
    "maintenance_events",
    "activity_logs",
)

# Fields a patch may never touch
READ_ONLY_FIELDS = {"id", "created_at"}


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class InvalidDataFile(ValueError):
    """The data file parsed as YAML but isn't a mapping of row lists."""


class DataFile:
    """One YAML file holding a list of rows per table."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        # Held by Table around each whole load-modify-save
        self.lock = threading.RLock()

    def load(self) -> Dict[str, List[dict]]:
        """Load all tables. A missing file is an empty store."""
        if not self.path.exists():
            return {name: [] for name in TABLES}
        with open(self.path, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidDataFile(
                f"{self.path}: top level must be a mapping of tables, got {type(data).__name__}"
            )
        data = normalize_dates(data)
        for name in TABLES:
            rows = data.get(name)
            if rows is None:
                data[name] = []
            elif not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
                raise InvalidDataFile(f"{self.path}: '{name}' must be a list of rows")
        return data

    def save(self, data: Dict[str, List[dict]]) -> None:
        """Write all tables to a temp file, then move it over the data file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as fp:
                yaml.dump(
                    data,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


# Failures reading or writing the data file
FILE_ERRORS = (OSError, yaml.YAMLError, InvalidDataFile)


def _storage_error(action: str, table: str, e: Exception) -> Err:
    logger.error("Failed to %s %s: %s", action, table, e)
    return Err(ErrorKind.STORAGE, f"Failed to {action} {table}: {e}")


def _coerce(current: Any, value: Any) -> Any:
    """
    Convert a raw patch value to the type of the field it replaces.

    Enum fields take their stored string value; list fields take a list,
    with null meaning empty. Raises ValueError for anything else.
    """
    if isinstance(current, Enum) and not isinstance(value, Enum):
        return type(current)(value)
    if isinstance(current, list):
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError(f"expected a list, got {value!r}")
    return value


class Table(Generic[T]):
    """CRUD over one table, mapping rows to domain objects."""

    def __init__(
        self,
        data_file: DataFile,
        name: str,
        from_row: Callable[[dict], T],
        to_row: Callable[[T], dict],
        entity: str,
        describe: Callable[[T], str] = lambda obj: str(getattr(obj, "id", "")),
        check: Optional[Callable[[T], Optional[str]]] = None,
    ):
        self.data_file = data_file
        self.name = name
        self.from_row = from_row
        self.to_row = to_row
        self.entity = entity
        self.describe = describe
        self.check = check

    def _load(self) -> Dict[str, List[dict]]:
        return self.data_file.load()

    def _find(self, rows: List[dict], id: str) -> int:
        for i, row in enumerate(rows):
            if row.get("id") == id:
                return i
        return -1

    def _validate(self, obj: T) -> Optional[Err]:
        if self.check is not None:
            problem = self.check(obj)
            if problem:
                return Err(ErrorKind.VALIDATION, problem)
        try:
            row = self.to_row(obj)
        except (TypeError, ValueError) as e:
            return Err(ErrorKind.VALIDATION, f"Invalid {self.entity}: {e}")
        problem = validate_row(self.name, row)
        if problem:
            return Err(ErrorKind.VALIDATION, f"Invalid {self.entity}: {problem}")
        return None

    def _log(self, data: dict, actor: Optional[str], action: str, obj: T) -> None:
        if actor is None:
            return
        entry = ActivityLog(
            id=str(uuid.uuid4()),
            user_id=actor,
            action=action,
            entity=self.entity,
            entity_id=getattr(obj, "id", None),
            description=f"{action.capitalize()}d {self.entity}: {self.describe(obj)}",
            created_at=utc_now(),
        )
        data["activity_logs"].append(mapping.activity_to_row(entry))

    def list(self) -> Result:
        try:
            with self.data_file.lock:
                rows = self._load()[self.name]
        except FILE_ERRORS as e:
            return _storage_error("read", self.name, e)
        try:
            return Ok([self.from_row(row) for row in rows])
        except (KeyError, ValueError) as e:
            return _storage_error("parse", self.name, e)

    def get_by_id(self, id: str) -> Result:
        try:
            with self.data_file.lock:
                rows = self._load()[self.name]
        except FILE_ERRORS as e:
            return _storage_error("read", self.name, e)
        index = self._find(rows, id)
        if index < 0:
            return Err(ErrorKind.NOT_FOUND, f"{self.entity.capitalize()} '{id}' not found")
        try:
            return Ok(self.from_row(rows[index]))
        except (KeyError, ValueError) as e:
            return _storage_error("parse", self.name, e)

    def insert(self, obj: T, actor: Optional[str] = None) -> Result:
        """
        Add a new row.

        Assigns an id when the object has none and stamps created_at and
        updated_at where the entity has them.
        """
        if getattr(obj, "id", None) is None:
            obj.id = str(uuid.uuid4())
        now = utc_now()
        if hasattr(obj, "created_at"):
            obj.created_at = obj.created_at or now
        if hasattr(obj, "updated_at"):
            obj.updated_at = now

        problem = self._validate(obj)
        if problem:
            return problem

        try:
            with self.data_file.lock:
                data = self._load()
                if self._find(data[self.name], obj.id) >= 0:
                    return Err(ErrorKind.VALIDATION, f"Duplicate {self.entity} id '{obj.id}'")
                data[self.name].append(self.to_row(obj))
                self._log(data, actor, "create", obj)
                self.data_file.save(data)
        except FILE_ERRORS as e:
            return _storage_error("write", self.name, e)

        logger.info("Inserted %s %s", self.entity, obj.id)
        return Ok(obj)

    def update(self, id: str, patch: Dict[str, Any], actor: Optional[str] = None) -> Result:
        """Apply a partial update given as field name -> new value."""
        with self.data_file.lock:
            try:
                data = self._load()
            except FILE_ERRORS as e:
                return _storage_error("read", self.name, e)

            rows = data[self.name]
            index = self._find(rows, id)
            if index < 0:
                return Err(ErrorKind.NOT_FOUND, f"{self.entity.capitalize()} '{id}' not found")

            try:
                obj = self.from_row(rows[index])
            except (KeyError, ValueError) as e:
                return _storage_error("parse", self.name, e)
            for field, value in patch.items():
                # Stored fields only; computed properties like `start` aren't in vars()
                if field in READ_ONLY_FIELDS or field not in vars(obj):
                    return Err(ErrorKind.VALIDATION, f"Field '{field}' can't be updated")
                try:
                    setattr(obj, field, _coerce(getattr(obj, field), value))
                except ValueError as e:
                    return Err(ErrorKind.VALIDATION, f"Invalid value for '{field}': {e}")
            if hasattr(obj, "updated_at"):
                obj.updated_at = utc_now()

            problem = self._validate(obj)
            if problem:
                return problem

            rows[index] = self.to_row(obj)
            self._log(data, actor, "update", obj)
            try:
                self.data_file.save(data)
            except FILE_ERRORS as e:
                return _storage_error("write", self.name, e)

        logger.info("Updated %s %s", self.entity, id)
        return Ok(obj)

    def delete(self, id: str, actor: Optional[str] = None) -> Result:
        with self.data_file.lock:
            try:
                data = self._load()
            except FILE_ERRORS as e:
                return _storage_error("read", self.name, e)

            rows = data[self.name]
            index = self._find(rows, id)
            if index < 0:
                return Err(ErrorKind.NOT_FOUND, f"{self.entity.capitalize()} '{id}' not found")

            try:
                obj = self.from_row(rows[index])
            except (KeyError, ValueError) as e:
                return _storage_error("parse", self.name, e)
            del rows[index]
            self._log(data, actor, "delete", obj)
            try:
                self.data_file.save(data)
            except FILE_ERRORS as e:
                return _storage_error("write", self.name, e)

        logger.info("Deleted %s %s", self.entity, id)
        return Ok(None)


# =============================================================================
# Maintenance events
# =============================================================================


@dataclass
class EventFilter:
    """Criteria for the maintenance list. None means 'any'."""

    vehicle_id: Optional[str] = None
    status: Optional[MaintenanceStatus] = None
    type: Optional[MaintenanceType] = None
    service_provider_id: Optional[str] = None
    start_from: Optional[DateLike] = None
    start_to: Optional[DateLike] = None
    search: Optional[str] = None

    def matches(self, event: MaintenanceEvent) -> bool:
        if self.vehicle_id and event.vehicle_id != self.vehicle_id:
            return False
        if self.status and event.status != self.status:
            return False
        if self.type and event.type != self.type:
            return False
        if self.service_provider_id and event.service_provider_id != self.service_provider_id:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in event.title.lower() and needle not in event.description.lower():
                return False
        if self.start_from or self.start_to:
            try:
                day = local_datetime(event.start).date()
            except InvalidEventData:
                return False
            if self.start_from and day < as_date(self.start_from):
                return False
            if self.start_to and day > as_date(self.start_to):
                return False
        return True


def check_event_dates(event: MaintenanceEvent) -> Optional[str]:
    """Both timestamps must parse and start_date must not be after end_date."""
    try:
        start, end = event.start, event.end
    except InvalidEventData as e:
        return str(e)
    if (start.tzinfo is None) != (end.tzinfo is None):
        start, end = local_datetime(start), local_datetime(end)
    if start > end:
        return f"start_date {event.start_date} is after end_date {event.end_date}"
    return None


def _start_key(event: MaintenanceEvent):
    try:
        return (1, local_datetime(event.start))
    except InvalidEventData:
        return (0, datetime.min)


class EventTable(Table[MaintenanceEvent]):
    """Maintenance events, listed newest first."""

    def list(self, filter: Optional[EventFilter] = None) -> Result:
        result = super().list()
        if not result.is_ok:
            return result
        events = result.value
        if filter is not None:
            events = [e for e in events if filter.matches(e)]
        events.sort(key=_start_key, reverse=True)
        return Ok(events)


class ActivityLogTable(Table[ActivityLog]):
    def page(self, page: int = 0, per_page: int = 4) -> Result:
        """One page of the activity log, newest first, with the total count."""
        result = self.list()
        if not result.is_ok:
            return result
        # Reverse first so entries sharing a timestamp stay newest first
        logs = sorted(
            reversed(result.value), key=lambda log: log.created_at or "", reverse=True
        )
        start = max(page, 0) * per_page
        return Ok((logs[start:start + per_page], len(logs)))


class FleetStore:
    """All fleet tables backed by a single YAML data file."""

    def __init__(self, path: Union[str, Path]):
        self.data_file = DataFile(path)
        self.events = EventTable(
            self.data_file,
            "maintenance_events",
            mapping.event_from_row,
            mapping.event_to_row,
            entity="maintenance",
            describe=lambda e: e.title,
            check=check_event_dates,
        )
        self.vehicles: Table[Vehicle] = Table(
            self.data_file,
            "vehicles",
            mapping.vehicle_from_row,
            mapping.vehicle_to_row,
            entity="vehicle",
            describe=lambda v: f"{v.name} ({v.license_plate})",
        )
        self.users: Table[User] = Table(
            self.data_file,
            "users",
            mapping.user_from_row,
            mapping.user_to_row,
            entity="user",
            describe=lambda u: u.full_name or u.email,
        )
        self.service_providers: Table[ServiceProvider] = Table(
            self.data_file,
            "service_providers",
            mapping.provider_from_row,
            mapping.provider_to_row,
            entity="service provider",
            describe=lambda p: p.name,
        )
        self.departments: Table[Department] = Table(
            self.data_file,
            "departments",
            mapping.department_from_row,
            mapping.department_to_row,
            entity="department",
            describe=lambda d: d.name,
        )
        self.activity_logs = ActivityLogTable(
            self.data_file,
            "activity_logs",
            mapping.activity_from_row,
            mapping.activity_to_row,
            entity="activity",
        )

    @property
    def path(self) -> Path:
        return self.data_file.path
