#!/usr/bin/env python3
"""Tests for the fleet model classes, enums and date helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from fleet import (
    Err,
    ErrorKind,
    FleetError,
    Granularity,
    MaintenanceEvent,
    MaintenanceStatus,
    MaintenanceType,
    Ok,
    ReportingBucket,
    ServiceProvider,
    User,
    UserRole,
    Vehicle,
)
from fleet.calculations import (
    add_months,
    as_date,
    end_of_month,
    local_date,
    local_datetime,
    month_days,
    parse_timestamp,
    start_of_month,
)
from fleet.maintenance_event import InvalidEventData


class TestEnums:
    """Tests for status enums and Granularity lookup."""

    def test_open_statuses(self):
        """Pending and in-progress are open, the rest are not."""
        assert MaintenanceStatus.PENDING.is_open
        assert MaintenanceStatus.IN_PROGRESS.is_open
        assert not MaintenanceStatus.COMPLETED.is_open
        assert not MaintenanceStatus.CANCELLED.is_open

    def test_status_values_match_stored_strings(self):
        """Enum values are the stored strings."""
        assert MaintenanceStatus("inProgress") is MaintenanceStatus.IN_PROGRESS
        assert MaintenanceType("emergency") is MaintenanceType.EMERGENCY

    @pytest.mark.parametrize(
        "name,expected",
        [("week", Granularity.WEEK), ("Month", Granularity.MONTH), (" YEAR ", Granularity.YEAR)],
    )
    def test_granularity_from_name(self, name, expected):
        """Granularity names are case and space insensitive."""
        assert Granularity.from_name(name) is expected

    def test_granularity_from_unknown_name(self):
        """An unknown granularity name is a ValueError."""
        with pytest.raises(ValueError, match="fortnight"):
            Granularity.from_name("fortnight")

    def test_granularity_value_is_bucket_count(self):
        """Each granularity's value is its bucket count."""
        assert [g.value for g in Granularity] == [7, 5, 12]


class TestCalculations:
    """Tests for timestamp parsing and month arithmetic."""

    def test_parse_naive_and_aware(self):
        """Naive and offset timestamps both parse."""
        assert parse_timestamp("2024-03-01T09:00:00") == datetime(2024, 3, 1, 9)
        aware = parse_timestamp("2024-03-01T09:00:00Z")
        assert aware.tzinfo is not None
        assert aware.utcoffset() == timedelta(0)

    def test_parse_date_only(self):
        """A bare date parses to midnight."""
        assert parse_timestamp("2024-03-01") == datetime(2024, 3, 1)
        assert parse_timestamp(date(2024, 3, 1)) == datetime(2024, 3, 1)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", "2024-13-01", 12])
    def test_parse_rejects_garbage(self, value):
        """Garbage is not a timestamp."""
        with pytest.raises(ValueError):
            parse_timestamp(value)

    def test_local_datetime_is_naive(self):
        """Local datetimes drop the offset."""
        value = local_datetime("2024-03-01T23:30:00-05:00")
        assert value == datetime(2024, 3, 1, 23, 30)
        assert value.tzinfo is None

    def test_local_datetime_converts_with_tz(self):
        """Offset timestamps are converted to the given tz."""
        value = local_datetime("2024-03-01T23:30:00-05:00", timezone.utc)
        assert value == datetime(2024, 3, 2, 4, 30)

    def test_local_date_naive_timestamp_ignores_tz(self):
        """Naive timestamps are taken as already local."""
        assert local_date("2024-03-01T23:30:00", timezone.utc) == date(2024, 3, 1)

    def test_as_date(self):
        """Dates and datetimes reduce to a date."""
        assert as_date("2024-03-10") == date(2024, 3, 10)
        assert as_date(datetime(2024, 3, 10, 8)) == date(2024, 3, 10)

    def test_month_bounds(self):
        """Month bounds run from the 1st to the next 1st."""
        assert start_of_month(date(2024, 2, 17)) == date(2024, 2, 1)
        assert end_of_month(date(2024, 2, 17)) == date(2024, 2, 29)
        assert end_of_month(date(2023, 2, 1)) == date(2023, 2, 28)
        assert end_of_month(date(2024, 12, 5)) == date(2024, 12, 31)

    def test_add_months_clamps(self):
        """Adding months clamps to the month end."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2024, 11, 1), 2) == date(2025, 1, 1)

    def test_month_days(self):
        """Month length accounts for leap years."""
        days = month_days(date(2024, 4, 9))
        assert len(days) == 30
        assert days[0] == date(2024, 4, 1)
        assert days[-1] == date(2024, 4, 30)


class TestMaintenanceEvent:
    """Tests for MaintenanceEvent parsing."""

    def make(self, start="2024-03-01T09:00:00", end="2024-03-01T11:00:00"):
        return MaintenanceEvent(
            id="e1",
            vehicle_id="v1",
            title="Oil change",
            type=MaintenanceType.SCHEDULED,
            status=MaintenanceStatus.PENDING,
            start_date=start,
            end_date=end,
            created_by="u1",
        )

    def test_start_and_end(self):
        """start and end parse the stored timestamps."""
        event = self.make()
        assert event.start == datetime(2024, 3, 1, 9)
        assert event.end == datetime(2024, 3, 1, 11)

    def test_defaults(self):
        """Optional event fields default to empty."""
        event = self.make()
        assert event.description == ""
        assert event.cost is None
        assert event.service_provider_id is None
        assert event.is_open

    def test_invalid_start_raises(self):
        """A bad start_date raises InvalidEventData."""
        event = self.make(start="soon")
        with pytest.raises(InvalidEventData) as exc_info:
            event.start
        assert exc_info.value.event_id == "e1"
        assert exc_info.value.field == "start_date"
        assert exc_info.value.value == "soon"

    def test_invalid_event_data_is_value_error(self):
        """InvalidEventData is a ValueError."""
        with pytest.raises(ValueError):
            self.make(end=None).end

    def test_repr(self):
        """repr includes the title."""
        assert "Oil change" in repr(self.make())


class TestDirectoryEntities:
    """Tests for Vehicle, User and ServiceProvider helpers."""

    def test_vehicle_name(self):
        """Vehicle name is year, make and model."""
        vehicle = Vehicle("Toyota", "Hilux", 2020, "ABC-123")
        assert vehicle.name == "2020 Toyota Hilux"
        assert vehicle.fuel_type == "gasoline"

    def test_user_full_name_and_driver(self):
        """Users know their full name and driver role."""
        driver = User("ana@example.org", "Ana", "Diaz", role=UserRole.DRIVER)
        staff = User("beto@example.org", "Beto", "Ruiz")
        assert driver.full_name == "Ana Diaz"
        assert driver.is_driver
        assert not staff.is_driver
        assert staff.role is UserRole.STAFF

    def test_provider_defaults(self):
        """Providers are active with no specialties by default."""
        provider = ServiceProvider("Taller Central", is_active=None)
        assert provider.specialties == []
        assert provider.is_active is True
        assert provider.type == "general"


class TestReportingBucket:
    """Tests for ReportingBucket span helpers."""

    def test_contains_is_half_open(self):
        """A bucket includes its start and excludes its end."""
        bucket = ReportingBucket("Week 1", date(2024, 3, 1), date(2024, 3, 8))
        assert bucket.contains(date(2024, 3, 1))
        assert bucket.contains(date(2024, 3, 7))
        assert not bucket.contains(date(2024, 3, 8))
        assert bucket.days == 7
        assert not bucket.is_empty_range

    def test_empty_range(self):
        """A zero-length bucket contains nothing."""
        bucket = ReportingBucket("Week 5", date(2023, 3, 1), date(2023, 3, 1))
        assert bucket.is_empty_range
        assert not bucket.contains(date(2023, 3, 1))


class TestResult:
    """Tests for Ok/Err results."""

    def test_ok(self):
        """Ok unwraps to its value."""
        result = Ok(5)
        assert result.is_ok
        assert result.unwrap() == 5

    def test_err_unwrap_raises(self):
        """Unwrapping an Err raises FleetError."""
        result = Err(ErrorKind.NOT_FOUND, "Vehicle x not found")
        assert not result.is_ok
        with pytest.raises(FleetError) as exc_info:
            result.unwrap()
        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert str(exc_info.value) == "Vehicle x not found"

    def test_error_kind_is_http_status(self):
        """Error kinds carry their HTTP status."""
        assert ErrorKind.VALIDATION.value == 400
        assert ErrorKind.NOT_FOUND.value == 404
