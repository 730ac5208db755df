#!/usr/bin/env python3
"""Tests for fleetmaint CLI formatting, table helpers and commands."""

import argparse
from datetime import date, timezone

import pytest
import yaml

from fleet import MaintenanceEvent, MaintenanceStatus, MaintenanceType, ReportingBucket
from fleetmaint import (
    format_cost,
    format_miles,
    format_timestamp,
    main,
    make_chart_table,
    make_events_table,
    parse_month,
    parse_tz,
    truncate,
)


FLEET_DATA = {
    "vehicles": [
        {"id": "v1", "make": "Toyota", "model": "Hilux", "year": 2020, "license_plate": "AB-1"},
    ],
    "users": [
        {"id": "u1", "email": "ana@example.org", "first_name": "Ana", "last_name": "Diaz", "role": "driver"},
    ],
    "service_providers": [
        {"id": "p1", "name": "Taller Central", "type": "mechanic", "is_active": True},
        {"id": "p2", "name": "Frenos Sur", "type": "mechanic", "is_active": False},
    ],
    "maintenance_events": [
        {
            "id": "a", "vehicle_id": "v1", "title": "Oil change", "type": "scheduled",
            "status": "pending", "start_date": "2024-03-01T09:00:00",
            "end_date": "2024-03-01T10:00:00", "created_by": "u1", "cost": 45.0,
            "service_provider_id": "p1",
        },
        {
            "id": "b", "vehicle_id": "v1", "title": "Brakes", "type": "repair",
            "status": "completed", "start_date": "2024-03-08T10:00:00",
            "end_date": "2024-03-08T12:00:00", "created_by": "u1",
        },
    ],
}


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "fleet.yaml"
    with open(path, "w") as f:
        yaml.dump(FLEET_DATA, f, sort_keys=False)
    return path


def load(path):
    with open(path) as f:
        return yaml.safe_load(f)


class TestFormatters:
    """Tests for display formatting helpers."""

    def test_format_cost(self):
        """Costs are shown as dollars, or a dash when missing."""
        assert format_cost(1234.5) == "$1,234.50"
        assert format_cost(None) == "-"

    def test_format_miles(self):
        """Mileage gets thousands separators."""
        assert format_miles(50000) == "50,000"
        assert format_miles(None) == "-"

    def test_format_timestamp(self):
        """Timestamps are shown to the minute."""
        assert format_timestamp("2024-03-01T09:05:00") == "2024-03-01 09:05"
        assert format_timestamp(None) == "-"
        assert format_timestamp("whenever") == "whenever"

    def test_format_timestamp_with_tz(self):
        """Timestamps are converted when a tz is given."""
        assert format_timestamp("2024-03-01T23:30:00-05:00", timezone.utc) == "2024-03-02 04:30"

    def test_truncate(self):
        """Long text is cut with an ellipsis."""
        assert truncate("short") == "short"
        assert truncate("x" * 40, 10) == "xxxxxxx..."
        assert truncate(None) == "-"

    def test_parse_month(self):
        """YYYY-MM parses to the first of the month."""
        assert parse_month("2024-03") == date(2024, 3, 1)
        assert parse_month("2024-03-17") == date(2024, 3, 1)
        with pytest.raises(argparse.ArgumentTypeError):
            parse_month("March")

    def test_parse_tz(self):
        """Zone names resolve and unknown ones are rejected."""
        assert parse_tz("UTC") is not None
        with pytest.raises(argparse.ArgumentTypeError):
            parse_tz("Mars/Olympus_Mons")


class TestTables:
    """Tests for table row builders."""

    def test_chart_table(self):
        """Chart rows show label, range and count."""
        buckets = [
            ReportingBucket("Week 4", date(2023, 2, 22), date(2023, 3, 1), count=2),
            ReportingBucket("Week 5", date(2023, 3, 1), date(2023, 3, 1)),
        ]
        rows = make_chart_table(buckets)
        assert rows[0] == ["Week 4", "2023-02-22 .. 2023-02-28", "2", "##"]
        assert rows[1] == ["Week 5", "-", "0", ""]

    def test_events_table_resolves_names(self):
        """Event rows show vehicle and provider names."""
        event = MaintenanceEvent(
            id="a",
            vehicle_id="v1",
            title="Oil change",
            type=MaintenanceType.SCHEDULED,
            status=MaintenanceStatus.PENDING,
            start_date="2024-03-01T09:00:00",
            end_date="2024-03-01T10:00:00",
            created_by="u1",
            cost=45,
            service_provider_id="p1",
        )
        rows = make_events_table([event], {"v1": "2020 Toyota Hilux"}, {"p1": "Taller Central"})
        assert rows[0] == [
            "a",
            "2024-03-01 09:00",
            "2024-03-01 10:00",
            "2020 Toyota Hilux",
            "Oil change",
            "scheduled",
            "pending",
            "$45.00",
            "Taller Central",
        ]


class TestReportCommands:
    """Tests for read-only commands."""

    def test_missing_file(self, tmp_path, capsys):
        """A missing data file is reported as an error."""
        assert main([str(tmp_path / "nope.yaml"), "stats"]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_chart(self, data_file, capsys):
        """chart prints the month buckets."""
        assert main([str(data_file), "chart", "--range", "month", "--date", "2024-03-10"]) == 0
        out = capsys.readouterr().out
        assert "Week 1" in out
        assert "Week 5" in out
        assert "Total: 2" in out

    def test_calendar(self, data_file, capsys):
        """calendar lists days that have events."""
        assert main([str(data_file), "calendar", "--month", "2024-03"]) == 0
        out = capsys.readouterr().out
        assert "March 2024" in out
        assert "2024-03-01 (Fri)" in out
        assert "09:00  [scheduled] Oil change (pending)" in out

    def test_calendar_empty_month(self, data_file, capsys):
        """calendar says so when a month has no events."""
        assert main([str(data_file), "calendar", "--month", "2024-07"]) == 0
        assert "No maintenance scheduled" in capsys.readouterr().out

    def test_day(self, data_file, capsys):
        """day lists that day's events."""
        assert main([str(data_file), "day", "2024-03-08"]) == 0
        out = capsys.readouterr().out
        assert "Maintenance on 2024-03-08: 1" in out
        assert "Brakes" in out

    def test_events_filtered(self, data_file, capsys):
        """events applies the filters."""
        assert main([str(data_file), "events", "--status", "pending"]) == 0
        out = capsys.readouterr().out
        assert "Maintenance events: 1" in out
        assert "Total cost: $45.00" in out
        assert "Taller Central" in out

    def test_timeline(self, data_file, capsys):
        """timeline shows one vehicle's events."""
        assert main([str(data_file), "timeline", "v1"]) == 0
        out = capsys.readouterr().out
        assert "Vehicle: 2020 Toyota Hilux (AB-1)" in out
        assert out.index("Brakes") < out.index("Oil change")

    def test_timeline_unknown_vehicle(self, data_file, capsys):
        """timeline of an unknown vehicle fails."""
        assert main([str(data_file), "timeline", "v9"]) == 1
        assert "not found" in capsys.readouterr().out

    def test_stats(self, data_file, capsys):
        """stats prints the dashboard counts."""
        assert main([str(data_file), "stats"]) == 0
        out = capsys.readouterr().out
        assert "Total vehicles" in out
        assert "Active drivers" in out

    def test_providers_active_only(self, data_file, capsys):
        """providers --active hides inactive providers."""
        assert main([str(data_file), "providers", "--active"]) == 0
        out = capsys.readouterr().out
        assert "Service providers: 1" in out
        assert "Frenos Sur" not in out

    def test_vehicles(self, data_file, capsys):
        """vehicles lists each vehicle by name."""
        assert main([str(data_file), "vehicles"]) == 0
        assert "2020 Toyota Hilux" in capsys.readouterr().out

    def test_users_by_role(self, data_file, capsys):
        """users --role lists only matching users."""
        assert main([str(data_file), "users", "--role", "driver"]) == 0
        out = capsys.readouterr().out
        assert "Users: 1" in out
        assert "Ana Diaz" in out

    def test_users_no_match(self, data_file, capsys):
        """A role nobody has gives an empty listing."""
        assert main([str(data_file), "users", "--role", "admin"]) == 0
        assert "Users: 0" in capsys.readouterr().out


class TestWriteCommands:
    """Tests for commands that change the data file."""

    def test_log_adds_event_and_activity(self, data_file, capsys):
        """log writes the event and an activity entry."""
        code = main(
            [
                str(data_file), "log", "Tire rotation", "--vehicle", "v1", "--by", "u1",
                "--start", "2024-03-15T08:00:00", "--end", "2024-03-15T09:00:00", "--cost", "30",
            ]
        )
        assert code == 0
        assert "Event saved" in capsys.readouterr().out
        data = load(data_file)
        assert len(data["maintenance_events"]) == 3
        added = data["maintenance_events"][-1]
        assert added["title"] == "Tire rotation"
        assert added["cost"] == 30.0
        assert data["activity_logs"][0]["action"] == "create"

    def test_log_dry_run(self, data_file, capsys):
        """log --dry-run leaves the file unchanged."""
        code = main(
            [str(data_file), "log", "Tires", "--vehicle", "v1", "--by", "u1",
             "--start", "2024-03-15T08:00:00", "--dry-run"]
        )
        assert code == 0
        assert "dry run" in capsys.readouterr().out
        assert len(load(data_file)["maintenance_events"]) == 2

    def test_log_rejects_bad_start(self, data_file, capsys):
        """log rejects an unparseable start."""
        code = main(
            [str(data_file), "log", "Tires", "--vehicle", "v1", "--by", "u1", "--start", "tomorrow"]
        )
        assert code == 1
        assert "start_date" in capsys.readouterr().out

    def test_log_rejects_end_before_start(self, data_file, capsys):
        """log rejects an end before the start."""
        code = main(
            [str(data_file), "log", "Tires", "--vehicle", "v1", "--by", "u1",
             "--start", "2024-03-15T08:00:00", "--end", "2024-03-14T08:00:00"]
        )
        assert code == 1
        assert "after end_date" in capsys.readouterr().out
        assert len(load(data_file)["maintenance_events"]) == 2

    def test_log_unknown_vehicle(self, data_file, capsys):
        """log rejects an unknown vehicle."""
        code = main(
            [str(data_file), "log", "Tires", "--vehicle", "v9", "--by", "u1", "--start", "2024-03-15"]
        )
        assert code == 1

    def test_set_status(self, data_file, capsys):
        """set-status changes an event's status."""
        assert main([str(data_file), "set-status", "a", "completed", "--by", "u1"]) == 0
        assert "pending -> completed" in capsys.readouterr().out
        assert load(data_file)["maintenance_events"][0]["status"] == "completed"

    def test_delete(self, data_file, capsys):
        """delete removes the event."""
        assert main([str(data_file), "delete", "b", "--by", "u1"]) == 0
        data = load(data_file)
        assert [e["id"] for e in data["maintenance_events"]] == ["a"]
        assert data["activity_logs"][0]["action"] == "delete"

    def test_activity(self, data_file, capsys):
        """activity pages the log."""
        main([str(data_file), "delete", "b", "--by", "u1"])
        capsys.readouterr()
        assert main([str(data_file), "activity"]) == 0
        out = capsys.readouterr().out
        assert "Activity: 1 entries" in out
        assert "Deleted maintenance: Brakes" in out
