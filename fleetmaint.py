#!/usr/bin/env python3
"""
Unified CLI for fleet maintenance tracking.

Commands:
  chart       - Maintenance counts per day, week or month
  calendar    - Month calendar of maintenance events
  day         - Events starting on one day
  events      - List maintenance events with filters
  log         - Add a new maintenance event
  set-status  - Change the status of an event
  delete      - Remove an event
  timeline    - Maintenance history of one vehicle
  vehicles    - List vehicles
  providers   - List service providers
  users       - List users
  stats       - Dashboard headline counts
  activity    - Recent activity log
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from dateutil import tz as dateutil_tz
from tabulate import tabulate

from fleet import (
    EventFilter,
    FleetStore,
    Granularity,
    MaintenanceEvent,
    MaintenanceStatus,
    MaintenanceType,
    ReportingBucket,
    UserRole,
    build_report,
    calendar_month,
    dashboard_stats,
    events_on_day,
    vehicle_timeline,
)
from fleet.calculations import local_datetime
from fleet.maintenance_event import InvalidEventData

logger = logging.getLogger("fleetmaint")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def format_miles(miles: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{miles:,.0f}" if miles is not None else "-"


def format_timestamp(value: Optional[str], tz=None) -> str:
    """Format a stored timestamp as 'YYYY-MM-DD HH:MM' in the local frame."""
    if not value:
        return "-"
    try:
        return local_datetime(value, tz).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return str(value)


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_month(value: str) -> date:
    """Parse 'YYYY-MM' (or a full date) to the first of that month."""
    try:
        if len(value) == 7:
            year, month = value.split("-")
            return date(int(year), int(month), 1)
        return date.fromisoformat(value).replace(day=1)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid month: {value!r} (expected YYYY-MM)")


def parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def report_error(err) -> int:
    print(f"Error: {err.message}")
    return 1


# =============================================================================
# Table builders
# =============================================================================


def make_chart_table(buckets: List[ReportingBucket]) -> List[List[str]]:
    """Convert buckets to rows with a simple text bar."""
    rows = []
    for bucket in buckets:
        if bucket.is_empty_range:
            span = "-"
        else:
            last_day = bucket.range_start.toordinal() + bucket.days - 1
            span = f"{bucket.range_start.isoformat()} .. {date.fromordinal(last_day).isoformat()}"
        rows.append([bucket.label, span, str(bucket.count), "#" * bucket.count])
    return rows


def make_events_table(
    events: List[MaintenanceEvent],
    vehicle_names: Dict[str, str],
    provider_names: Dict[str, str],
    tz=None,
) -> List[List[str]]:
    """Convert events to table rows, resolving vehicle and provider names."""
    rows = []
    for event in events:
        rows.append(
            [
                event.id or "-",
                format_timestamp(event.start_date, tz),
                format_timestamp(event.end_date, tz),
                vehicle_names.get(event.vehicle_id, event.vehicle_id),
                truncate(event.title),
                event.type.value,
                event.status.value,
                format_cost(event.cost),
                provider_names.get(event.service_provider_id, "-")
                if event.service_provider_id
                else "-",
            ]
        )
    return rows


EVENT_HEADERS = ["ID", "Start", "End", "Vehicle", "Title", "Type", "Status", "Cost", "Provider"]


def _names(store: FleetStore):
    """Display names for vehicles and providers. Missing tables give empty maps."""
    vehicles = store.vehicles.list()
    providers = store.service_providers.list()
    vehicle_names = {v.id: v.name for v in vehicles.value} if vehicles.is_ok else {}
    provider_names = {p.id: p.name for p in providers.value} if providers.is_ok else {}
    return vehicle_names, provider_names


# =============================================================================
# Report commands
# =============================================================================


def cmd_chart(args, store: FleetStore) -> int:
    """Maintenance counts per bucket for a week, month or year."""
    result = store.events.list()
    if not result.is_ok:
        return report_error(result)

    granularity = Granularity.from_name(args.range)
    reference = args.date or date.today()
    report = build_report(result.value, reference, granularity, args.tz)

    print(f"Maintenance by {args.range} (reference {reference.isoformat()})")
    print()
    headers = ["Bucket", "Days", "Events", ""]
    print(tabulate(make_chart_table(report.buckets), headers=headers, tablefmt="simple"))
    print()
    print(f"Total: {report.total}")
    if report.skipped:
        print(f"Skipped {report.skipped} event(s) with unreadable dates")
    return 0


def cmd_calendar(args, store: FleetStore) -> int:
    """Month calendar: each day with events starting on it."""
    result = store.events.list()
    if not result.is_ok:
        return report_error(result)

    anchor = args.month or date.today().replace(day=1)
    days = calendar_month(result.value, anchor, args.tz)

    print(anchor.strftime("%B %Y"))
    print()
    busy = [(day, events) for day, events in days if events]
    if not busy:
        print("No maintenance scheduled this month.")
        return 0

    for day, events in busy:
        print(f"{day.isoformat()} ({day.strftime('%a')})")
        for event in events:
            time = format_timestamp(event.start_date, args.tz)[11:]
            print(f"  {time}  [{event.type.value}] {event.title} ({event.status.value})")
    return 0


def cmd_day(args, store: FleetStore) -> int:
    """Events starting on one day."""
    result = store.events.list()
    if not result.is_ok:
        return report_error(result)

    # The store lists newest first; the calendar reads earliest first
    events = list(reversed(result.value))
    matches = events_on_day(events, args.day, args.tz)
    print(f"Maintenance on {args.day.isoformat()}: {len(matches)}")
    print()
    if matches:
        vehicle_names, provider_names = _names(store)
        rows = make_events_table(matches, vehicle_names, provider_names, args.tz)
        print(tabulate(rows, headers=EVENT_HEADERS, tablefmt="simple"))
    return 0


def cmd_events(args, store: FleetStore) -> int:
    """List maintenance events with filters."""
    event_filter = EventFilter(
        vehicle_id=args.vehicle,
        status=MaintenanceStatus(args.status) if args.status else None,
        type=MaintenanceType(args.type) if args.type else None,
        service_provider_id=args.provider,
        start_from=args.since,
        start_to=args.until,
        search=args.search,
    )
    result = store.events.list(event_filter)
    if not result.is_ok:
        return report_error(result)
    events = result.value

    total_cost = sum(e.cost for e in events if e.cost is not None)
    print(f"Maintenance events: {len(events)}")
    if total_cost > 0:
        print(f"Total cost: {format_cost(total_cost)}")
    print()

    if not events:
        print("No maintenance events found.")
        return 0

    vehicle_names, provider_names = _names(store)
    rows = make_events_table(events, vehicle_names, provider_names, args.tz)
    print(tabulate(rows, headers=EVENT_HEADERS, tablefmt="simple"))
    return 0


def cmd_timeline(args, store: FleetStore) -> int:
    """Maintenance history of one vehicle, newest first."""
    vehicle = store.vehicles.get_by_id(args.vehicle_id)
    if not vehicle.is_ok:
        return report_error(vehicle)
    result = store.events.list()
    if not result.is_ok:
        return report_error(result)

    events = vehicle_timeline(result.value, args.vehicle_id, args.tz)
    print(f"Vehicle: {vehicle.value.name} ({vehicle.value.license_plate})")
    print(f"Maintenance events: {len(events)}")
    print()
    if not events:
        print("No maintenance history.")
        return 0

    _, provider_names = _names(store)
    rows = make_events_table(events, {}, provider_names, args.tz)
    print(tabulate(rows, headers=EVENT_HEADERS, tablefmt="simple"))
    return 0


def cmd_stats(args, store: FleetStore) -> int:
    """Dashboard headline counts."""
    vehicles = store.vehicles.list()
    users = store.users.list()
    events = store.events.list()
    for result in (vehicles, users, events):
        if not result.is_ok:
            return report_error(result)

    stats = dashboard_stats(vehicles.value, users.value, events.value)
    rows = [
        ["Total vehicles", stats.total_vehicles],
        ["Active drivers", stats.active_drivers],
        ["Pending maintenance", stats.pending_maintenance],
        ["Scheduled services", stats.scheduled_services],
    ]
    print(tabulate(rows, tablefmt="simple"))
    return 0


def cmd_activity(args, store: FleetStore) -> int:
    """Page through the activity log."""
    result = store.activity_logs.page(args.page, args.per_page)
    if not result.is_ok:
        return report_error(result)
    logs, total = result.value

    print(f"Activity: {total} entries (page {args.page + 1})")
    print()
    if not logs:
        print("No activity recorded.")
        return 0
    rows = [
        [format_timestamp(log.created_at, args.tz), log.user_id, log.action, log.entity, truncate(log.description, 50)]
        for log in logs
    ]
    print(tabulate(rows, headers=["When", "User", "Action", "Entity", "Description"], tablefmt="simple"))
    return 0


# =============================================================================
# Directory commands
# =============================================================================


def cmd_vehicles(args, store: FleetStore) -> int:
    """List vehicles."""
    result = store.vehicles.list()
    if not result.is_ok:
        return report_error(result)

    rows = [
        [v.id, v.name, v.license_plate, v.status.value, format_miles(v.mileage), v.assigned_driver_id or "-"]
        for v in sorted(result.value, key=lambda v: (v.make, v.model, v.year))
    ]
    print(f"Vehicles: {len(rows)}")
    print()
    print(tabulate(rows, headers=["ID", "Vehicle", "Plate", "Status", "Mileage", "Driver"], tablefmt="simple"))
    return 0


def cmd_providers(args, store: FleetStore) -> int:
    """List service providers."""
    result = store.service_providers.list()
    if not result.is_ok:
        return report_error(result)

    providers = result.value
    if args.active:
        providers = [p for p in providers if p.is_active]
    rows = [
        [p.id, p.name, p.type, p.city or "-", p.contact_phone or "-", f"{p.rating:.1f}"]
        for p in sorted(providers, key=lambda p: p.name)
    ]
    print(f"Service providers: {len(rows)}")
    print()
    print(tabulate(rows, headers=["ID", "Name", "Type", "City", "Phone", "Rating"], tablefmt="simple"))
    return 0


def cmd_users(args, store: FleetStore) -> int:
    """List users, optionally by role."""
    result = store.users.list()
    if not result.is_ok:
        return report_error(result)

    users = result.value
    if args.role:
        users = [u for u in users if u.role.value == args.role]
    rows = [
        [u.id, u.full_name or "-", u.email, u.role.value, u.position or "-", u.phone or "-"]
        for u in sorted(users, key=lambda u: (u.last_name, u.first_name))
    ]
    print(f"Users: {len(rows)}")
    print()
    print(tabulate(rows, headers=["ID", "Name", "Email", "Role", "Position", "Phone"], tablefmt="simple"))
    return 0


# =============================================================================
# Write commands
# =============================================================================


def cmd_log(args, store: FleetStore) -> int:
    """Add a new maintenance event."""
    vehicle = store.vehicles.get_by_id(args.vehicle)
    if not vehicle.is_ok:
        return report_error(vehicle)

    event = MaintenanceEvent(
        vehicle_id=args.vehicle,
        title=args.title,
        description=args.description or "",
        type=MaintenanceType(args.type),
        status=MaintenanceStatus(args.status),
        start_date=args.start,
        end_date=args.end or args.start,
        cost=args.cost,
        service_provider_id=args.provider,
        created_by=args.by,
    )

    try:
        event.start
        event.end
    except InvalidEventData as e:
        print(f"Error: {e}")
        return 1

    print(f"Adding maintenance event to {args.data_file}:")
    print(f"  Vehicle: {vehicle.value.name}")
    print(f"  Title:   {event.title}")
    print(f"  Type:    {event.type.value}")
    print(f"  Status:  {event.status.value}")
    print(f"  Start:   {format_timestamp(event.start_date)}")
    print(f"  End:     {format_timestamp(event.end_date)}")
    if event.cost:
        print(f"  Cost:    {format_cost(event.cost)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    result = store.events.insert(event, actor=args.by)
    if not result.is_ok:
        return report_error(result)
    print(f"Event saved ({result.value.id}).")
    return 0


def cmd_set_status(args, store: FleetStore) -> int:
    """Change the status of an event."""
    current = store.events.get_by_id(args.event_id)
    if not current.is_ok:
        return report_error(current)

    print(f"Event:  {current.value.title}")
    print(f"Status: {current.value.status.value} -> {args.status}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    result = store.events.update(args.event_id, {"status": args.status}, actor=args.by)
    if not result.is_ok:
        return report_error(result)
    print("Status updated.")
    return 0


def cmd_delete(args, store: FleetStore) -> int:
    """Remove an event."""
    current = store.events.get_by_id(args.event_id)
    if not current.is_ok:
        return report_error(current)

    print(f"Deleting event: {current.value.title}")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    result = store.events.delete(args.event_id, actor=args.by)
    if not result.is_ok:
        return report_error(result)
    print("Event deleted.")
    return 0


# =============================================================================
# Main
# =============================================================================


COMMANDS = {
    "chart": cmd_chart,
    "calendar": cmd_calendar,
    "day": cmd_day,
    "events": cmd_events,
    "log": cmd_log,
    "set-status": cmd_set_status,
    "delete": cmd_delete,
    "timeline": cmd_timeline,
    "vehicles": cmd_vehicles,
    "providers": cmd_providers,
    "users": cmd_users,
    "stats": cmd_stats,
    "activity": cmd_activity,
}


def parse_tz(value: str):
    zone = dateutil_tz.gettz(value)
    if zone is None:
        raise argparse.ArgumentTypeError(f"Unknown time zone: {value!r}")
    return zone


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fleet maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/fleet.yaml chart --range week
  %(prog)s data/fleet.yaml chart --range month --date 2024-03-10
  %(prog)s data/fleet.yaml calendar --month 2024-03
  %(prog)s data/fleet.yaml day 2024-03-01
  %(prog)s data/fleet.yaml events --status pending --since 2024-01-01
  %(prog)s data/fleet.yaml log "Oil change" --vehicle v1 --by u1 \\
      --start 2024-03-01T09:00 --end 2024-03-01T11:00 --cost 45
  %(prog)s data/fleet.yaml set-status EVENT_ID completed --by u1
""",
    )
    parser.add_argument("data_file", type=Path, help="Path to fleet YAML data file")
    parser.add_argument(
        "--tz",
        type=parse_tz,
        default=None,
        help="Time zone for calendar dates (default: as recorded)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Chart subcommand
    chart_parser = subparsers.add_parser("chart", help="Maintenance counts per bucket")
    chart_parser.add_argument(
        "--range",
        choices=["week", "month", "year"],
        default="month",
        help="Reporting window (default: month)",
    )
    chart_parser.add_argument(
        "--date",
        type=parse_day,
        help="Reference date YYYY-MM-DD (default: today)",
    )

    # Calendar subcommand
    calendar_parser = subparsers.add_parser("calendar", help="Month calendar of events")
    calendar_parser.add_argument(
        "--month", type=parse_month, help="Month YYYY-MM (default: this month)"
    )

    # Day subcommand
    day_parser = subparsers.add_parser("day", help="Events starting on one day")
    day_parser.add_argument("day", type=parse_day, help="Date YYYY-MM-DD")

    # Events subcommand
    events_parser = subparsers.add_parser("events", help="List maintenance events")
    events_parser.add_argument("--vehicle", type=str, help="Filter by vehicle ID")
    events_parser.add_argument(
        "--status", choices=[s.value for s in MaintenanceStatus], help="Filter by status"
    )
    events_parser.add_argument(
        "--type", choices=[t.value for t in MaintenanceType], help="Filter by type"
    )
    events_parser.add_argument("--provider", type=str, help="Filter by service provider ID")
    events_parser.add_argument("--since", type=parse_day, help="Start date on or after")
    events_parser.add_argument("--until", type=parse_day, help="Start date on or before")
    events_parser.add_argument(
        "--search", type=str, help="Text in title or description (case-insensitive)"
    )

    # Log subcommand
    log_parser = subparsers.add_parser("log", help="Add a new maintenance event")
    log_parser.add_argument("title", type=str, help="Short title of the work")
    log_parser.add_argument("--vehicle", required=True, help="Vehicle ID")
    log_parser.add_argument("--by", required=True, help="ID of the user creating the event")
    log_parser.add_argument("--start", required=True, help="Start timestamp (ISO 8601)")
    log_parser.add_argument("--end", help="End timestamp (default: same as start)")
    log_parser.add_argument(
        "--type",
        choices=[t.value for t in MaintenanceType],
        default=MaintenanceType.SCHEDULED.value,
    )
    log_parser.add_argument(
        "--status",
        choices=[s.value for s in MaintenanceStatus],
        default=MaintenanceStatus.PENDING.value,
    )
    log_parser.add_argument("--cost", type=float, help="Cost of the work")
    log_parser.add_argument("--provider", help="Service provider ID")
    log_parser.add_argument("--description", help="Longer description")
    log_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    # Set-status subcommand
    status_parser = subparsers.add_parser("set-status", help="Change an event's status")
    status_parser.add_argument("event_id", help="Event ID")
    status_parser.add_argument("status", choices=[s.value for s in MaintenanceStatus])
    status_parser.add_argument("--by", help="ID of the user making the change")
    status_parser.add_argument("--dry-run", action="store_true")

    # Delete subcommand
    delete_parser = subparsers.add_parser("delete", help="Remove an event")
    delete_parser.add_argument("event_id", help="Event ID")
    delete_parser.add_argument("--by", help="ID of the user making the change")
    delete_parser.add_argument("--dry-run", action="store_true")

    # Timeline subcommand
    timeline_parser = subparsers.add_parser("timeline", help="Maintenance history of a vehicle")
    timeline_parser.add_argument("vehicle_id", help="Vehicle ID")

    # Directory subcommands
    subparsers.add_parser("vehicles", help="List vehicles")
    providers_parser = subparsers.add_parser("providers", help="List service providers")
    providers_parser.add_argument("--active", action="store_true", help="Only active providers")
    users_parser = subparsers.add_parser("users", help="List users")
    users_parser.add_argument(
        "--role", choices=[r.value for r in UserRole], help="Only users with this role"
    )

    subparsers.add_parser("stats", help="Dashboard headline counts")

    activity_parser = subparsers.add_parser("activity", help="Recent activity log")
    activity_parser.add_argument("--page", type=int, default=0, help="Page number (from 0)")
    activity_parser.add_argument("--per-page", type=int, default=4, help="Entries per page")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.data_file.exists():
        print(f"Error: File not found: {args.data_file}")
        return 1

    store = FleetStore(args.data_file)
    return COMMANDS[args.command](args, store)


if __name__ == "__main__":
    sys.exit(main() or 0)
