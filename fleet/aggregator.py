"""
Date bucketing of maintenance events for dashboard charts and calendar views.

Every function here is pure: it reads a snapshot of events handed in by the
caller and never mutates it. Timestamps are reduced to calendar dates in the
caller's reference frame (see calculations.local_datetime) before any
comparison, so buckets are spans of whole days.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, List, Optional, Tuple

from .bucket import BucketReport, DashboardStats, ReportingBucket
from .calculations import (
    DateLike,
    add_months,
    as_date,
    end_of_month,
    local_datetime,
    month_days,
    start_of_month,
)
from .maintenance_event import InvalidEventData, MaintenanceEvent
from .status import Granularity, MaintenanceStatus, MaintenanceType

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Month view: fixed 7-day spans starting on the 1st, 8th, 15th, 22nd, 29th
WEEKS_PER_MONTH = 5

Span = Tuple[str, date, date]


def _dated_events(
    events: Iterable[MaintenanceEvent], tz: Optional[tzinfo]
) -> Tuple[List[Tuple[MaintenanceEvent, datetime]], int]:
    """Pair each event with its local start time, dropping unparseable ones."""
    dated = []
    skipped = 0
    for event in events:
        try:
            dated.append((event, local_datetime(event.start, tz)))
        except InvalidEventData as e:
            logger.warning("Skipping maintenance event: %s", e)
            skipped += 1
    return dated, skipped


def bucket_spans(reference_date: DateLike, granularity: Granularity) -> List[Span]:
    """
    Labels and [start, end) day ranges for a reporting window.

    - WEEK: the 7 days ending at reference_date, one bucket per day
    - MONTH: 5 fixed weeks of the reference month, last one clamped to
      the month end (empty for months shorter than 29 days)
    - YEAR: the 12 calendar months of the reference year
    """
    ref = as_date(reference_date)

    if granularity is Granularity.WEEK:
        days = [ref - timedelta(days=6 - i) for i in range(7)]
        return [(WEEKDAY_LABELS[d.weekday()], d, d + timedelta(days=1)) for d in days]

    if granularity is Granularity.MONTH:
        first = start_of_month(ref)
        month_stop = add_months(first, 1)
        spans = []
        for i in range(WEEKS_PER_MONTH):
            start = first + timedelta(days=7 * i)
            end = min(start + timedelta(days=7), month_stop)
            spans.append((f"Week {i + 1}", start, end))
        return spans

    if granularity is Granularity.YEAR:
        first = ref.replace(month=1, day=1)
        return [
            (MONTH_LABELS[i], add_months(first, i), add_months(first, i + 1))
            for i in range(12)
        ]

    raise ValueError(f"Unsupported granularity: {granularity!r}")


def build_report(
    events: Iterable[MaintenanceEvent],
    reference_date: DateLike,
    granularity: Granularity,
    tz: Optional[tzinfo] = None,
) -> BucketReport:
    """
    Count events per bucket for the window around reference_date.

    Events outside the window are ignored; only start_date matters.
    Events whose start_date can't be parsed are counted in `skipped`
    instead of failing the whole report.
    """
    buckets = [
        ReportingBucket(label, start, end)
        for label, start, end in bucket_spans(reference_date, granularity)
    ]
    window_start = buckets[0].range_start
    window_end = max(b.range_end for b in buckets)

    dated, skipped = _dated_events(events, tz)
    for event, when in dated:
        day = when.date()
        if not window_start <= day < window_end:
            continue
        for bucket in buckets:
            if bucket.contains(day):
                bucket.count += 1
                bucket.events.append(event)
                break

    return BucketReport(
        granularity=granularity,
        reference_date=as_date(reference_date),
        buckets=buckets,
        skipped=skipped,
    )


def bucketize(
    events: Iterable[MaintenanceEvent],
    reference_date: DateLike,
    granularity: Granularity,
    tz: Optional[tzinfo] = None,
) -> List[ReportingBucket]:
    """Chronological buckets (7, 5 or 12 of them) for chart display."""
    return build_report(events, reference_date, granularity, tz).buckets


def events_on_day(
    events: Iterable[MaintenanceEvent], day: DateLike, tz: Optional[tzinfo] = None
) -> List[MaintenanceEvent]:
    """Events starting on the calendar date of `day`, in input order."""
    target = as_date(day)
    dated, _ = _dated_events(events, tz)
    return [event for event, when in dated if when.date() == target]


def events_in_month(
    events: Iterable[MaintenanceEvent],
    month_anchor: DateLike,
    tz: Optional[tzinfo] = None,
) -> List[MaintenanceEvent]:
    """Events starting within the anchor's month, earliest first."""
    first = start_of_month(month_anchor)
    last = end_of_month(month_anchor)
    dated, _ = _dated_events(events, tz)
    in_month = [(event, when) for event, when in dated if first <= when.date() <= last]
    in_month.sort(key=lambda pair: pair[1])
    return [event for event, _ in in_month]


def calendar_month(
    events: Iterable[MaintenanceEvent],
    month_anchor: DateLike,
    tz: Optional[tzinfo] = None,
) -> List[Tuple[date, List[MaintenanceEvent]]]:
    """Every day of the month paired with the events starting on it."""
    in_month = events_in_month(events, month_anchor, tz)
    by_day = {}
    for event in in_month:
        by_day.setdefault(local_datetime(event.start, tz).date(), []).append(event)
    return [(day, by_day.get(day, [])) for day in month_days(month_anchor)]


def vehicle_timeline(
    events: Iterable[MaintenanceEvent],
    vehicle_id: str,
    tz: Optional[tzinfo] = None,
) -> List[MaintenanceEvent]:
    """Maintenance history of one vehicle, newest first."""
    dated, _ = _dated_events((e for e in events if e.vehicle_id == vehicle_id), tz)
    dated.sort(key=lambda pair: pair[1], reverse=True)
    return [event for event, _ in dated]


def dashboard_stats(vehicles, users, events) -> DashboardStats:
    """Headline counts: vehicles, drivers, pending work, scheduled services."""
    events = list(events)
    return DashboardStats(
        total_vehicles=len(list(vehicles)),
        active_drivers=sum(1 for u in users if u.is_driver),
        pending_maintenance=sum(
            1 for e in events if e.status == MaintenanceStatus.PENDING
        ),
        scheduled_services=sum(
            1 for e in events if e.type == MaintenanceType.SCHEDULED
        ),
    )
