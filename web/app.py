"""Flask JSON API for fleet maintenance tracking."""

import logging
import os
from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from dateutil import tz as dateutil_tz
from flask import Blueprint, Flask, abort, current_app, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException

from fleet import (
    EventFilter,
    FleetStore,
    Granularity,
    MaintenanceStatus,
    MaintenanceType,
    ObjectStorage,
    build_report,
    calendar_month,
    dashboard_stats,
    events_on_day,
    vehicle_timeline,
)
from fleet import mapping
from fleet.calculations import as_date
from fleet.chat import ChatRelay, DEFAULT_MODEL

logger = logging.getLogger(__name__)

# Defaults relative to project root
PROJECT_DIR = Path(__file__).parent.parent
DEFAULT_DATA_FILE = PROJECT_DIR / "data" / "fleet.yaml"
DEFAULT_STORAGE_DIR = PROJECT_DIR / "data" / "storage"


@dataclass
class FleetState:
    """Collaborators shared by every request, built once by create_app."""

    store: FleetStore
    storage: ObjectStorage
    relay: ChatRelay
    tz: Optional[object] = None


api = Blueprint("api", __name__)


def state() -> FleetState:
    return current_app.extensions["fleet"]


# =============================================================================
# Request/response helpers
# =============================================================================


def error_response(err):
    """JSON body and HTTP status for an Err result."""
    return jsonify({"error": err.message, "kind": err.kind.name.lower()}), err.kind.value


def query_date(name: str, default: Optional[date] = None) -> date:
    value = request.args.get(name)
    if not value:
        return default or date.today()
    try:
        return as_date(value)
    except ValueError:
        abort(400, description=f"Invalid date for '{name}': {value}")


def query_month(name: str = "month") -> date:
    """Accept 'YYYY-MM' or a full date; return the first of the month."""
    value = request.args.get(name)
    if not value:
        return date.today().replace(day=1)
    try:
        if len(value) == 7:
            year, month = value.split("-")
            return date(int(year), int(month), 1)
        return as_date(value).replace(day=1)
    except ValueError:
        abort(400, description=f"Invalid month: {value}")


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        abort(400, description="Expected a JSON object")
    return body


def actor() -> Optional[str]:
    """ID of the user making a change, for the activity log."""
    return request.headers.get("X-User-Id") or None


def bucket_json(bucket) -> dict:
    return {
        "name": bucket.label,
        "value": bucket.count,
        "range_start": bucket.range_start.isoformat(),
        "range_end": bucket.range_end.isoformat(),
    }


def events_json(events) -> list:
    return [mapping.event_to_row(e) for e in events]


def list_events():
    """All events, earliest first, or an error response."""
    result = state().store.events.list()
    if not result.is_ok:
        return None, error_response(result)
    return list(reversed(result.value)), None


# =============================================================================
# Dashboard
# =============================================================================


@api.route("/api/dashboard/stats")
def dashboard_stats_view():
    store = state().store
    vehicles = store.vehicles.list()
    users = store.users.list()
    events = store.events.list()
    for result in (vehicles, users, events):
        if not result.is_ok:
            return error_response(result)
    stats = dashboard_stats(vehicles.value, users.value, events.value)
    return jsonify(asdict(stats))


@api.route("/api/dashboard/chart")
def dashboard_chart():
    """Maintenance counts per bucket: ?range=week|month|year&date=YYYY-MM-DD"""
    try:
        granularity = Granularity.from_name(request.args.get("range", "month"))
    except ValueError as e:
        abort(400, description=str(e))
    reference = query_date("date")

    events, error = list_events()
    if error:
        return error

    report = build_report(events, reference, granularity, state().tz)
    return jsonify(
        {
            "range": granularity.name.lower(),
            "reference_date": reference.isoformat(),
            "buckets": [bucket_json(b) for b in report.buckets],
            "total": report.total,
            "skipped": report.skipped,
        }
    )


# =============================================================================
# Calendar
# =============================================================================


@api.route("/api/calendar")
def calendar_view():
    """Every day of a month with the events starting on it: ?month=YYYY-MM"""
    anchor = query_month()
    events, error = list_events()
    if error:
        return error

    days = calendar_month(events, anchor, state().tz)
    return jsonify(
        {
            "month": anchor.strftime("%Y-%m"),
            "days": [
                {"date": day.isoformat(), "events": events_json(day_events)}
                for day, day_events in days
            ],
        }
    )


@api.route("/api/calendar/day")
def calendar_day():
    day = query_date("date")
    events, error = list_events()
    if error:
        return error
    return jsonify({"date": day.isoformat(), "events": events_json(events_on_day(events, day, state().tz))})


# =============================================================================
# Maintenance events
# =============================================================================


@api.route("/api/maintenance", methods=["GET"])
def maintenance_list():
    args = request.args
    try:
        event_filter = EventFilter(
            vehicle_id=args.get("vehicle_id") or None,
            status=MaintenanceStatus(args["status"]) if args.get("status") else None,
            type=MaintenanceType(args["type"]) if args.get("type") else None,
            service_provider_id=args.get("service_provider_id") or None,
            start_from=as_date(args["start_from"]) if args.get("start_from") else None,
            start_to=as_date(args["start_to"]) if args.get("start_to") else None,
            search=args.get("search") or None,
        )
    except ValueError as e:
        abort(400, description=str(e))

    result = state().store.events.list(event_filter)
    if not result.is_ok:
        return error_response(result)
    return jsonify(events_json(result.value))


@api.route("/api/maintenance", methods=["POST"])
def maintenance_create():
    body = json_body()
    try:
        event = mapping.event_from_row(body)
    except KeyError as e:
        abort(400, description=f"Missing field: {e.args[0]}")
    except ValueError as e:
        abort(400, description=str(e))

    result = state().store.events.insert(event, actor=actor() or event.created_by)
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.event_to_row(result.value)), 201


@api.route("/api/maintenance/<event_id>", methods=["GET"])
def maintenance_detail(event_id: str):
    result = state().store.events.get_by_id(event_id)
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.event_to_row(result.value))


@api.route("/api/maintenance/<event_id>", methods=["PATCH"])
def maintenance_update(event_id: str):
    result = state().store.events.update(event_id, json_body(), actor=actor())
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.event_to_row(result.value))


@api.route("/api/maintenance/<event_id>", methods=["DELETE"])
def maintenance_delete(event_id: str):
    result = state().store.events.delete(event_id, actor=actor())
    if not result.is_ok:
        return error_response(result)
    return "", 204


# =============================================================================
# Directories
# =============================================================================


@api.route("/api/vehicles", methods=["GET"])
def vehicle_list():
    result = state().store.vehicles.list()
    if not result.is_ok:
        return error_response(result)
    return jsonify([mapping.vehicle_to_row(v) for v in result.value])


@api.route("/api/vehicles", methods=["POST"])
def vehicle_create():
    try:
        vehicle = mapping.vehicle_from_row(json_body())
    except KeyError as e:
        abort(400, description=f"Missing field: {e.args[0]}")
    except ValueError as e:
        abort(400, description=str(e))

    result = state().store.vehicles.insert(vehicle, actor=actor())
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.vehicle_to_row(result.value)), 201


@api.route("/api/vehicles/<vehicle_id>", methods=["GET"])
def vehicle_detail(vehicle_id: str):
    result = state().store.vehicles.get_by_id(vehicle_id)
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.vehicle_to_row(result.value))


@api.route("/api/vehicles/<vehicle_id>", methods=["PATCH"])
def vehicle_update(vehicle_id: str):
    result = state().store.vehicles.update(vehicle_id, json_body(), actor=actor())
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.vehicle_to_row(result.value))


@api.route("/api/vehicles/<vehicle_id>", methods=["DELETE"])
def vehicle_delete(vehicle_id: str):
    result = state().store.vehicles.delete(vehicle_id, actor=actor())
    if not result.is_ok:
        return error_response(result)
    return "", 204


@api.route("/api/vehicles/<vehicle_id>/timeline")
def vehicle_timeline_view(vehicle_id: str):
    """Maintenance history of one vehicle, newest first."""
    vehicle = state().store.vehicles.get_by_id(vehicle_id)
    if not vehicle.is_ok:
        return error_response(vehicle)
    events, error = list_events()
    if error:
        return error
    return jsonify(events_json(vehicle_timeline(events, vehicle_id, state().tz)))


@api.route("/api/users", methods=["GET"])
def user_list():
    result = state().store.users.list()
    if not result.is_ok:
        return error_response(result)
    users = result.value
    role = request.args.get("role")
    if role:
        users = [u for u in users if u.role.value == role]
    return jsonify([mapping.user_to_row(u) for u in users])


@api.route("/api/users", methods=["POST"])
def user_create():
    try:
        user = mapping.user_from_row(json_body())
    except KeyError as e:
        abort(400, description=f"Missing field: {e.args[0]}")
    except ValueError as e:
        abort(400, description=str(e))

    result = state().store.users.insert(user, actor=actor())
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.user_to_row(result.value)), 201


@api.route("/api/users/<user_id>", methods=["GET"])
def user_detail(user_id: str):
    result = state().store.users.get_by_id(user_id)
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.user_to_row(result.value))


@api.route("/api/users/<user_id>", methods=["PATCH"])
def user_update(user_id: str):
    result = state().store.users.update(user_id, json_body(), actor=actor())
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.user_to_row(result.value))


@api.route("/api/users/<user_id>", methods=["DELETE"])
def user_delete(user_id: str):
    result = state().store.users.delete(user_id, actor=actor())
    if not result.is_ok:
        return error_response(result)
    return "", 204


@api.route("/api/departments")
def department_list():
    result = state().store.departments.list()
    if not result.is_ok:
        return error_response(result)
    return jsonify([mapping.department_to_row(d) for d in result.value])


@api.route("/api/service-providers", methods=["GET"])
def provider_list():
    result = state().store.service_providers.list()
    if not result.is_ok:
        return error_response(result)
    return jsonify([mapping.provider_to_row(p) for p in result.value])


@api.route("/api/service-providers", methods=["POST"])
def provider_create():
    try:
        provider = mapping.provider_from_row(json_body())
    except KeyError as e:
        abort(400, description=f"Missing field: {e.args[0]}")

    result = state().store.service_providers.insert(provider, actor=actor())
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.provider_to_row(result.value)), 201


@api.route("/api/service-providers/<provider_id>", methods=["GET"])
def provider_detail(provider_id: str):
    result = state().store.service_providers.get_by_id(provider_id)
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.provider_to_row(result.value))


@api.route("/api/service-providers/<provider_id>", methods=["PATCH"])
def provider_update(provider_id: str):
    result = state().store.service_providers.update(provider_id, json_body(), actor=actor())
    if not result.is_ok:
        return error_response(result)
    return jsonify(mapping.provider_to_row(result.value))


@api.route("/api/service-providers/<provider_id>", methods=["DELETE"])
def provider_delete(provider_id: str):
    result = state().store.service_providers.delete(provider_id, actor=actor())
    if not result.is_ok:
        return error_response(result)
    return "", 204


@api.route("/api/activity")
def activity_list():
    """Activity log page: ?page=0&per_page=4"""
    page = request.args.get("page", 0, type=int)
    per_page = request.args.get("per_page", 4, type=int)
    result = state().store.activity_logs.page(page, per_page)
    if not result.is_ok:
        return error_response(result)
    logs, total = result.value
    return jsonify(
        {
            "page": page,
            "per_page": per_page,
            "total": total,
            "logs": [mapping.activity_to_row(log) for log in logs],
        }
    )


# =============================================================================
# Object storage
# =============================================================================


@api.route("/api/storage", methods=["GET"])
def storage_list():
    result = state().storage.list(request.args.get("prefix", ""))
    if not result.is_ok:
        return error_response(result)
    return jsonify([asdict(ref) for ref in result.value])


@api.route("/api/storage/<path:key>", methods=["POST"])
def storage_upload(key: str):
    """Upload a file (multipart 'file' field or raw body). ?upsert=true overwrites."""
    upload = request.files.get("file")
    data = upload.read() if upload else request.get_data()
    if not data:
        abort(400, description="No file data")
    upsert = request.args.get("upsert", "").lower() == "true"

    result = state().storage.upload(key, data, upsert=upsert)
    if not result.is_ok:
        return error_response(result)
    return jsonify({"path": key, "public_url": result.value}), 201


@api.route("/api/storage", methods=["DELETE"])
def storage_remove():
    paths = json_body().get("paths")
    if not isinstance(paths, list):
        abort(400, description="Expected 'paths' list")
    result = state().storage.remove(paths)
    if not result.is_ok:
        return error_response(result)
    return jsonify({"removed": result.value})


@api.route("/storage/<path:key>")
def storage_serve(key: str):
    return send_from_directory(state().storage.root.resolve(), key)


# =============================================================================
# Chat relay
# =============================================================================


@api.route("/.netlify/functions/chat-gemini", methods=["POST"])
@api.route("/api/chat", methods=["POST"])
def chat():
    """Forward a chat request to the hosted model and reshape the reply."""
    status, body = state().relay.complete(request.get_json(silent=True) or {})
    return jsonify(body), status


# =============================================================================
# Application factory
# =============================================================================


def create_app(config: Optional[dict] = None) -> Flask:
    """
    Build the app and its shared state.

    Settings come from environment variables and can be overridden
    by `config` (tests pass temporary paths this way).
    """
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod"),
        FLEET_DATA_FILE=os.environ.get("FLEET_DATA_FILE", str(DEFAULT_DATA_FILE)),
        FLEET_STORAGE_DIR=os.environ.get("FLEET_STORAGE_DIR", str(DEFAULT_STORAGE_DIR)),
        FLEET_STORAGE_URL=os.environ.get("FLEET_STORAGE_URL", "/storage"),
        FLEET_TIMEZONE=os.environ.get("FLEET_TIMEZONE"),
        HF_API_KEY=os.environ.get("HF_API_KEY"),
        CHAT_MODEL=os.environ.get("CHAT_MODEL", DEFAULT_MODEL),
    )
    if config:
        app.config.update(config)

    zone = None
    if app.config["FLEET_TIMEZONE"]:
        zone = dateutil_tz.gettz(app.config["FLEET_TIMEZONE"])
        if zone is None:
            raise ValueError(f"Unknown FLEET_TIMEZONE: {app.config['FLEET_TIMEZONE']}")

    app.extensions["fleet"] = FleetState(
        store=FleetStore(app.config["FLEET_DATA_FILE"]),
        storage=ObjectStorage(app.config["FLEET_STORAGE_DIR"], app.config["FLEET_STORAGE_URL"]),
        relay=ChatRelay(app.config["HF_API_KEY"], model=app.config["CHAT_MODEL"]),
        tz=zone,
    )
    app.register_blueprint(api)

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description, "kind": e.name.lower()}), e.code

    logger.info("Fleet data file: %s", app.config["FLEET_DATA_FILE"])
    return app


app = create_app()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
