"""JSON schema checks for fleet data files and single rows."""
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional

import yaml
from jsonschema import ValidationError, validate

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"

# Table name -> row definition in schema.yaml
ROW_DEFINITIONS = {
    "vehicles": "vehicle",
    "users": "user",
    "departments": "department",
    "service_providers": "serviceProvider",
    "maintenance_events": "maintenanceEvent",
    "activity_logs": "activityLog",
}


def normalize_dates(value: Any) -> Any:
    """Turn dates YAML parsed from unquoted scalars back into ISO strings."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: normalize_dates(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize_dates(v) for v in value]
    return value


@lru_cache(maxsize=1)
def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def _describe(e: ValidationError) -> str:
    if e.path:
        return f"{e.message} (at {'.'.join(str(p) for p in e.path)})"
    return e.message


def validate_row(table: str, row: dict) -> Optional[str]:
    """Check one row against its table definition. Returns an error message or None."""
    definition = load_schema()["$defs"][ROW_DEFINITIONS[table]]
    try:
        validate(instance=row, schema=definition)
    except ValidationError as e:
        return _describe(e)
    return None


def validate_data(data: dict, schema: Optional[dict] = None) -> List[str]:
    """Check a whole data file. Returns list of errors."""
    try:
        validate(instance=data, schema=schema or load_schema())
    except ValidationError as e:
        return [f"Schema validation error: {_describe(e)}"]
    return []
