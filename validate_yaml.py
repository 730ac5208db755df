#!/usr/bin/env python3
"""
Validate fleet YAML data files against the schema.

Unquoted dates and timestamps are read the same way the store reads them,
as ISO strings, so any file the store accepts passes here too.
"""
import sys
from pathlib import Path
from typing import Optional

import yaml

from fleet.validation import load_schema, normalize_dates, validate_data


def validate_fleet_file(filepath: Path, schema: Optional[dict] = None) -> list[str]:
    """Validate a single fleet data file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return ["Schema validation error: top level must be a mapping of tables"]

    errors.extend(validate_data(normalize_dates(data), schema))
    return errors


def main(argv=None):
    """Validate the given files, or every YAML file in data/."""
    schema = load_schema()
    args = sys.argv[1:] if argv is None else argv
    if args:
        yaml_files = [Path(a) for a in args]
    else:
        data_dir = Path(__file__).parent / "data"
        if not data_dir.exists():
            print(f"Error: data directory not found: {data_dir}")
            return 1
        yaml_files = list(data_dir.glob("*.yaml")) + list(data_dir.glob("*.yml"))

    if not yaml_files:
        print("Warning: No YAML files found")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_fleet_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
