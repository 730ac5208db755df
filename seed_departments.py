#!/usr/bin/env python3
"""Write departments.csv with the default departments, ready for import."""

import argparse
import csv
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from fleet import Department

DEFAULT_DEPARTMENTS = [
    ("Administración", "Departamento de Administración y Finanzas"),
    ("Operaciones", "Departamento de Operaciones y Logística"),
    ("Recursos Humanos", "Departamento de Recursos Humanos"),
    ("Viceministerio Armas", "Viceministerio De Armas"),
    ("Direccion Tecnologia", "Direccion de Tecnologia y Comunicaciones"),
]

CSV_COLUMNS = ["id", "name", "description", "created_at", "updated_at"]


def build_departments() -> List[Department]:
    """Default departments with fresh ids and a shared timestamp."""
    now = datetime.now(timezone.utc).isoformat()
    return [
        Department(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        for name, description in DEFAULT_DEPARTMENTS
    ]


def write_csv(path: Path, departments: List[Department]) -> None:
    """Write departments: plain header, every value quoted."""
    with open(path, "w", newline="", encoding="utf-8") as fp:
        fp.write(",".join(CSV_COLUMNS) + "\n")
        writer = csv.writer(fp, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for d in departments:
            writer.writerow([d.id, d.name, d.description, d.created_at, d.updated_at])


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate the departments seed CSV")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("departments.csv"),
        help="Output file (default: departments.csv)",
    )
    args = parser.parse_args(argv)

    write_csv(args.output, build_departments())
    print(f"{args.output} file generated")
    return 0


if __name__ == "__main__":
    sys.exit(main())
