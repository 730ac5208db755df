#!/usr/bin/env python3
"""Tests for the departments seed CSV generator."""

import csv

from seed_departments import CSV_COLUMNS, DEFAULT_DEPARTMENTS, build_departments, main, write_csv


class TestBuildDepartments:
    """Tests for build_departments."""

    def test_one_per_default(self):
        """One department per default name."""
        departments = build_departments()
        assert [d.name for d in departments] == [name for name, _ in DEFAULT_DEPARTMENTS]

    def test_unique_ids_shared_timestamp(self):
        """Ids are unique and all rows share a timestamp."""
        departments = build_departments()
        assert len({d.id for d in departments}) == len(departments)
        assert len({d.created_at for d in departments}) == 1
        assert all(d.updated_at == d.created_at for d in departments)


class TestWriteCsv:
    """Tests for the CSV layout."""

    def test_header_unquoted_values_quoted(self, tmp_path):
        """Header is bare and values are quoted."""
        path = tmp_path / "departments.csv"
        write_csv(path, build_departments())
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "id,name,description,created_at,updated_at"
        assert lines[1].startswith('"')
        assert '"Administración"' in lines[1]
        assert len(lines) == 1 + len(DEFAULT_DEPARTMENTS)

    def test_readable_as_csv(self, tmp_path):
        """Output reads back with the csv module."""
        path = tmp_path / "departments.csv"
        write_csv(path, build_departments())
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert list(rows[0]) == CSV_COLUMNS
        assert rows[1]["description"] == "Departamento de Operaciones y Logística"


class TestMain:
    def test_writes_output(self, tmp_path, capsys):
        """main writes the file it is given."""
        output = tmp_path / "out.csv"
        assert main(["-o", str(output)]) == 0
        assert output.exists()
        assert f"{output} file generated" in capsys.readouterr().out
