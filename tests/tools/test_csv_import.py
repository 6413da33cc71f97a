"""Tests for schemadb.tools.csv_import."""

from __future__ import annotations

import pytest

from schemadb.core.errors import QueryError, SchemaError
from schemadb.tools.csv_import import import_csv


@pytest.fixture
def write_csv(tmp_path):
    def _write(text: str, name: str = "data.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


def names(db):
    return db.get_column("SELECT name FROM users ORDER BY id")


class TestHeaders:
    def test_same_named_columns(self, db, write_csv):
        path = write_csv("name,email,Age\nFred,f@x,30\nAnn,,\n")
        assert import_csv(db, "users", path) == [1, 2]
        assert db.get_rows("SELECT name, email, Age FROM users ORDER BY id") == [
            {"name": "Fred", "email": "f@x", "Age": 30},
            {"name": "Ann", "email": "", "Age": 0},
        ]

    def test_transforms(self, db, write_csv):
        path = write_csv("Full Name,E-Mail,Years\nfred,F@X,41\n")
        import_csv(
            db,
            "users",
            path,
            transform={
                "name": lambda row: row["Full Name"].title(),
                "email": ["mail", "E-Mail"],
                "Age": 2,
            },
        )
        assert db.get_row("SELECT name, email, Age FROM users") == {"name": "Fred", "email": "F@X", "Age": 41}

    def test_header_transform(self, db, write_csv):
        path = write_csv("who\nFred\n")
        import_csv(db, "users", path, transform={"name": "who"})
        assert names(db) == ["Fred"]

    def test_unmatched_aliases_leave_column_out(self, db, write_csv):
        path = write_csv("name\nFred\n")
        import_csv(db, "users", path, transform={"email": ["mail", "E-Mail"]})
        assert db.get_one("SELECT email FROM users") is None

    def test_missing_header(self, db, write_csv):
        path = write_csv("who\nFred\n")
        with pytest.raises(SchemaError, match="'nobody' not found"):
            import_csv(db, "users", path, transform={"name": "nobody"})

    def test_blank_lines_skipped(self, db, write_csv):
        path = write_csv("name\nFred\n\nAnn\n")
        assert len(import_csv(db, "users", path)) == 2


class TestWithoutHeaders:
    def test_indexes_and_callables(self, db, write_csv):
        path = write_csv("x,Fred,f@x\ny,Ann,a@x\n")
        import_csv(
            db,
            "users",
            path,
            transform={"name": 1, "email": lambda line: line[2].upper()},
            has_headers=False,
        )
        assert db.get_rows("SELECT name, email FROM users ORDER BY id") == [
            {"name": "Fred", "email": "F@X"},
            {"name": "Ann", "email": "A@X"},
        ]

    def test_index_out_of_range(self, db, write_csv):
        path = write_csv("Fred\n")
        with pytest.raises(SchemaError, match="CSV column 3"):
            import_csv(db, "users", path, transform={"name": 3}, has_headers=False)


class TestAtomicity:
    def test_failure_rolls_back_whole_file(self, db, write_csv):
        path = write_csv("id,name\n1,a\n2,b\n1,c\n")
        with pytest.raises(QueryError, match="UNIQUE"):
            import_csv(db, "users", path)
        assert db.get_one("SELECT COUNT(*) FROM users") == 0

    def test_composite_key_table(self, db, write_csv):
        path = write_csv("a,b,note\n1,1,x\n1,2,y\n")
        assert import_csv(db, "pairs", path) == [None, None]
        assert db.get_one("SELECT COUNT(*) FROM pairs") == 2
