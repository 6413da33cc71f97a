"""Tests for schemadb.tools.codegen."""

from __future__ import annotations

import sys
import types
from dataclasses import fields
from datetime import date

import pytest

from schemadb.tools.codegen import class_name_for, field_name_for, generate_dataclass


def load(source: str, name: str):
    module = types.ModuleType("generated")
    sys.modules["generated"] = module
    exec(compile(source, "<generated>", "exec"), module.__dict__)
    return getattr(module, name)


class TestNames:
    @pytest.mark.parametrize(
        ("table", "expected"),
        [("users", "Users"), ("order_items", "OrderItems"), ("line-item", "LineItem"), ("2fa codes", "T2faCodes")],
    )
    def test_class_name(self, table, expected):
        assert class_name_for(table) == expected

    @pytest.mark.parametrize(
        ("column", "expected"),
        [("name", "name"), ("class", "class_"), ("my col", "my_col"), ("1st", "_1st")],
    )
    def test_field_name(self, column, expected):
        assert field_name_for(column) == expected


class TestGenerateDataclass:
    def test_users(self, db):
        source = generate_dataclass(db, "users")
        assert source.startswith("# Generated from the users table.\nfrom __future__ import annotations\n")
        assert "from datetime" not in source
        lines = source.splitlines()
        body = lines[lines.index("class Users:") + 1 :]
        assert body[0].startswith("    name: str ")
        assert "# TEXT NOT NULL" in body[0]
        assert any(line.startswith("    Age: int = 18 ") for line in body)

    def test_generated_class_is_a_row_type(self, db):
        Users = load(generate_dataclass(db, "users"), "Users")
        assert [f.name for f in fields(Users)] == ["name", "id", "email", "Age"]

        user = Users(name="Fred")
        db.insert("users", user)
        assert user.id == 1
        assert db.find_row("users", 1, row_type=Users) == Users(name="Fred", id=1, email=None, Age=18)

    def test_temporal_defaults(self, db):
        source = generate_dataclass(db, "typed", class_name="Typed")
        assert "from datetime import date, datetime" in source
        assert "due: date = date(2000, 1, 1)" in source
        assert "born: date | None = None" in source

        Typed = load(source, "Typed")
        row = Typed(flag=True, count=1, ratio=0.5, label="x")
        assert row.due == date(2000, 1, 1)
        db.insert("typed", row)
        assert db.find_row("typed", row.id, row_type=Typed) == row

    def test_expression_default_becomes_none(self, db):
        db.execute_and_close("CREATE TABLE events (id INTEGER PRIMARY KEY, at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP)")
        assert "at: datetime | None = None" in generate_dataclass(db, "events")

    def test_without_comments(self, db):
        source = generate_dataclass(db, "pairs", type_comments=False)
        class_body = source.split("class Pairs:\n", 1)[1]
        assert "#" not in class_body
        assert class_body.splitlines()[:2] == ["    a: int", "    b: int"]
