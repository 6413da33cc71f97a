"""Tests for schemadb.core.coercion — write/read coercion and bind kinds."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from schemadb.core.coercion import bind_kind, coerce_for_read, coerce_for_write, coerce_row
from schemadb.core.enums import BindKind, LogicalType
from schemadb.core.errors import CoercionError
from schemadb.core.schema import ColumnDescriptor


def col(logical: LogicalType, nullable: bool = False, default=None) -> ColumnDescriptor:
    return ColumnDescriptor("c", logical, logical.value, is_nullable=nullable, default_value=default)


class TestWriteEmptyString:
    @pytest.mark.parametrize("logical", [LogicalType.INT, LogicalType.FLOAT])
    def test_numeric_not_null_becomes_zero(self, logical):
        assert coerce_for_write("", col(logical)) == 0

    def test_bool_not_null_becomes_false(self):
        assert coerce_for_write("", col(LogicalType.BOOL)) is False

    @pytest.mark.parametrize(
        "logical", [LogicalType.INT, LogicalType.FLOAT, LogicalType.BOOL, LogicalType.DATE, LogicalType.ENUM]
    )
    def test_nullable_becomes_none(self, logical):
        assert coerce_for_write("", col(logical, nullable=True)) is None

    def test_datetime_not_null_becomes_now(self):
        value = coerce_for_write("", col(LogicalType.DATETIME))
        assert isinstance(value, datetime)
        assert abs(datetime.now() - value) < timedelta(seconds=5)

    def test_date_not_null_becomes_today(self):
        value = coerce_for_write("", col(LogicalType.DATE))
        assert value == date.today()

    @pytest.mark.parametrize("nullable", [False, True])
    def test_text_keeps_empty_string(self, nullable):
        assert coerce_for_write("", col(LogicalType.TEXT, nullable=nullable)) == ""

    def test_enum_not_null_has_no_empty_value(self):
        assert coerce_for_write("", col(LogicalType.ENUM)) == ""


class TestWriteNull:
    @pytest.mark.parametrize(
        ("logical", "expected"),
        [
            (LogicalType.INT, 0),
            (LogicalType.FLOAT, 0),
            (LogicalType.BOOL, False),
            (LogicalType.TEXT, ""),
        ],
    )
    def test_not_null_empty_value(self, logical, expected):
        assert coerce_for_write(None, col(logical)) == expected

    def test_default_wins(self):
        assert coerce_for_write(None, col(LogicalType.INT, default=18)) == 18

    def test_nullable_stays_none(self):
        assert coerce_for_write(None, col(LogicalType.INT, nullable=True)) is None

    @pytest.mark.parametrize("logical", [LogicalType.DATE, LogicalType.DATETIME, LogicalType.ENUM])
    def test_no_empty_value_falls_through(self, logical):
        assert coerce_for_write(None, col(logical)) is None


class TestWriteTemporal:
    def test_timestamp_on_datetime(self):
        assert coerce_for_write(1700000000, col(LogicalType.DATETIME)) == datetime(2023, 11, 14, 22, 13, 20)

    def test_timestamp_on_date(self):
        assert coerce_for_write(1700000000, col(LogicalType.DATE)) == date(2023, 11, 14)

    def test_fractional_timestamp(self):
        assert coerce_for_write(0.25, col(LogicalType.DATETIME)).microsecond == 250000

    def test_string_date_only(self):
        value = coerce_for_write("03/05/2024", col(LogicalType.DATETIME))
        assert value == date(2024, 3, 5)
        assert not isinstance(value, datetime)

    def test_string_datetime(self):
        assert coerce_for_write("2024-03-05 10:30", col(LogicalType.DATETIME)) == datetime(2024, 3, 5, 10, 30)

    def test_unparseable_string(self):
        with pytest.raises(CoercionError) as exc_info:
            coerce_for_write("someday", col(LogicalType.DATE))
        assert isinstance(exc_info.value, TypeError)
        assert exc_info.value.context.column == "c"

    def test_temporal_passthrough(self):
        moment = datetime(2024, 1, 1, 12)
        assert coerce_for_write(moment, col(LogicalType.DATETIME)) is moment

    def test_bool_is_not_a_timestamp(self):
        assert coerce_for_write(True, col(LogicalType.DATE)) is True


class TestWriteRejectsComposites:
    @pytest.mark.parametrize("value", [[1], (1,), {"a": 1}, {1}, object()])
    def test_composite(self, value):
        with pytest.raises(TypeError):
            coerce_for_write(value, col(LogicalType.TEXT))

    def test_passthrough_scalars(self):
        assert coerce_for_write("x", col(LogicalType.TEXT)) == "x"
        assert coerce_for_write(5, col(LogicalType.INT)) == 5
        assert coerce_for_write(Decimal("1.5"), col(LogicalType.FLOAT)) == Decimal("1.5")


class TestRead:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(1, True), (0, False), ("1", True), ("0", False), (b"\x01", True), (b"\x00", False), ("false", False)],
    )
    def test_bool(self, raw, expected):
        assert coerce_for_read(raw, LogicalType.BOOL) is expected

    def test_int(self):
        assert coerce_for_read("42", LogicalType.INT) == 42
        assert coerce_for_read("4.0", LogicalType.INT) == 4
        assert coerce_for_read(Decimal("7"), LogicalType.INT) == 7

    def test_float(self):
        assert coerce_for_read("2.5", LogicalType.FLOAT) == 2.5
        assert coerce_for_read(Decimal("2.5"), LogicalType.FLOAT) == 2.5

    @pytest.mark.parametrize("logical", [LogicalType.INT, LogicalType.FLOAT])
    def test_non_numeric_returned_as_stored(self, logical):
        assert coerce_for_read("unknown", logical) == "unknown"

    def test_infinite_int_returned_as_stored(self):
        assert coerce_for_read("inf", LogicalType.INT) == "inf"

    def test_date_string(self):
        assert coerce_for_read("2024-03-05", LogicalType.DATE) == date(2024, 3, 5)

    def test_datetime_string(self):
        assert coerce_for_read("2024-03-05 10:30:00", LogicalType.DATETIME) == datetime(2024, 3, 5, 10, 30)

    def test_date_only_string_in_datetime_column(self):
        value = coerce_for_read("2024-03-05", LogicalType.DATETIME)
        assert value == date(2024, 3, 5)
        assert not isinstance(value, datetime)

    def test_numeric_timestamp(self):
        assert coerce_for_read(0, LogicalType.DATETIME) == datetime(1970, 1, 1)

    def test_driver_temporal_passthrough(self):
        value = date(2024, 3, 5)
        assert coerce_for_read(value, LogicalType.DATE) is value

    def test_text_and_none(self):
        assert coerce_for_read("abc", LogicalType.TEXT) == "abc"
        assert coerce_for_read(None, LogicalType.INT) is None

    def test_bad_date(self):
        with pytest.raises(CoercionError):
            coerce_for_read("garbage", LogicalType.DATE)


class TestCoerceRow:
    def test_skips_unknown_and_null(self):
        row = {"n": "5", "alias": "5", "flag": None}
        coerced = coerce_row(row, {"n": LogicalType.INT, "flag": LogicalType.BOOL})
        assert coerced == {"n": 5, "alias": "5", "flag": None}
        assert coerced is row


class TestBindKind:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, (None, BindKind.NULL)),
            (True, (True, BindKind.BOOL)),
            (7, (7, BindKind.INT)),
            (1.25, ("1.25", BindKind.STR)),
            ("x", ("x", BindKind.STR)),
            (date(2024, 3, 5), ("2024-03-05", BindKind.STR)),
            (datetime(2024, 3, 5, 1, 2, 3), ("2024-03-05 01:02:03", BindKind.STR)),
            (Decimal("1.10"), ("1.10", BindKind.STR)),
            (b"\x00\x01", (b"\x00\x01", BindKind.STR)),
        ],
    )
    def test_kinds(self, value, expected):
        assert bind_kind(value) == expected
