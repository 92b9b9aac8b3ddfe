"""
tests/test_models.py

Tests for models.py: the text / numeric Row mapping.
"""

from __future__ import annotations

import pytest

from pivotscan.errors import MissingFieldError, TypeMismatchError
from pivotscan.models import Row, ValueKind, kind_of


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestRowConstruction:

    def test_text_and_numeric_values(self):
        row = Row({"CARRIER": "UA", "PASSENGERS": 100.5})
        assert row["CARRIER"] == "UA"
        assert row["PASSENGERS"] == 100.5

    def test_ints_are_widened_to_float(self):
        row = Row({"SEATS": 150})
        assert row["SEATS"] == 150.0
        assert isinstance(row["SEATS"], float)

    def test_keyword_construction(self):
        row = Row(CARRIER="AA", SEATS=3)
        assert dict(row) == {"CARRIER": "AA", "SEATS": 3.0}

    @pytest.mark.parametrize("bad", [True, None, [1, 2], {"a": 1}])
    def test_unsupported_value_rejected(self, bad):
        with pytest.raises(TypeMismatchError):
            Row({"FIELD": bad})

    def test_of_returns_existing_row(self):
        row = Row({"A": "x"})
        assert Row.of(row) is row

    def test_of_converts_plain_mapping(self):
        row = Row.of({"A": "x", "B": 2})
        assert isinstance(row, Row)
        assert row.number("B") == 2.0

    def test_equals_plain_dict(self):
        assert Row({"A": "x", "B": 1}) == {"A": "x", "B": 1.0}


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------

class TestRowImmutability:

    def test_item_assignment_fails(self):
        row = Row({"A": "x"})
        with pytest.raises(TypeError):
            row["A"] = "y"  # type: ignore[index]

    def test_attribute_assignment_fails(self):
        row = Row({"A": "x"})
        with pytest.raises(AttributeError):
            row.extra = 1

    def test_rows_are_hashable(self):
        assert len({Row({"A": "x"}), Row({"A": "x"})}) == 1


# ---------------------------------------------------------------------------
# Typed access
# ---------------------------------------------------------------------------

class TestRowAccessors:

    def test_kind(self):
        row = Row({"CARRIER": "UA", "PASSENGERS": 1})
        assert row.kind("CARRIER") is ValueKind.TEXT
        assert row.kind("PASSENGERS") is ValueKind.NUMERIC

    def test_text_on_numeric_field_raises(self):
        row = Row({"PASSENGERS": 10})
        with pytest.raises(TypeMismatchError) as exc:
            row.text("PASSENGERS")
        assert exc.value.field == "PASSENGERS"
        assert exc.value.expected == "text"
        assert exc.value.actual == "numeric"

    def test_number_on_text_field_raises(self):
        row = Row({"CARRIER": "UA"})
        with pytest.raises(TypeMismatchError):
            row.number("CARRIER")

    def test_type_mismatch_is_a_type_error(self):
        with pytest.raises(TypeError):
            Row({"CARRIER": "UA"}).number("CARRIER")

    def test_missing_field_raises(self):
        row = Row({"CARRIER": "UA"})
        with pytest.raises(MissingFieldError) as exc:
            row.text("ORIGIN")
        assert exc.value.fields == ("ORIGIN",)

    def test_membership_and_get_still_work(self):
        row = Row({"CARRIER": "UA"})
        assert "CARRIER" in row
        assert "ORIGIN" not in row
        assert row.get("ORIGIN") is None

    def test_require_lists_every_missing_field(self):
        row = Row({"B": "x"})
        with pytest.raises(MissingFieldError) as exc:
            row.require(["Z", "B", "A"])
        assert exc.value.fields == ("A", "Z")
        assert "A, Z" in str(exc.value)

    def test_require_passes_when_complete(self):
        Row({"A": "x", "B": 1}).require(["A", "B"])

    def test_require_kinds_passes(self):
        Row({"A": "x", "B": 1}).require_kinds([("A", ValueKind.TEXT), ("B", ValueKind.NUMERIC)])

    def test_require_kinds_reports_mismatch(self):
        row = Row({"A": "x", "B": "1"})
        with pytest.raises(TypeMismatchError) as exc:
            row.require_kinds([("A", ValueKind.TEXT), ("B", ValueKind.NUMERIC)])
        assert exc.value.field == "B"

    def test_of_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            Row.of(["UA", 1])  # type: ignore[arg-type]


class TestKindOf:

    @pytest.mark.parametrize(
        "value, expected",
        [("x", ValueKind.TEXT), (1, ValueKind.NUMERIC), (1.5, ValueKind.NUMERIC),
         (False, None), (None, None), (b"x", None)],
    )
    def test_kind_of(self, value, expected):
        assert kind_of(value) is expected
