"""
pivotscan/models.py

Row model shared by every stage of the engine.

A Row maps field names to values of exactly two kinds:
    text   : str
    numeric: float (ints are widened on construction)

Rows are immutable once built. Typed accessors raise MissingFieldError /
TypeMismatchError instead of returning a wrong-kind value, so the
aggregators never have to guess what a cell holds.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from typing import Union

from .errors import MissingFieldError, TypeMismatchError

Value = Union[str, float]


class ValueKind(str, Enum):
    TEXT    = "text"
    NUMERIC = "numeric"


def kind_of(value: object) -> ValueKind | None:
    """Return the ValueKind of a Python value, or None if it is neither kind."""
    if isinstance(value, str):
        return ValueKind.TEXT
    # bool is an int subclass but never a measurement
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return ValueKind.NUMERIC
    return None


class Row(Mapping):
    """
    Immutable field-name → value mapping.

    Build with ``Row({...})`` or ``Row.of(mapping)``; the latter returns an
    existing Row unchanged, which lets the aggregators accept plain dicts.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, object] | None = None, **kwargs: object) -> None:
        data: dict[str, Value] = {}
        for source in (values or {}, kwargs):
            for name, raw in source.items():
                kind = kind_of(raw)
                if kind is None:
                    raise TypeMismatchError(
                        str(name), "text or numeric", type(raw).__name__,
                    )
                data[str(name)] = raw if kind is ValueKind.TEXT else float(raw)
        object.__setattr__(self, "_values", data)

    @classmethod
    def of(cls, row: Mapping[str, object]) -> "Row":
        if isinstance(row, Row):
            return row
        if not isinstance(row, Mapping):
            raise TypeError(f"row must be a mapping of field name to value, got {type(row).__name__}")
        return cls(row)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, name: str) -> Value:
        try:
            return self._values[name]
        except KeyError:
            raise MissingFieldError([name]) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __setattr__(self, name, value):
        raise AttributeError("Row is immutable")

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        return f"Row({self._values!r})"

    # ------------------------------------------------------------------
    # Typed access
    # ------------------------------------------------------------------

    def kind(self, name: str) -> ValueKind:
        return kind_of(self[name])  # type: ignore[return-value]

    def value(self, name: str, kind: ValueKind) -> Value:
        """Return the value of ``name``, raising TypeMismatchError unless it is of ``kind``."""
        val = self[name]
        actual = kind_of(val)
        if actual is not kind:
            raise TypeMismatchError(name, kind.value, actual.value if actual else "unknown")
        return val

    def text(self, name: str) -> str:
        return self.value(name, ValueKind.TEXT)  # type: ignore[return-value]

    def number(self, name: str) -> float:
        return self.value(name, ValueKind.NUMERIC)  # type: ignore[return-value]

    def require(self, names: Iterable[str]) -> None:
        """Raise MissingFieldError listing every name in ``names`` this row lacks."""
        missing = [n for n in names if n not in self._values]
        if missing:
            raise MissingFieldError(missing)

    def require_kinds(self, expected: Iterable[tuple[str, ValueKind]]) -> None:
        """Raise TypeMismatchError on the first (name, kind) pair this row does not satisfy."""
        for name, kind in expected:
            self.value(name, kind)
