"""
pivotscan/errors.py

Exception hierarchy for the pivot engine.

Every structural problem with the input aborts the current aggregation call;
rows are never skipped silently. Each error also derives from the matching
builtin (KeyError, TypeError, ...) so generic handlers keep working.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .aggregation.store import AccumulatorStore


class PivotError(Exception):
    """Base class for every error raised by pivotscan."""


class MissingFieldError(PivotError, KeyError):
    """A row lacks one or more fields named by the grouping, measured or filter config."""

    def __init__(self, fields: Iterable[str], where: str = "row") -> None:
        self.fields: tuple[str, ...] = tuple(sorted(fields))
        self.where = where
        super().__init__(f"{where} is missing field(s): {', '.join(self.fields)}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class TypeMismatchError(PivotError, TypeError):
    """A field holds a text value where a numeric one is required, or vice versa."""

    def __init__(self, field: str, expected: str, actual: str, detail: str = "") -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        msg = f"field {field!r} holds a {actual} value, expected {expected}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class RowParseError(TypeMismatchError):
    """A numeric column cell in a delimited file could not be parsed."""

    def __init__(self, field: str, raw: str, line: int) -> None:
        self.raw = raw
        self.line = line
        super().__init__(field, "numeric", "text", detail=f"line {line}: {raw!r}")


class EmptyAccumulatorError(PivotError, ZeroDivisionError):
    """A mean was requested for an accumulator that never received a value."""

    def __init__(self, key: str, field: str) -> None:
        self.key = key
        self.field = field
        super().__init__(f"accumulator {key!r}/{field!r} has count 0; mean is undefined")


class TableWriteError(PivotError, OSError):
    """
    Opening or writing the output table failed.

    The aggregation itself succeeded: the finalized store is attached as
    ``store`` so the caller can still use it.
    """

    def __init__(self, path: str, cause: OSError, store: AccumulatorStore | None = None) -> None:
        self.path = path
        self.cause = cause
        self.store = store
        super().__init__(f"could not write pivot table to {path!r}: {cause}")

    def __str__(self) -> str:
        return str(self.args[0])
