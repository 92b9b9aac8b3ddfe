"""
pivotscan/filters.py

Row-level include / exclude predicates.

A FilterSpec holds allow-lists (``include``) and deny-lists (``exclude``)
for values of a single kind. A FilterSet pairs one text spec with one
numeric spec; the in-memory path uses both, CSV scans usually only need
the text one.

Usage:
    spec = FilterSpec(include={"CARRIER": ["UA", "AA"]},
                      exclude={"DEST_COUNTRY": ["US"]})
    passes(row, spec)

    fs = FilterSet.build(include={"CARRIER": ["UA"]},
                         numeric_exclude={"PASSENGERS": [0]})
    fs.passes(row)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, model_validator

from .models import Row, ValueKind, kind_of

logger = logging.getLogger(__name__)


class FilterSpec(BaseModel):
    """Per-field allowed / forbidden values of one ValueKind."""

    model_config = ConfigDict(frozen=True)

    kind: ValueKind = ValueKind.TEXT
    include: dict[str, frozenset[Any]] = {}
    exclude: dict[str, frozenset[Any]] = {}

    @model_validator(mode="after")
    def check_value_kinds(self) -> "FilterSpec":
        for label, mapping in (("include", self.include), ("exclude", self.exclude)):
            for field_name, values in mapping.items():
                for v in values:
                    if kind_of(v) is not self.kind:
                        raise ValueError(
                            f"{label}[{field_name!r}] holds {v!r}; "
                            f"a {self.kind.value} filter only accepts {self.kind.value} values"
                        )
        overlap = sorted(self.include.keys() & self.exclude.keys())
        if overlap:
            # both predicates still run, so exclude wins when they disagree
            logger.warning(
                "%s filter names %s in both include and exclude", self.kind.value, overlap,
            )
        return self

    @property
    def is_empty(self) -> bool:
        return not self.include and not self.exclude

    @property
    def fields(self) -> set[str]:
        return set(self.include) | set(self.exclude)


def passes(row: Row, spec: FilterSpec) -> bool:
    """
    Return True if ``row`` satisfies every predicate in ``spec``.

    Include fields must hold an allowed value, exclude fields must not hold
    a forbidden one; the first failure short-circuits. Raises
    TypeMismatchError if a filtered field holds a value of another kind.
    """
    for field_name, allowed in spec.include.items():
        if row.value(field_name, spec.kind) not in allowed:
            return False
    for field_name, forbidden in spec.exclude.items():
        if row.value(field_name, spec.kind) in forbidden:
            return False
    return True


class FilterSet(BaseModel):
    """A text FilterSpec and a numeric FilterSpec applied together."""

    model_config = ConfigDict(frozen=True)

    text: FilterSpec = FilterSpec(kind=ValueKind.TEXT)
    numeric: FilterSpec = FilterSpec(kind=ValueKind.NUMERIC)

    @model_validator(mode="after")
    def check_slot_kinds(self) -> "FilterSet":
        if self.text.kind is not ValueKind.TEXT:
            raise ValueError("FilterSet.text must be a text-kind FilterSpec")
        if self.numeric.kind is not ValueKind.NUMERIC:
            raise ValueError("FilterSet.numeric must be a numeric-kind FilterSpec")
        return self

    @classmethod
    def build(
        cls,
        include: Mapping[str, Any] | None = None,
        exclude: Mapping[str, Any] | None = None,
        numeric_include: Mapping[str, Any] | None = None,
        numeric_exclude: Mapping[str, Any] | None = None,
    ) -> "FilterSet":
        return cls(
            text=FilterSpec(
                kind=ValueKind.TEXT,
                include=dict(include or {}),
                exclude=dict(exclude or {}),
            ),
            numeric=FilterSpec(
                kind=ValueKind.NUMERIC,
                include=dict(numeric_include or {}),
                exclude=dict(numeric_exclude or {}),
            ),
        )

    @classmethod
    def coerce(cls, filters: "FilterSet | FilterSpec | None") -> "FilterSet":
        """Accept a FilterSet, a single FilterSpec of either kind, or None."""
        if filters is None:
            return cls()
        if isinstance(filters, FilterSet):
            return filters
        if isinstance(filters, FilterSpec):
            if filters.kind is ValueKind.TEXT:
                return cls(text=filters)
            return cls(numeric=filters)
        raise TypeError(f"expected FilterSet or FilterSpec, got {type(filters).__name__}")

    @property
    def is_empty(self) -> bool:
        return self.text.is_empty and self.numeric.is_empty

    @property
    def fields(self) -> set[str]:
        return self.text.fields | self.numeric.fields

    def passes(self, row: Row) -> bool:
        # text-include, text-exclude, numeric-include, numeric-exclude
        return passes(row, self.text) and passes(row, self.numeric)
