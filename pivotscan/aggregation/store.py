"""
aggregation/store.py

Accumulator   : running sum / count for one (group, measured field) pair
AccumulatorStore: composite key → {measured field → Accumulator}

Design:
  - Buckets are created explicitly by get_or_create(); every measured field
    gets its accumulator in the same step, so a key never exists with a
    partial set of fields.
  - fold() validates every measured value before touching any accumulator,
    so a row that fails half-way leaves the store unchanged.
  - Means are only valid after finalize(). merge() invalidates them again.
  - Iteration is always lexicographic by key.

Thread safety: NOT thread-safe. One store per aggregation call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

from ..errors import EmptyAccumulatorError
from ..models import Row

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Accumulator:
    """Running statistics for one measured field within one group."""

    sum: float = 0.0
    count: int = 0
    mean: float | None = None
    """None until finalize() runs."""

    def add(self, value: float) -> None:
        self.sum += value
        self.count += 1

    def finalize(self, key: str = "", field: str = "") -> float:
        if self.count == 0:
            raise EmptyAccumulatorError(key, field)
        self.mean = self.sum / self.count
        return self.mean

    def merge(self, other: "Accumulator") -> None:
        self.sum += other.sum
        self.count += other.count
        self.mean = None

    def as_dict(self) -> dict:
        return {"sum": self.sum, "count": self.count, "mean": self.mean}

    def __repr__(self) -> str:
        mean = "unset" if self.mean is None else f"{self.mean:g}"
        return f"Accumulator(sum={self.sum:g} count={self.count} mean={mean})"


Bucket = dict[str, Accumulator]


class AccumulatorStore:
    """
    Composite key → per-measured-field accumulators.

    Args:
        measured_fields: Fields to aggregate; also fixes output column order.
    """

    def __init__(self, measured_fields: Sequence[str]) -> None:
        if not measured_fields:
            raise ValueError("at least one measured field is required")
        if len(set(measured_fields)) != len(measured_fields):
            raise ValueError(f"duplicate measured fields: {list(measured_fields)}")
        self.measured_fields: tuple[str, ...] = tuple(measured_fields)
        self._buckets: dict[str, Bucket] = {}
        self.finalized = False

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def get_or_create(self, key: str) -> Bucket:
        """Return the bucket for ``key``, creating all its accumulators if absent."""
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = {name: Accumulator() for name in self.measured_fields}
            self._buckets[key] = bucket
            logger.debug("New group: %r (total groups: %d)", key, len(self._buckets))
        return bucket

    def fold(self, key: str, row: Row) -> None:
        """Add the row's measured values to the bucket for ``key``."""
        values = [row.number(name) for name in self.measured_fields]
        bucket = self.get_or_create(key)
        for name, value in zip(self.measured_fields, values):
            bucket[name].add(value)
        self.finalized = False

    def finalize(self) -> None:
        """Compute mean = sum / count for every accumulator."""
        for key, bucket in self._buckets.items():
            for name, acc in bucket.items():
                acc.finalize(key, name)
        self.finalized = True

    def merge(self, other: "AccumulatorStore") -> None:
        """
        Fold another store (e.g. from a separate row partition) into this one.

        Matching (key, field) pairs are summed; unseen keys are adopted.
        Means are cleared, so call finalize() again afterwards.
        """
        if other.measured_fields != self.measured_fields:
            raise ValueError(
                f"cannot merge stores with different measured fields: "
                f"{list(self.measured_fields)} vs {list(other.measured_fields)}"
            )
        for key, other_bucket in other._buckets.items():
            bucket = self.get_or_create(key)
            for name, acc in other_bucket.items():
                bucket[name].merge(acc)
        for bucket in self._buckets.values():
            for acc in bucket.values():
                acc.mean = None
        self.finalized = False

    # ------------------------------------------------------------------
    # Read access (always key-ordered)
    # ------------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __getitem__(self, key: str) -> Bucket:
        return self._buckets[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> list[str]:
        return sorted(self._buckets)

    def items(self) -> Iterator[tuple[str, Bucket]]:
        for key in self.keys():
            yield key, self._buckets[key]

    def as_dict(self) -> dict[str, dict[str, dict]]:
        """Plain nested dict: {key: {field: {"sum", "count", "mean"}}}."""
        return {
            key: {name: acc.as_dict() for name, acc in bucket.items()}
            for key, bucket in self.items()
        }

    def __repr__(self) -> str:
        return (
            f"AccumulatorStore(groups={len(self._buckets)} "
            f"fields={list(self.measured_fields)} finalized={self.finalized})"
        )
