"""
aggregation/keys.py

Composite grouping keys.

A row's key is the text of its grouping fields, in caller order, joined
with the separator (default "|"):

    {"CARRIER": "UA", "ORIGIN": "JFK"}, ["CARRIER", "ORIGIN"]  →  "UA|JFK"

Values are not escaped. A grouping value that itself contains the
separator can collide with another group; KeyDeriver logs that once per
call rather than rewriting the key, so output files stay comparable with
earlier runs.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ..config import settings
from ..models import Row

logger = logging.getLogger(__name__)

KeyFunc = Callable[[Row], str]


def derive_key(row: Row, grouping_fields: Sequence[str], separator: str | None = None) -> str:
    """
    Join the row's text values for ``grouping_fields`` with ``separator``.

    Raises TypeMismatchError if any grouping field is numeric; grouping is
    restricted to text fields.
    """
    if not grouping_fields:
        raise ValueError("at least one grouping field is required")
    sep = settings.KEY_SEPARATOR if separator is None else separator
    return sep.join(row.text(name) for name in grouping_fields)


def grouping_label(grouping_fields: Sequence[str], separator: str | None = None) -> str:
    """Header label for the key column, e.g. 'CARRIER|ORIGIN'."""
    sep = settings.KEY_SEPARATOR if separator is None else separator
    return sep.join(grouping_fields)


class KeyDeriver:
    """
    Callable key builder bound to one aggregation call.

    Wraps either ``derive_key`` or a caller-supplied ``key_func`` and warns
    the first time a grouping value contains the separator.
    """

    def __init__(
        self,
        grouping_fields: Sequence[str],
        separator: str | None = None,
        key_func: KeyFunc | None = None,
    ) -> None:
        if not grouping_fields:
            raise ValueError("at least one grouping field is required")
        self.grouping_fields = tuple(grouping_fields)
        self.separator = settings.KEY_SEPARATOR if separator is None else separator
        self._key_func = key_func
        self._collision_warned = False

    def __call__(self, row: Row) -> str:
        if self._key_func is not None:
            key = self._key_func(row)
            if not isinstance(key, str):
                raise TypeError(f"key_func must return str, got {type(key).__name__}")
            return key

        if not self._collision_warned:
            for name in self.grouping_fields:
                if self.separator in row.text(name):
                    logger.warning(
                        "Grouping value %r in field %r contains the key separator %r; "
                        "distinct groups may share a key",
                        row.text(name), name, self.separator,
                    )
                    self._collision_warned = True
                    break
        return derive_key(row, self.grouping_fields, self.separator)

    @property
    def label(self) -> str:
        return grouping_label(self.grouping_fields, self.separator)
