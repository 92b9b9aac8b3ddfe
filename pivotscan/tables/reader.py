"""
tables/reader.py

Delimited-file row source.

iter_csv_rows() is a generator: it holds one Row at a time and keeps the
file open only while it is being consumed, which is what the streaming
aggregator relies on. load_csv_rows() materialises the same rows into a
list for the in-memory aggregator.

Every column is read as text except those named in ``numeric_fields``,
which are parsed to float. A cell that does not parse raises RowParseError
with its line number.
"""

from __future__ import annotations

import csv
import logging
from typing import Iterable, Iterator

from ..config import settings
from ..errors import MissingFieldError, RowParseError
from ..models import Row

logger = logging.getLogger(__name__)


def iter_csv_rows(
    path: str,
    numeric_fields: Iterable[str] = (),
    delimiter: str | None = None,
    encoding: str | None = None,
) -> Iterator[Row]:
    """
    Yield one Row per data record in ``path``.

    Raises:
        MissingFieldError: a numeric field is absent from the header, or a
                           record has fewer cells than the header.
        RowParseError:     a numeric cell is not a number.
    """
    numeric = frozenset(numeric_fields)
    with open(path, newline="", encoding=encoding or settings.CSV_ENCODING) as fh:
        reader = csv.DictReader(fh, delimiter=delimiter or settings.CSV_DELIMITER)
        header = reader.fieldnames or []
        missing = numeric - set(header)
        if missing:
            raise MissingFieldError(missing, where=f"header of {path!r}")
        logger.debug("Opened %r: %d column(s), numeric=%s", path, len(header), sorted(numeric))

        for record in reader:
            values: dict[str, object] = {}
            short = [name for name, cell in record.items() if cell is None]
            if short:
                raise MissingFieldError(short, where=f"{path!r} line {reader.line_num}")
            for name, cell in record.items():
                if name is None:
                    # extra cells beyond the header are ignored
                    continue
                if name in numeric:
                    try:
                        values[name] = float(cell)
                    except ValueError:
                        raise RowParseError(name, cell, reader.line_num) from None
                else:
                    values[name] = cell
            yield Row(values)


def load_csv_rows(
    path: str,
    numeric_fields: Iterable[str] = (),
    delimiter: str | None = None,
    encoding: str | None = None,
) -> list[Row]:
    """Read every row of ``path`` into memory."""
    rows = list(iter_csv_rows(path, numeric_fields, delimiter, encoding))
    logger.info("Loaded %d row(s) from %r", len(rows), path)
    return rows
