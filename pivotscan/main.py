from __future__ import annotations

import argparse
import logging
import sys
from contextlib import closing
from typing import NoReturn, Sequence

from .aggregation import NO_ROW_LIMIT, PivotPlan, StreamingAggregator, InMemoryAggregator
from .config import settings
from .errors import PivotError
from .filters import FilterSet
from .metrics import TOTALS
from .tables import iter_csv_rows, load_csv_rows

logger = logging.getLogger("pivotscan.main")


def _parse_assignment(raw: str) -> tuple[str, list[str]]:
    """'CARRIER=UA,AA' -> ('CARRIER', ['UA', 'AA'])"""
    name, sep, values = raw.partition("=")
    name = name.strip()
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected FIELD=V1,V2, got {raw!r}")
    return name, [v.strip() for v in values.split(",") if v.strip()]


def _numeric_assignment(raw: str) -> tuple[str, list[float]]:
    name, values = _parse_assignment(raw)
    try:
        return name, [float(v) for v in values]
    except ValueError:
        raise argparse.ArgumentTypeError(f"non-numeric value in {raw!r}") from None


def _collect(pairs: list[tuple[str, list]] | None) -> dict[str, list]:
    merged: dict[str, list] = {}
    for name, values in pairs or []:
        merged.setdefault(name, []).extend(values)
    return merged


def build_filters(args: argparse.Namespace) -> FilterSet:
    return FilterSet.build(
        include=_collect(args.include),
        exclude=_collect(args.exclude),
        numeric_include=_collect(args.numeric_include),
        numeric_exclude=_collect(args.numeric_exclude),
    )


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pivotscan",
        description="Sum / count / mean pivot tables over delimited files",
    )
    parser.add_argument("data", help="Input delimited file")
    parser.add_argument("-g", "--group", nargs="+", required=True, metavar="FIELD",
                        help="Grouping (text) fields, in key order")
    parser.add_argument("-m", "--measure", nargs="+", required=True, metavar="FIELD",
                        help="Measured (numeric) fields")
    parser.add_argument("--include", action="append", type=_parse_assignment,
                        metavar="FIELD=V1,V2")
    parser.add_argument("--exclude", action="append", type=_parse_assignment,
                        metavar="FIELD=V1,V2")
    parser.add_argument("--numeric-include", action="append", type=_numeric_assignment,
                        metavar="FIELD=N1,N2")
    parser.add_argument("--numeric-exclude", action="append", type=_numeric_assignment,
                        metavar="FIELD=N1,N2")
    parser.add_argument("--max-rows", type=int, default=None,
                        help="Stop after N rows (streaming only; default: all rows)")
    parser.add_argument("-o", "--output", default=None, help="Write the pivot table here")
    parser.add_argument("--in-memory", action="store_true",
                        help="Load every row first, then pivot in memory")
    parser.add_argument("--label", default=None, help="Override the key column header")
    parser.add_argument(
        "--log-level", default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args(argv)
    if args.in_memory and args.max_rows is not None:
        parser.error("--max-rows only applies to streaming scans")
    if args.max_rows is None:
        args.max_rows = settings.DEFAULT_MAX_ROWS
    if args.max_rows < NO_ROW_LIMIT:
        parser.error("--max-rows must be -1 or a non-negative number")
    return args


def run(args: argparse.Namespace) -> int:
    filters = build_filters(args)
    plan = PivotPlan(args.group, args.measure, filters=filters, label=args.label)
    numeric_fields = set(args.measure) | set(filters.numeric.fields)

    if args.in_memory:
        rows = load_csv_rows(args.data, numeric_fields=numeric_fields)
        result = InMemoryAggregator(plan).run(
            rows, save_to_file=args.output is not None, output_path=args.output,
        )
    else:
        with closing(iter_csv_rows(args.data, numeric_fields=numeric_fields)) as rows:
            result = StreamingAggregator(plan).run(
                rows, max_rows=args.max_rows, output_path=args.output,
            )

    print(
        f"{result.rows_scanned} row(s) scanned, {result.rows_included} included, "
        f"{len(result.store)} group(s) in {result.elapsed_seconds:.3f}s"
        + (f" -> {result.output_path}" if result.output_path else ""),
        flush=True,
    )
    logger.debug("Totals: %s", TOTALS.as_dict())
    return 0


def main(argv: Sequence[str] | None = None) -> NoReturn:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        code = run(args)
    except (PivotError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
