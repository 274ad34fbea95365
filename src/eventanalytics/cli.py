"""Command-line entry point: plan or update the event analytics tables."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from eventanalytics.context import AnalyticsContext, build_context
from eventanalytics.models.errors import QueryExecutionError
from eventanalytics.models.table import AnalyticsTableUpdateParams
from eventanalytics.settings import Settings
from eventanalytics.storage.loader import SnapshotLoadError

logger = logging.getLogger("eventanalytics.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventanalytics",
        description="Plan and populate event analytics tables",
    )
    parser.add_argument("--metadata", help="Metadata snapshot YAML (defaults to METADATA_PATH)")
    parser.add_argument("--database-url", help="SQLAlchemy database URL (defaults to DATABASE_URL)")
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Show the tables and partitions a build would create")
    plan.add_argument("--earliest", type=date.fromisoformat,
                      help="Only include years from this date on (YYYY-MM-DD)")
    plan.add_argument("--sql", action="store_true",
                      help="Also print the population SQL of every partition")

    update = sub.add_parser("update", help="Build and swap in the analytics tables")
    update.add_argument("--last-years", type=int,
                        help="Only rebuild the most recent N years")
    update.add_argument("--skip-program", action="append", default=[],
                        help="Program uid to leave out (repeatable)")
    return parser


def _plan(context: AnalyticsContext, args: argparse.Namespace) -> int:
    params = AnalyticsTableUpdateParams()
    tables = context.table_manager.get_analytics_tables(args.earliest)
    if not tables:
        print("No programs with data")
        return 0
    for table in tables:
        years = ", ".join(str(p.year) for p in table.partitions)
        print(f"{table.table_name}: {len(table.columns)} columns, partitions [{years}]")
        for partition in table.partitions:
            checks = context.table_manager.get_partition_checks(partition)
            print(f"  {partition.table_name}: {checks}")
            if args.sql:
                print(context.table_manager.get_populate_sql(params, partition))
                print()
    return 0


def _update(context: AnalyticsContext, args: argparse.Namespace) -> int:
    params = AnalyticsTableUpdateParams(
        last_years=args.last_years, skip_programs=set(args.skip_program)
    )
    result = context.update_service.update_tables(params)
    failed = False
    for table in result.tables:
        status = "ok" if table.ok else "FAILED"
        print(
            f"{table.table_name}: {status}, {table.rows} rows, "
            f"committed {table.committed_years}, failed {table.failed_years}"
        )
        failed = failed or not table.ok
    print(f"Done in {result.duration_seconds:.1f} s")
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    overrides: dict[str, str] = {}
    if args.metadata:
        overrides["metadata_path"] = args.metadata
    if args.database_url:
        overrides["database_url"] = args.database_url
    settings = Settings(**overrides)

    logging.basicConfig(level=settings.log_level.upper())

    try:
        context = build_context(settings)
        if args.command == "plan":
            return _plan(context, args)
        return _update(context, args)
    except SnapshotLoadError as exc:
        print(f"Cannot load metadata: {exc}", file=sys.stderr)
        return 2
    except QueryExecutionError as exc:
        logger.error("Database error: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
