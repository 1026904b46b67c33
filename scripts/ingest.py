"""Ingest student records — full destructive rebuild of the served dataset.

Reads a CSV (local path or http(s) URL) with seating_no, arabic_name and
total_degree columns, normalizes every name, and swaps the new dataset in
within a single transaction. Malformed rows are logged and skipped; a
duplicate seating number aborts the run and keeps the previous dataset.

Usage:
    python -m scripts.ingest                      # INGEST_SOURCE from .env
    python -m scripts.ingest students.csv --create-schema
    python -m scripts.ingest https://example.org/students.csv

Exit status: 0 success, 1 source unavailable, 2 duplicate seating numbers.
"""

import argparse
import asyncio
import sys

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from natega.config.settings import Settings, get_settings
from natega.db.session import Base, build_engine, build_session_factory
import natega.db.tables  # noqa: F401 — register ORM models on Base.metadata
from natega.ingestion.pipeline import ingest_from_location
from natega.ingestion.source import SourceUnavailableError
from natega.models.student import IngestionReport
from natega.observability.logging import configure_logging
from natega.repositories.base import DuplicateSeatingNumberError
from natega.repositories.students import StudentRepository

EXIT_OK = 0
EXIT_SOURCE_UNAVAILABLE = 1
EXIT_DUPLICATES = 2

logger = structlog.get_logger()


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables (for deployments that skip alembic)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def run_ingest(
    engine: AsyncEngine,
    location: str,
    settings: Settings,
) -> IngestionReport:
    """Ingest location in one Unit-of-Work: commit on success, rollback otherwise."""
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        async with session.begin():
            return await ingest_from_location(
                location, StudentRepository(session), settings,
            )


def _print_summary(report: IngestionReport) -> None:
    print(f"\n{'=' * 60}")
    print(f"  Source:     {report.source}")
    print(f"  Rows read:  {report.rows_read}")
    print(f"  Accepted:   {report.accepted}")
    print(f"  Skipped:    {report.skipped}")
    if report.generation is not None:
        print(f"  Generation: {report.generation.generation_id}")
    print(f"{'=' * 60}")


async def _main(args: argparse.Namespace, settings: Settings) -> int:
    engine = build_engine(args.database_url or settings.DATABASE_URL)
    try:
        if args.create_schema:
            await create_schema(engine)
        report = await run_ingest(engine, args.source, settings)
    except SourceUnavailableError as exc:
        logger.error("source_unavailable", source=args.source, error=str(exc))
        return EXIT_SOURCE_UNAVAILABLE
    except DuplicateSeatingNumberError as exc:
        logger.error("ingest_aborted", source=args.source, error=str(exc))
        return EXIT_DUPLICATES
    finally:
        await engine.dispose()

    _print_summary(report)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Rebuild the student dataset from a CSV source.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        default=settings.INGEST_SOURCE,
        help="CSV path or http(s) URL (default: INGEST_SOURCE).",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL.",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create tables before ingesting.",
    )
    args = parser.parse_args(argv)

    configure_logging(settings)
    return asyncio.run(_main(args, settings))


if __name__ == "__main__":
    sys.exit(main())
