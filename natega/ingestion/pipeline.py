"""Ingestion pipeline: source rows -> validated records -> atomic store swap.

Per-row problems are recovered locally: the row is logged, recorded on
the report and skipped. A duplicate seating number is batch-fatal: the
store rejects the whole load and keeps serving the previous dataset.
"""

import logging
import math
from collections.abc import Iterable

from natega.config.settings import Settings
from natega.ingestion.source import (
    ARABIC_NAME,
    SEATING_NO,
    TOTAL_DEGREE,
    SourceRow,
    fetch_source_text,
    iter_rows,
)
from natega.models.student import IngestionReport, RowRejection, StudentRecord
from natega.repositories.base import DatasetStore, DuplicateSeatingNumberError

logger = logging.getLogger(__name__)


def parse_score(raw: str | None) -> float:
    """Parse a total score. Accepts any finite float() literal.

    Raises:
        ValueError: If the value is blank, not a number, or not finite.
    """
    if raw is None or not raw.strip():
        msg = "missing total score."
        raise ValueError(msg)
    try:
        value = float(raw.strip())
    except ValueError:
        msg = f"total score {raw.strip()!r} is not a number."
        raise ValueError(msg) from None
    if not math.isfinite(value):
        msg = f"total score {raw.strip()!r} is not finite."
        raise ValueError(msg)
    return value


def parse_row(row: SourceRow) -> StudentRecord | RowRejection:
    """Validate one source row, deriving the normalized name."""
    seating_number = (row.fields.get(SEATING_NO) or "").strip()
    if not seating_number:
        return RowRejection(line_number=row.line_number, reason="missing seating number.")

    name = row.fields.get(ARABIC_NAME)
    if name is None:
        return RowRejection(
            line_number=row.line_number,
            seating_number=seating_number,
            reason="missing arabic name.",
        )

    try:
        score = parse_score(row.fields.get(TOTAL_DEGREE))
    except ValueError as exc:
        return RowRejection(
            line_number=row.line_number,
            seating_number=seating_number,
            reason=str(exc),
        )

    return StudentRecord(
        seating_number=seating_number,
        display_name=name,
        total_score=score,
    )


class IngestionPipeline:
    """Builds a full dataset from rows and hands it to the store in one call."""

    def __init__(self, store: DatasetStore) -> None:
        self._store = store

    async def run(self, rows: Iterable[SourceRow], *, source: str) -> IngestionReport:
        """Ingest rows as a single batch.

        Raises:
            DuplicateSeatingNumberError: If the batch repeats a seating
                number. Nothing is committed.
        """
        report = IngestionReport(source=source)
        accepted: list[StudentRecord] = []

        for row in rows:
            report.rows_read += 1
            parsed = parse_row(row)
            if isinstance(parsed, RowRejection):
                logger.warning(
                    "Skipping line %d (seating_no=%s): %s",
                    parsed.line_number, parsed.seating_number, parsed.reason,
                )
                report.rejections.append(parsed)
                continue
            accepted.append(parsed)

        try:
            report.generation = await self._store.replace_all(accepted, source=source)
        except DuplicateSeatingNumberError:
            logger.error(
                "Ingestion of %s aborted: duplicate seating numbers; "
                "previous dataset kept.", source,
            )
            raise

        report.accepted = len(accepted)
        logger.info(
            "Ingested %s: %d accepted, %d skipped, generation %s",
            source, report.accepted, report.skipped, report.generation.generation_id,
        )
        return report


async def ingest_from_location(
    location: str,
    store: DatasetStore,
    settings: Settings,
) -> IngestionReport:
    """Fetch a source by path or URL and run it through the pipeline.

    Raises:
        SourceUnavailableError: If the source cannot be read.
        DuplicateSeatingNumberError: If the batch repeats a seating number.
    """
    text = await fetch_source_text(
        location,
        timeout=settings.INGEST_HTTP_TIMEOUT,
        encoding=settings.INGEST_ENCODING,
    )
    return await IngestionPipeline(store).run(iter_rows(text), source=location)
