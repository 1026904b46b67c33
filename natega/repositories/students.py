"""SQL-backed Dataset Store.

replace_all writes a complete new generation and swaps the ACTIVE marker
inside the caller's transaction. Like every repository here it never
commits: the session owner commits the whole swap or rolls it back.

Concurrent loads are serialized by a transaction-scoped advisory lock on
PostgreSQL. SQLite already allows a single writer at a time.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import TextClause, case, delete, func, insert, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from natega.db.tables import DatasetGenerationRow, StudentRow
from natega.models.common import new_uuid7, utc_now
from natega.models.student import DatasetGeneration, GenerationStatus, StudentRecord
from natega.repositories.base import (
    DatasetStore,
    DatasetUnavailableError,
    DuplicateSeatingNumberError,
    find_duplicate_seating_numbers,
)
from natega.search.query import LIKE_ESCAPE, ContainsAllPattern
from natega.search.ranker import MatchTier

logger = logging.getLogger(__name__)

INSERT_CHUNK_SIZE = 5000

# Arbitrary application-wide key for pg_advisory_xact_lock.
SWAP_LOCK_KEY = 0x4E415445


def swap_lock_statement(dialect_name: str) -> TextClause | None:
    """Statement that serializes dataset swaps, or None if not needed."""
    if dialect_name == "postgresql":
        return text("SELECT pg_advisory_xact_lock(:key)").bindparams(key=SWAP_LOCK_KEY)
    return None


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops the offset on DateTime(timezone=True); values are UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_generation(row: DatasetGenerationRow) -> DatasetGeneration:
    return DatasetGeneration(
        generation_id=row.generation_id,
        status=GenerationStatus(row.status),
        source=row.source,
        record_count=row.record_count,
        activated_at=_as_utc(row.activated_at),
    )


class StudentRepository(DatasetStore):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def filter_contains_all(
        self, pattern: ContainsAllPattern, *, limit: int | None = None,
    ) -> list[StudentRecord]:
        norm = StudentRow.arabic_name_normalized
        tier = case(
            (norm == pattern.exact_query, int(MatchTier.EXACT)),
            (
                norm.like(pattern.to_prefix_like(), escape=LIKE_ESCAPE),
                int(MatchTier.PREFIX),
            ),
            else_=int(MatchTier.CONTAINS),
        )
        stmt = (
            select(
                StudentRow.seating_no,
                StudentRow.arabic_name,
                norm,
                StudentRow.total_degree,
            )
            .join(
                DatasetGenerationRow,
                DatasetGenerationRow.generation_id == StudentRow.generation_id,
            )
            .where(
                DatasetGenerationRow.status == GenerationStatus.ACTIVE.value,
                norm.like(pattern.to_like(), escape=LIKE_ESCAPE),
            )
            .order_by(tier, func.length(norm), StudentRow.seating_no)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            msg = "student dataset could not be read."
            raise DatasetUnavailableError(msg) from exc
        return [StudentRecord.from_stored(*row) for row in result.all()]

    async def replace_all(
        self, records: Sequence[StudentRecord], *, source: str = "",
    ) -> DatasetGeneration:
        duplicates = find_duplicate_seating_numbers(records)
        if duplicates:
            raise DuplicateSeatingNumberError(duplicates)

        lock = swap_lock_statement(self._session.get_bind().dialect.name)
        if lock is not None:
            await self._session.execute(lock)

        new_gen = DatasetGenerationRow(
            generation_id=new_uuid7(),
            status=GenerationStatus.BUILDING.value,
            source=source,
            record_count=len(records),
            created_at=utc_now(),
            activated_at=None,
        )
        self._session.add(new_gen)
        await self._session.flush()

        try:
            for start in range(0, len(records), INSERT_CHUNK_SIZE):
                chunk = records[start:start + INSERT_CHUNK_SIZE]
                await self._session.execute(
                    insert(StudentRow),
                    [
                        {
                            "generation_id": new_gen.generation_id,
                            "seating_no": r.seating_number,
                            "arabic_name": r.display_name,
                            "arabic_name_normalized": r.normalized_name,
                            "total_degree": r.total_score,
                        }
                        for r in chunk
                    ],
                )
        except IntegrityError as exc:
            raise DuplicateSeatingNumberError(()) from exc

        await self._retire_active(except_id=new_gen.generation_id)

        new_gen.status = GenerationStatus.ACTIVE.value
        new_gen.activated_at = utc_now()
        await self._session.flush()
        return _to_generation(new_gen)

    async def _retire_active(self, *, except_id: uuid.UUID) -> None:
        """Retire every ACTIVE generation other than except_id and drop its rows."""
        others = (
            DatasetGenerationRow.status == GenerationStatus.ACTIVE.value,
            DatasetGenerationRow.generation_id != except_id,
        )
        result = await self._session.execute(
            select(DatasetGenerationRow.generation_id, DatasetGenerationRow.record_count)
            .where(*others)
        )
        previous = result.all()
        if not previous:
            return

        await self._session.execute(
            delete(StudentRow).where(
                StudentRow.generation_id.in_([gen_id for gen_id, _ in previous]),
            )
        )
        await self._session.execute(
            update(DatasetGenerationRow)
            .where(*others)
            .values(status=GenerationStatus.RETIRED.value)
        )
        for gen_id, record_count in previous:
            logger.info(
                "Retired dataset generation %s (%d records)", gen_id, record_count,
            )

    async def active_generation(self) -> DatasetGeneration | None:
        try:
            result = await self._session.execute(
                select(DatasetGenerationRow)
                .where(DatasetGenerationRow.status == GenerationStatus.ACTIVE.value)
                .order_by(DatasetGenerationRow.activated_at.desc())
                .limit(1)
            )
        except SQLAlchemyError as exc:
            msg = "dataset generation could not be read."
            raise DatasetUnavailableError(msg) from exc
        row = result.scalars().first()
        return _to_generation(row) if row is not None else None
