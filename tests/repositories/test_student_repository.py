"""Tests for StudentRepository — SQL-backed dataset store."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from natega.db.tables import DatasetGenerationRow, StudentRow
from natega.models import student as student_models
from natega.models.common import new_uuid7, utc_now
from natega.models.student import GenerationStatus
from natega.repositories.base import DatasetUnavailableError, DuplicateSeatingNumberError
from natega.repositories.students import StudentRepository, swap_lock_statement
from natega.search.service import search
from natega.search.query import ContainsAllPattern


@pytest.fixture
def repo(db_session):
    return StudentRepository(db_session)


async def _count(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestReplaceAll:

    @pytest.mark.anyio
    async def test_first_load_becomes_active(self, repo: StudentRepository, make_record) -> None:
        gen = await repo.replace_all(
            [make_record("أحمد علي"), make_record("فاطمة حسن")], source="students.csv",
        )
        assert gen.status == GenerationStatus.ACTIVE
        assert gen.record_count == 2
        assert gen.activated_at is not None
        assert await repo.active_generation() == gen

    @pytest.mark.anyio
    async def test_stores_normalized_name(self, repo: StudentRepository, db_session, make_record) -> None:
        await repo.replace_all([make_record("مُحَمَّد عَلِيّ", seating_no="55")])
        row = (await db_session.execute(select(StudentRow))).scalar_one()
        assert row.arabic_name == "مُحَمَّد عَلِيّ"
        assert row.arabic_name_normalized == "محمد علي"

    @pytest.mark.anyio
    async def test_second_load_retires_first(
        self, repo: StudentRepository, db_session, make_record,
    ) -> None:
        first = await repo.replace_all([make_record("احمد علي"), make_record("سامي")])
        second = await repo.replace_all([make_record("هدى محمود")])

        assert (await repo.active_generation()).generation_id == second.generation_id
        old = await db_session.get(DatasetGenerationRow, first.generation_id)
        assert old.status == GenerationStatus.RETIRED.value
        assert await _count(db_session, StudentRow) == 1
        assert await repo.filter_contains_all(ContainsAllPattern(("احمد",))) == []

    @pytest.mark.anyio
    async def test_same_seating_number_across_generations(
        self, repo: StudentRepository, make_record,
    ) -> None:
        await repo.replace_all([make_record("احمد علي", seating_no="9")])
        await repo.replace_all([make_record("احمد علي حسن", seating_no="9")])
        found = await repo.filter_contains_all(ContainsAllPattern(("احمد",)))
        assert [r.display_name for r in found] == ["احمد علي حسن"]

    @pytest.mark.anyio
    async def test_duplicates_abort_and_keep_previous(
        self, repo: StudentRepository, db_session, make_record,
    ) -> None:
        kept = await repo.replace_all([make_record("احمد علي", seating_no="1")])

        with pytest.raises(DuplicateSeatingNumberError) as exc_info:
            await repo.replace_all([
                make_record("سامي", seating_no="2"),
                make_record("هاني", seating_no="2"),
                make_record("رامي", seating_no="3"),
            ])

        assert exc_info.value.seating_numbers == ("2",)
        assert await repo.active_generation() == kept
        assert await _count(db_session, DatasetGenerationRow) == 1
        found = await repo.filter_contains_all(ContainsAllPattern(("احمد",)))
        assert [r.seating_number for r in found] == ["1"]

    @pytest.mark.anyio
    async def test_empty_load(self, repo: StudentRepository) -> None:
        gen = await repo.replace_all([])
        assert gen.record_count == 0
        assert await repo.filter_contains_all(ContainsAllPattern(("احمد",))) == []


class TestFilterContainsAll:

    @pytest.mark.anyio
    async def test_no_dataset_yields_empty(self, repo: StudentRepository) -> None:
        assert await repo.active_generation() is None
        assert await repo.filter_contains_all(ContainsAllPattern(("احمد",))) == []

    @pytest.mark.anyio
    async def test_ordered_terms(self, repo: StudentRepository, make_record) -> None:
        await repo.replace_all([
            make_record("احمد محمد علي", seating_no="3"),
            make_record("علي احمد", seating_no="2"),
            make_record("احمد علي", seating_no="1"),
        ])
        found = await repo.filter_contains_all(ContainsAllPattern(("احمد", "علي")))
        assert [r.seating_number for r in found] == ["1", "3"]

    @pytest.mark.anyio
    async def test_records_round_trip(self, repo: StudentRepository, make_record) -> None:
        original = make_record("نور إيمان", seating_no="77", score=401.5)
        await repo.replace_all([original])
        found = await repo.filter_contains_all(ContainsAllPattern(("ايمان",)))
        assert found == [original]

    @pytest.mark.anyio
    async def test_missing_schema_is_unavailable(self) -> None:
        eng = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
        try:
            async with AsyncSession(eng) as session:
                with pytest.raises(DatasetUnavailableError):
                    await StudentRepository(session).filter_contains_all(
                        ContainsAllPattern(("احمد",)),
                    )
            async with AsyncSession(eng) as session:
                with pytest.raises(DatasetUnavailableError):
                    await StudentRepository(session).active_generation()
        finally:
            await eng.dispose()


class TestBoundedFetch:

    @pytest.fixture
    async def loaded(self, repo: StudentRepository, make_record):
        records = [
            make_record("سامي " + "ب" * i + " نور", seating_no=f"{i:03d}")
            for i in range(1, 31)
        ]
        records.append(make_record("نور الهدى", seating_no="998"))
        records.append(make_record("نور", seating_no="999"))
        await repo.replace_all(records)
        return records

    @pytest.mark.anyio
    async def test_limit_returns_best_ranked(self, repo: StudentRepository, loaded) -> None:
        found = await repo.filter_contains_all(ContainsAllPattern(("نور",)), limit=4)
        assert [r.seating_number for r in found] == ["999", "998", "001", "002"]

    @pytest.mark.anyio
    async def test_search_over_repository(self, repo: StudentRepository, loaded) -> None:
        hits = await search("نور", repo, limit=3)
        assert [h.seating_number for h in hits] == ["999", "998", "001"]

    @pytest.mark.anyio
    async def test_fetch_reuses_stored_normalized_name(
        self, repo: StudentRepository, loaded, monkeypatch,
    ) -> None:
        calls = []
        original = student_models.normalize_arabic_name

        def _counting(text):
            calls.append(text)
            return original(text)

        monkeypatch.setattr(student_models, "normalize_arabic_name", _counting)
        found = await repo.filter_contains_all(ContainsAllPattern(("نور",)))
        assert len(found) == 32
        assert calls == []
        assert found[1].normalized_name == "نور الهدي"


class TestConcurrentSwap:

    def test_postgres_takes_advisory_lock(self) -> None:
        stmt = swap_lock_statement("postgresql")
        assert stmt is not None
        assert "pg_advisory_xact_lock" in str(stmt)

    def test_sqlite_needs_no_lock(self) -> None:
        assert swap_lock_statement("sqlite") is None

    @pytest.mark.anyio
    async def test_retires_every_other_active_generation(
        self, repo: StudentRepository, db_session, make_record,
    ) -> None:
        # Two ACTIVE generations, as left by loads that were not serialized.
        for name in ("احمد علي", "احمد حسن"):
            gen_id = new_uuid7()
            db_session.add(DatasetGenerationRow(
                generation_id=gen_id,
                status=GenerationStatus.ACTIVE.value,
                source="",
                record_count=1,
                created_at=utc_now(),
                activated_at=utc_now(),
            ))
            await db_session.flush()
            db_session.add(StudentRow(
                generation_id=gen_id,
                seating_no="1",
                arabic_name=name,
                arabic_name_normalized=name,
                total_degree=300.0,
            ))
            await db_session.flush()

        gen = await repo.replace_all([make_record("احمد سامي", seating_no="1")])

        active = await db_session.execute(
            select(DatasetGenerationRow.generation_id)
            .where(DatasetGenerationRow.status == GenerationStatus.ACTIVE.value)
        )
        assert active.scalars().all() == [gen.generation_id]
        assert await _count(db_session, StudentRow) == 1
        found = await repo.filter_contains_all(ContainsAllPattern(("احمد",)))
        assert [r.display_name for r in found] == ["احمد سامي"]


class TestGenerationTimestamps:

    @pytest.mark.anyio
    async def test_activated_at_read_back_is_utc(
        self, repo: StudentRepository, db_session, make_record,
    ) -> None:
        gen = await repo.replace_all([make_record("احمد علي")])
        db_session.expunge_all()

        stored = await repo.active_generation()
        assert stored.activated_at.tzinfo is not None
        assert stored.activated_at.utcoffset().total_seconds() == 0
        assert stored == gen
