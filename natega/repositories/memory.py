"""In-process Dataset Store.

The served dataset is an immutable tuple. replace_all builds the new
tuple completely, then swaps it in with a single assignment, so a
concurrent reader holds either the old snapshot or the new one.
"""

from collections.abc import Sequence

from natega.models.common import new_uuid7, utc_now
from natega.models.student import DatasetGeneration, GenerationStatus, StudentRecord
from natega.repositories.base import (
    DatasetStore,
    DuplicateSeatingNumberError,
    find_duplicate_seating_numbers,
)
from natega.search.query import ContainsAllPattern
from natega.search.ranker import rank


class _Snapshot:
    __slots__ = ("records", "generation")

    def __init__(self, records: tuple[StudentRecord, ...],
                 generation: DatasetGeneration | None) -> None:
        self.records = records
        self.generation = generation


class InMemoryDatasetStore(DatasetStore):
    def __init__(self) -> None:
        self._snapshot = _Snapshot((), None)

    async def filter_contains_all(
        self, pattern: ContainsAllPattern, *, limit: int | None = None,
    ) -> list[StudentRecord]:
        snapshot = self._snapshot
        matched = [r for r in snapshot.records if pattern.matches(r.normalized_name)]
        if limit is None:
            return matched
        return rank(matched, pattern, limit=limit)

    async def replace_all(
        self, records: Sequence[StudentRecord], *, source: str = "",
    ) -> DatasetGeneration:
        built = tuple(records)
        duplicates = find_duplicate_seating_numbers(built)
        if duplicates:
            raise DuplicateSeatingNumberError(duplicates)

        generation = DatasetGeneration(
            generation_id=new_uuid7(),
            status=GenerationStatus.ACTIVE,
            source=source,
            record_count=len(built),
            activated_at=utc_now(),
        )
        self._snapshot = _Snapshot(built, generation)
        return generation

    async def active_generation(self) -> DatasetGeneration | None:
        return self._snapshot.generation

    def __len__(self) -> int:
        return len(self._snapshot.records)
