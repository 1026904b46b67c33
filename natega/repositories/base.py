"""Dataset Store interface consumed by search and ingestion.

Implementations must guarantee swap semantics: readers see either the
previous dataset or the complete new one, never a partial load.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from natega.models.student import DatasetGeneration, StudentRecord
from natega.search.query import ContainsAllPattern


class DatasetUnavailableError(RuntimeError):
    """The store could not be read. Distinct from an empty result."""


class DuplicateSeatingNumberError(ValueError):
    """A load contained the same seating number more than once."""

    def __init__(self, seating_numbers: Sequence[str]) -> None:
        self.seating_numbers = tuple(seating_numbers)
        msg = "duplicate seating numbers in batch"
        if self.seating_numbers:
            shown = ", ".join(self.seating_numbers[:10])
            more = len(self.seating_numbers) - 10
            msg += f": {shown}" + (f" (+{more} more)" if more > 0 else "")
        super().__init__(msg)


def find_duplicate_seating_numbers(records: Sequence[StudentRecord]) -> list[str]:
    """Seating numbers occurring more than once, in first-repeat order."""
    seen: set[str] = set()
    duplicates: dict[str, None] = {}
    for record in records:
        if record.seating_number in seen:
            duplicates[record.seating_number] = None
        seen.add(record.seating_number)
    return list(duplicates)


class DatasetStore(ABC):
    """Holds the served student dataset."""

    @abstractmethod
    async def filter_contains_all(
        self, pattern: ContainsAllPattern, *, limit: int | None = None,
    ) -> list[StudentRecord]:
        """Records whose normalized name satisfies the pattern.

        Without a limit every match is returned, in a stable order. With a
        limit the store returns at most that many, and they must be the
        best-ranked matches: ordered by tier, then normalized-name length.

        Raises:
            DatasetUnavailableError: If the store cannot be read.
        """
        ...

    @abstractmethod
    async def replace_all(
        self, records: Sequence[StudentRecord], *, source: str = "",
    ) -> DatasetGeneration:
        """Atomically replace the whole dataset with records.

        Raises:
            DuplicateSeatingNumberError: If seating numbers repeat. The
                previously served dataset stays in place.
        """
        ...

    @abstractmethod
    async def active_generation(self) -> DatasetGeneration | None:
        """Metadata of the dataset currently served, if any."""
        ...
