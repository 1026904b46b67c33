"""Student dataset models.

StudentRecord is immutable once built. Its normalized_name is always
derived from display_name, whatever the caller passes in. Records read
back from storage reuse the normalized_name stored alongside them.
"""

from enum import StrEnum
from typing import Any

from pydantic import Field, model_validator

from natega.models.common import NategaBase, UTCTimestamp, UUIDv7
from natega.search.normalizer import normalize_arabic_name


class StudentRecord(NategaBase, frozen=True):
    """One examinee, keyed by seating number."""

    seating_number: str = Field(..., min_length=1, alias="seating_no")
    display_name: str = Field(..., alias="arabic_name")
    normalized_name: str = Field(default="", alias="arabic_name_normalized")
    total_score: float = Field(..., alias="total_degree")

    @model_validator(mode="before")
    @classmethod
    def _derive_normalized_name(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            name = data.get("display_name", data.get("arabic_name"))
            if isinstance(name, str):
                data.pop("arabic_name_normalized", None)
                data["normalized_name"] = normalize_arabic_name(name)
        return data

    @classmethod
    def from_stored(
        cls,
        seating_number: str,
        display_name: str,
        normalized_name: str,
        total_score: float,
    ) -> "StudentRecord":
        """Rebuild a record read back from the store without re-validating.

        The stored normalized_name was derived when the record was first
        built, so it is taken as-is.
        """
        return cls.model_construct(
            seating_number=seating_number,
            display_name=display_name,
            normalized_name=normalized_name,
            total_score=total_score,
        )


class SearchHit(NategaBase, frozen=True):
    """Public projection of a StudentRecord returned by search."""

    display_name: str = Field(..., alias="arabic_name")
    seating_number: str = Field(..., alias="seating_no")
    total_score: float = Field(..., alias="total_degree")

    @classmethod
    def from_record(cls, record: StudentRecord) -> "SearchHit":
        return cls(
            display_name=record.display_name,
            seating_number=record.seating_number,
            total_score=record.total_score,
        )


class GenerationStatus(StrEnum):
    """Lifecycle of one full dataset load.

    BUILDING — rows being written, never visible to readers.
    ACTIVE — the dataset currently served.
    RETIRED — replaced by a later generation; rows deleted.
    """

    BUILDING = "BUILDING"
    ACTIVE = "ACTIVE"
    RETIRED = "RETIRED"


class DatasetGeneration(NategaBase, frozen=True):
    """Metadata of a committed dataset load."""

    generation_id: UUIDv7
    status: GenerationStatus
    source: str = ""
    record_count: int = Field(..., ge=0)
    activated_at: UTCTimestamp | None = None


class RowRejection(NategaBase, frozen=True):
    """A source row skipped during ingestion."""

    line_number: int
    seating_number: str | None = None
    reason: str


class IngestionReport(NategaBase):
    """Outcome of an ingestion run that committed a new dataset."""

    source: str
    rows_read: int = 0
    accepted: int = 0
    rejections: list[RowRejection] = Field(default_factory=list)
    generation: DatasetGeneration | None = None

    @property
    def skipped(self) -> int:
        return len(self.rejections)
