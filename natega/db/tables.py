"""SQLAlchemy ORM table models for natega-search.

- dataset_generations: one row per full load (BUILDING -> ACTIVE -> RETIRED)
- students: IMMUTABLE rows, scoped to the generation that loaded them
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from natega.db.session import Base


class DatasetGenerationRow(Base):
    """Operational — status transitions (BUILDING -> ACTIVE -> RETIRED)."""

    __tablename__ = "dataset_generations"

    generation_id: Mapped[UUID] = mapped_column(primary_key=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    source: Mapped[str] = mapped_column(Text, default="", nullable=False)
    record_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class StudentRow(Base):
    """Immutable student record. Unique per (generation, seating number)."""

    __tablename__ = "students"

    generation_id: Mapped[UUID] = mapped_column(
        ForeignKey("dataset_generations.generation_id"), primary_key=True,
    )
    seating_no: Mapped[str] = mapped_column(String(50), primary_key=True)
    arabic_name: Mapped[str] = mapped_column(Text, nullable=False)
    arabic_name_normalized: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    total_degree: Mapped[float] = mapped_column(Float, nullable=False)
