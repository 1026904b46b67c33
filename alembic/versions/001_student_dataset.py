"""Student dataset schema — generations and students.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "dataset_generations",
        sa.Column("generation_id", sa.Uuid(), primary_key=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("source", sa.Text, server_default="", nullable=False),
        sa.Column("record_count", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_dataset_generations_status", "dataset_generations", ["status"],
    )

    op.create_table(
        "students",
        sa.Column("generation_id", sa.Uuid(),
                  sa.ForeignKey("dataset_generations.generation_id"), primary_key=True),
        sa.Column("seating_no", sa.String(50), primary_key=True),
        sa.Column("arabic_name", sa.Text, nullable=False),
        sa.Column("arabic_name_normalized", sa.Text, nullable=False),
        sa.Column("total_degree", sa.Float, nullable=False),
    )
    op.create_index(
        "ix_students_arabic_name_normalized", "students", ["arabic_name_normalized"],
    )

    # Trigram index serves the unanchored LIKE '%a%b%' filter on PostgreSQL
    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
        op.execute(
            "CREATE INDEX ix_students_arabic_name_trgm ON students "
            "USING gin (arabic_name_normalized gin_trgm_ops)"
        )


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP INDEX IF EXISTS ix_students_arabic_name_trgm")
    op.drop_index("ix_students_arabic_name_normalized", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_dataset_generations_status", table_name="dataset_generations")
    op.drop_table("dataset_generations")
