"""initial schema

Revision ID: 3f9a2c71d0b4
Revises: 
Create Date: 2026-10-19 09:12:44.318207

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9a2c71d0b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "audit_records",
        sa.Column("audit_id", sa.String(36), primary_key=True),
        sa.Column("patient_hash", sa.String(64), nullable=True),
        sa.Column("calculation_inputs", postgresql.JSONB, nullable=False),
        sa.Column("calculation_results", postgresql.JSONB, nullable=False),
        sa.Column("preventable_factors", postgresql.JSONB, nullable=True),
        sa.Column("imd_decile", sa.SmallInteger, nullable=True),
        sa.Column("client_ip", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("amended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("amendment_count", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "imd_deciles",
        sa.Column("lsoa_code", sa.String(9), primary_key=True),
        sa.Column("imd_decile", sa.SmallInteger, nullable=False),
        sa.CheckConstraint("imd_decile BETWEEN 1 AND 10", name="ck_imd_deciles_range"),
    )


def downgrade() -> None:
    op.drop_table("imd_deciles")
    op.drop_table("audit_records")
