"""
SQLAlchemy ORM models for the DKA audit API.

Defines the database table mappings for audit records and the
LSOA-to-deprivation-decile reference table using SQLAlchemy 2.0
declarative style with ``Mapped`` / ``mapped_column``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Integer, SmallInteger, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    """Return timezone-aware UTC now for server defaults."""
    return datetime.now(timezone.utc)


# ── Base class ──


class Base(DeclarativeBase):
    """Declarative base for all audit API ORM models."""


# ── ORM models ──


class AuditRecordORM(Base):
    """ORM model for the ``audit_records`` table.

    ``audit_id`` and ``patient_hash`` are written once by the insert;
    the amendment path only ever touches the outcome columns.
    """

    __tablename__ = "audit_records"

    audit_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    patient_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    calculation_inputs: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    calculation_results: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    preventable_factors: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    imd_decile: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    client_ip: Mapped[str | None] = mapped_column(String(45), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now,
    )
    amended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    amendment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ImdDecileORM(Base):
    """ORM model for the ``imd_deciles`` reference table."""

    __tablename__ = "imd_deciles"

    lsoa_code: Mapped[str] = mapped_column(String(9), primary_key=True)
    imd_decile: Mapped[int] = mapped_column(SmallInteger, nullable=False)
