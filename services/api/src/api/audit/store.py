"""
Audit record store for the DKA audit API.

Persists audit records to PostgreSQL and reads them back by audit ID.
Every call runs in its own session and commits atomically; a failed
call rolls back and re-raises, leaving no partial row behind.
Concurrent amendments of one record are last-writer-wins.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dka_common.db.orm_models import AuditRecordORM, ImdDecileORM
from dka_common.models.audit import AuditRecord
from dka_common.models.episode import AuditAmendment
from dka_common.utils import utc_now

logger = structlog.get_logger(__name__)


class AuditRecordStore(Protocol):
    """Persistence operations the audit handlers depend on."""

    async def lookup(self, audit_id: str) -> AuditRecord | None: ...

    async def exists(self, audit_id: str) -> bool: ...

    async def insert(self, record: AuditRecord) -> None: ...

    async def update(self, audit_id: str, amendment: AuditAmendment) -> bool: ...


class SqlAuditRecordStore:
    """SQLAlchemy-backed ``AuditRecordStore``.

    Parameters
    ----------
    session_factory:
        Callable returning an ``AsyncSession``.
    """

    def __init__(self, session_factory: Callable[..., Any]) -> None:
        self._session_factory = session_factory

    async def lookup(self, audit_id: str) -> AuditRecord | None:
        """Return the record for *audit_id*, or ``None``."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuditRecordORM).where(AuditRecordORM.audit_id == audit_id),
            )
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return AuditRecord.model_validate(row)

    async def exists(self, audit_id: str) -> bool:
        """Return ``True`` if a record already uses *audit_id*."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuditRecordORM.audit_id).where(AuditRecordORM.audit_id == audit_id),
            )
            return result.scalar_one_or_none() is not None

    async def insert(self, record: AuditRecord) -> None:
        """Write a new audit record in a single transaction."""
        orm_obj = AuditRecordORM(
            audit_id=record.audit_id,
            patient_hash=record.patient_hash,
            calculation_inputs=record.calculation_inputs,
            calculation_results=record.calculation_results,
            preventable_factors=record.preventable_factors,
            imd_decile=record.imd_decile,
            client_ip=record.client_ip,
            created_at=record.created_at,
            amended_at=None,
            amendment_count=0,
        )
        session: AsyncSession = self._session_factory()
        try:
            session.add(orm_obj)
            await session.commit()
            logger.info("audit_record_written", audit_id=record.audit_id)
        except Exception:
            await session.rollback()
            logger.exception("audit_record_write_failed", audit_id=record.audit_id)
            raise
        finally:
            await session.close()

    async def update(self, audit_id: str, amendment: AuditAmendment) -> bool:
        """Replace the outcome fields of *audit_id*.

        Only ``preventable_factors`` and the amendment bookkeeping are
        written; the identifier and patient hash columns are never part
        of the statement.

        Returns:
            ``False`` if no row matched *audit_id*.
        """
        stmt = (
            update(AuditRecordORM)
            .where(AuditRecordORM.audit_id == audit_id)
            .values(
                preventable_factors=list(amendment.preventable_factors),
                amended_at=utc_now(),
                amendment_count=AuditRecordORM.amendment_count + 1,
            )
        )
        session: AsyncSession = self._session_factory()
        try:
            result = await session.execute(stmt)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("audit_record_update_failed", audit_id=audit_id)
            raise
        finally:
            await session.close()

        updated = (result.rowcount or 0) > 0
        if updated:
            logger.info("audit_record_amended", audit_id=audit_id)
        return updated

    async def imd_decile_for_lsoa(self, lsoa_code: str) -> int | None:
        """Return the deprivation decile for an LSOA, or ``None`` if unknown."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ImdDecileORM.imd_decile).where(ImdDecileORM.lsoa_code == lsoa_code),
            )
            return result.scalar_one_or_none()
