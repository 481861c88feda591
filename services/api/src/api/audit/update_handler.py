"""
Update handler for the DKA audit API.

The identity gate in front of every amendment:

    NotFound --lookup--> Found --hash mismatch--> Rejected
                         Found --hash match-----> Amended

The lookup happens before any hashing, so an unknown audit ID says
nothing about the submitted pre-hash. A mismatch never mutates the
record. A match replaces the outcome fields; the audit ID and the
stored patient hash are never written on this path.
"""

from __future__ import annotations

import structlog

from api.audit.hasher import PatientHasher
from api.audit.store import AuditRecordStore
from dka_common.errors import AuditRecordNotFoundError, IdentityMismatchError
from dka_common.metrics import audit_updates_total
from dka_common.models.episode import AuditAmendment

logger = structlog.get_logger(__name__)

UPDATE_COMPLETE_MESSAGE = "Audit data update complete"


class UpdateHandler:
    """Apply verified amendments to existing audit records."""

    def __init__(self, *, store: AuditRecordStore, hasher: PatientHasher) -> None:
        self._store = store
        self._hasher = hasher

    async def amend(
        self,
        audit_id: str,
        patient_pre_hash: str,
        amendment: AuditAmendment,
    ) -> str:
        """Verify the patient identity for *audit_id* and apply *amendment*.

        Returns:
            The amended audit ID.

        Raises:
            AuditRecordNotFoundError: No record has this ID.
            IdentityMismatchError: The pre-hash does not match the record.
        """
        log = logger.bind(audit_id=audit_id)

        record = await self._store.lookup(audit_id)
        if record is None:
            audit_updates_total.labels(outcome="not_found").inc()
            log.info("audit_update_not_found")
            raise AuditRecordNotFoundError(audit_id)

        if not self._hasher.matches(patient_pre_hash, record.patient_hash):
            audit_updates_total.labels(outcome="identity_mismatch").inc()
            log.warning("audit_update_identity_mismatch", record_has_hash=record.patient_hash is not None)
            raise IdentityMismatchError(audit_id)

        if not await self._store.update(audit_id, amendment):
            audit_updates_total.labels(outcome="not_found").inc()
            log.warning("audit_update_row_vanished")
            raise AuditRecordNotFoundError(audit_id)

        audit_updates_total.labels(outcome="amended").inc()
        log.info("audit_update_applied", factor_count=len(amendment.preventable_factors))
        return audit_id
