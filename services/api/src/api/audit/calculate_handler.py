"""
Calculate handler for the DKA audit API.

Runs a new episode submission through the clinical calculator and,
only when the calculator accepts it, creates the audit record: second-
stage patient hash, deprivation decile, fresh audit ID and a single
atomic insert. Nothing is persisted for a rejected submission.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import structlog

from api.audit.calculator import run_calculator
from api.audit.deprivation import DeprivationResolver, LookupStatus
from api.audit.hasher import PatientHasher
from api.audit.id_generator import AuditIdGenerator
from api.audit.store import AuditRecordStore
from dka_common.config import DeprivationFailurePolicy
from dka_common.errors import DeprivationLookupError, DomainError
from dka_common.metrics import audit_records_created_total
from dka_common.models.audit import AuditRecord
from dka_common.models.episode import EpisodeSubmission

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CalculateResult:
    """What the caller gets back: the new audit ID and the derived metrics."""

    audit_id: str
    calculations: dict[str, Any]


class CalculateHandler:
    """Create audit records for accepted episode submissions.

    Parameters
    ----------
    calculator:
        Clinical calculation collaborator.
    hasher:
        Second-stage patient hasher.
    id_generator:
        Source of fresh audit IDs.
    store:
        Audit record store.
    deprivation:
        Postcode deprivation resolver.
    deprivation_failure_policy:
        ``"ignore"`` stores a null decile when a supplied postcode cannot
        be resolved; ``"reject"`` fails the submission instead.
    """

    def __init__(
        self,
        *,
        calculator: Callable[..., Any],
        hasher: PatientHasher,
        id_generator: AuditIdGenerator,
        store: AuditRecordStore,
        deprivation: DeprivationResolver,
        deprivation_failure_policy: DeprivationFailurePolicy = "ignore",
    ) -> None:
        self._calculator = calculator
        self._hasher = hasher
        self._id_generator = id_generator
        self._store = store
        self._deprivation = deprivation
        self._failure_policy = deprivation_failure_policy

    async def create(
        self,
        submission: EpisodeSubmission,
        *,
        client_ip: str | None = None,
    ) -> CalculateResult:
        """Calculate, then persist one audit record.

        Raises:
            DomainError: The calculator reported errors; nothing persisted.
            DeprivationLookupError: Postcode unresolvable under ``reject``.
        """
        inputs = submission.calculation_inputs()

        outcome = run_calculator(self._calculator, inputs)
        if not outcome.ok:
            logger.info("calculation_rejected", error_count=len(outcome.errors))
            raise DomainError(outcome.errors)

        patient_hash = (
            self._hasher.derive(submission.patient_hash)
            if submission.patient_hash
            else None
        )

        lookup = await self._deprivation.resolve(submission.patient_postcode)
        if lookup.status is LookupStatus.UNAVAILABLE:
            if self._failure_policy == "reject":
                raise DeprivationLookupError()
            logger.warning("deprivation_decile_unavailable", policy=self._failure_policy)

        audit_id = await self._id_generator.generate()
        log = logger.bind(audit_id=audit_id)

        record = AuditRecord(
            audit_id=audit_id,
            patient_hash=patient_hash,
            calculation_inputs=inputs,
            calculation_results=outcome.results,
            preventable_factors=submission.preventable_factors,
            imd_decile=lookup.decile,
            client_ip=client_ip,
        )
        await self._store.insert(record)

        audit_records_created_total.labels(episode_type=submission.episode_type.value).inc()
        log.info(
            "audit_record_created",
            has_patient_hash=patient_hash is not None,
            deprivation=lookup.status.value,
        )
        return CalculateResult(audit_id=audit_id, calculations=outcome.results)
