"""
Audit record data model for the DKA audit API.

Defines the Pydantic model for one persisted episode submission: the
validated inputs, the calculator's results, the second-stage patient
hash and the outcome fields a verified update may amend.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


class AuditRecord(BaseModel):
    """One audited DKA episode.

    ``audit_id`` and ``patient_hash`` are write-once; only the outcome
    fields (``preventable_factors``) and the amendment bookkeeping change
    after creation.

    Attributes:
        audit_id: Unique identifier, the sole lookup key for updates.
        patient_hash: SHA-256 of pre-hash plus pepper, or ``None`` when no
            pre-hash was submitted.
        calculation_inputs: Submitted inputs, identifying fields removed.
        calculation_results: Metrics returned by the clinical calculator.
        preventable_factors: Outcome field replaced by verified updates.
        imd_decile: Deprivation decile for the patient's postcode.
        client_ip: Originating client address.
        created_at: Creation timestamp (UTC).
        amended_at: Time of the most recent successful update.
        amendment_count: Number of successful updates.
    """

    model_config = {"from_attributes": True}

    audit_id: str = Field(..., min_length=1, max_length=36, description="Unique audit identifier.")
    patient_hash: str | None = Field(
        default=None,
        min_length=64,
        max_length=64,
        description="Second-stage SHA-256 patient hash.",
    )
    calculation_inputs: dict[str, Any] = Field(..., description="Validated submission.")
    calculation_results: dict[str, Any] = Field(..., description="Derived clinical metrics.")
    preventable_factors: list[str] | None = Field(default=None)
    imd_decile: int | None = Field(default=None, ge=1, le=10)
    client_ip: str | None = Field(default=None, max_length=45)
    created_at: datetime = Field(default_factory=_utc_now)
    amended_at: datetime | None = None
    amendment_count: int = Field(default=0, ge=0)

    @property
    def amended(self) -> bool:
        """``True`` once at least one verified update has been applied."""
        return self.amendment_count > 0
