"""
Episode API schemas for the DKA audit API.

Pydantic request/response models for ``POST /calculate`` and
``POST /update``, plus the error envelope shared by every error
response. Wire names are camelCase.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dka_common.models.episode import AuditAmendment, EpisodeSubmission


class CalculateRequest(EpisodeSubmission):
    """Body of ``POST /calculate``."""


class CalculateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audit_id: str = Field(..., alias="auditID")
    calculations: dict[str, Any]


class UpdateRequest(AuditAmendment):
    """Body of ``POST /update``: identity plus the replacement outcome fields."""

    audit_id: str = Field(..., alias="auditID", min_length=1, max_length=36)
    patient_hash: str = Field(..., min_length=1, max_length=128)

    def amendment(self) -> AuditAmendment:
        return AuditAmendment(preventable_factors=self.preventable_factors)


class UpdateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audit_id: str = Field(..., alias="auditID")
    message: str


class ErrorEnvelope(BaseModel):
    kind: str
    message: str
    errors: list[Any] | None = None
