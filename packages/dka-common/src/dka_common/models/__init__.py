"""
Shared Pydantic data models for the DKA audit API.

This package contains the episode submission and amendment models
received over HTTP, and the audit record persisted for each episode.
"""

from dka_common.models.audit import AuditRecord
from dka_common.models.episode import (
    IDENTIFYING_FIELDS,
    OPTIONAL_LAB_FIELDS,
    AuditAmendment,
    EpisodeSubmission,
    EpisodeType,
    PatientSex,
)

__all__ = [
    "IDENTIFYING_FIELDS",
    "OPTIONAL_LAB_FIELDS",
    "AuditAmendment",
    "AuditRecord",
    "EpisodeSubmission",
    "EpisodeType",
    "PatientSex",
]
