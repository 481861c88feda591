"""
Error hierarchy for the DKA audit API.

Every error carries a machine-readable ``kind``, the HTTP status it maps
to, a caller-safe ``message`` and optional structured ``details``. The
API layer renders all of them through one envelope, see ``to_dict``.
"""

from __future__ import annotations

from typing import Any


class DkaAuditError(Exception):
    """Base exception for all audit API errors."""

    kind: str = "error"
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to the JSON error envelope."""
        body: dict[str, Any] = {"kind": self.kind, "message": self.message}
        body.update(self.details)
        return body


class SubmissionValidationError(DkaAuditError):
    """Request body failed field shape/type validation."""

    kind = "validation_error"
    status_code = 400

    def __init__(self, errors: list[Any]) -> None:
        super().__init__("Submission failed validation", {"errors": list(errors)})
        self.errors = list(errors)


class DomainError(DkaAuditError):
    """The clinical calculator rejected the episode inputs."""

    kind = "domain_error"
    status_code = 400

    def __init__(self, errors: list[Any]) -> None:
        super().__init__("Episode inputs are clinically inconsistent", {"errors": list(errors)})
        self.errors = list(errors)


class AuditRecordNotFoundError(DkaAuditError):
    """No audit record exists for the requested identifier."""

    kind = "not_found"
    status_code = 404

    def __init__(self, audit_id: str) -> None:
        super().__init__(f"Audit ID not found in database: {audit_id}")
        self.audit_id = audit_id


class IdentityMismatchError(DkaAuditError):
    """The resubmitted patient identity does not match the stored one."""

    kind = "identity_mismatch"
    status_code = 401

    def __init__(self, audit_id: str) -> None:
        super().__init__(
            "Patient NHS number or date of birth do not match for episode "
            f"with audit ID: {audit_id}",
        )
        self.audit_id = audit_id


class InfrastructureError(DkaAuditError):
    """A collaborator or storage failure; detail is logged, not returned."""

    kind = "infrastructure_error"
    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)


class DeprivationLookupError(InfrastructureError):
    """A supplied postcode could not be resolved under the ``reject`` policy."""

    def __init__(self) -> None:
        super().__init__("Deprivation decile could not be resolved for the supplied postcode")


class ConfigurationError(DkaAuditError):
    """The process is misconfigured; raised at start-up only."""

    kind = "configuration_error"
    status_code = 500
