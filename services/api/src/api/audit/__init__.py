"""
Audit-record lifecycle for the DKA audit API.

Second-stage patient hashing, audit identifier generation, the audit
record store, the deprivation lookup, the clinical calculator seam and
the calculate / update handlers that tie them together.
"""

from api.audit.calculate_handler import CalculateHandler, CalculateResult
from api.audit.hasher import PatientHasher
from api.audit.update_handler import UpdateHandler

__all__ = [
    "CalculateHandler",
    "CalculateResult",
    "PatientHasher",
    "UpdateHandler",
]
