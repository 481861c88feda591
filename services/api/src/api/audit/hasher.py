"""
Second-stage patient hasher for the DKA audit API.

Clients never send a raw patient identifier. They send a first-stage
hash (the "pre-hash") of NHS number and date of birth. The server
appends its secret pepper and hashes again with SHA-256; only that
second-stage value is stored and compared, so the pre-hash alone is
not enough to forge a match.
"""

from __future__ import annotations

import hashlib
import hmac

from dka_common.errors import ConfigurationError

_NULL_DIGEST = b"0" * 64


def derive_server_hash(pre_hash: str, pepper: str) -> str:
    """SHA-256 hex digest of *pre_hash* followed by *pepper*."""
    return hashlib.sha256((pre_hash + pepper).encode("utf-8")).hexdigest()


class PatientHasher:
    """Derives and verifies second-stage patient hashes.

    Parameters
    ----------
    pepper:
        Server-held secret. Must be non-empty.
    """

    def __init__(self, pepper: str) -> None:
        if not pepper:
            raise ConfigurationError("Patient hash pepper is not configured")
        self._pepper = pepper

    def derive(self, pre_hash: str) -> str:
        """Return the stored form of *pre_hash*."""
        return derive_server_hash(pre_hash, self._pepper)

    def matches(self, pre_hash: str, stored_hash: str | None) -> bool:
        """Check *pre_hash* against a stored second-stage hash.

        The comparison is constant-time over the full digest. A record
        stored without a hash never matches; the derivation still runs
        so both outcomes cost the same.
        """
        candidate = self.derive(pre_hash).encode("ascii")
        if stored_hash is None:
            hmac.compare_digest(candidate, _NULL_DIGEST)
            return False
        return hmac.compare_digest(candidate, stored_hash.encode("utf-8"))

    def __repr__(self) -> str:
        return "PatientHasher(pepper=***)"
