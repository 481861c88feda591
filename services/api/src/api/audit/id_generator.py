"""
Audit identifier generation for the DKA audit API.

Identifiers are short enough to be read back over the phone or typed
into the update form: ten characters from an alphabet without the
easily confused ``0/O`` and ``1/I``. Each candidate is checked against
the store before it is handed out.
"""

from __future__ import annotations

import secrets

import structlog

from api.audit.store import AuditRecordStore
from dka_common.errors import InfrastructureError

logger = structlog.get_logger(__name__)

AUDIT_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DEFAULT_LENGTH = 10
DEFAULT_MAX_ATTEMPTS = 5


class AuditIdGenerator:
    """Produces audit identifiers that are not yet present in *store*.

    Parameters
    ----------
    store:
        Audit record store used for the collision check.
    length:
        Identifier length (default 10, about 50 bits of entropy).
    max_attempts:
        Candidates tried before giving up.
    """

    def __init__(
        self,
        store: AuditRecordStore,
        *,
        length: int = DEFAULT_LENGTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._store = store
        self._length = length
        self._max_attempts = max_attempts

    def candidate(self) -> str:
        """Return a random identifier without checking the store."""
        return "".join(secrets.choice(AUDIT_ID_ALPHABET) for _ in range(self._length))

    async def generate(self) -> str:
        """Return an identifier no existing record uses.

        Raises:
            InfrastructureError: If every attempt collided.
        """
        for attempt in range(1, self._max_attempts + 1):
            audit_id = self.candidate()
            if not await self._store.exists(audit_id):
                return audit_id
            logger.warning("audit_id_collision", attempt=attempt)
        raise InfrastructureError("Could not allocate a unique audit ID")
