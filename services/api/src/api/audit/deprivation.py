"""
Postcode deprivation lookup for the DKA audit API.

Resolves a patient postcode to an Index of Multiple Deprivation decile
in two steps: the postcodes.io geocoder maps the postcode to its LSOA
code, then the ``imd_deciles`` reference table maps the LSOA to a
decile. The lookup is best-effort contextual metadata; it reports an
outcome instead of raising, and the calculate handler decides what an
``unavailable`` outcome means.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol
from urllib.parse import quote

import httpx
import structlog
from sqlalchemy.exc import SQLAlchemyError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from dka_common.metrics import deprivation_lookups_total
from dka_common.utils import normalize_postcode

logger = structlog.get_logger(__name__)

_DEFAULT_MAX_ATTEMPTS = 3
_DEFAULT_TIMEOUT_S = 5.0


class LookupStatus(str, enum.Enum):
    """Outcome of a deprivation lookup."""

    RESOLVED = "resolved"
    NOT_PROVIDED = "not_provided"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class DeprivationLookup:
    """Result of resolving one postcode.

    Attributes:
        status: How the lookup ended.
        decile: IMD decile (1 most deprived, 10 least) when resolved.
    """

    status: LookupStatus
    decile: int | None = None

    @classmethod
    def not_provided(cls) -> DeprivationLookup:
        return cls(LookupStatus.NOT_PROVIDED)

    @classmethod
    def unavailable(cls) -> DeprivationLookup:
        return cls(LookupStatus.UNAVAILABLE)


class DeprivationResolver(Protocol):
    async def resolve(self, postcode: str | None) -> DeprivationLookup: ...


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


class PostcodesIoDeprivationResolver:
    """Resolve deprivation deciles via postcodes.io and the IMD table.

    Uses :mod:`httpx` for async HTTP and :mod:`tenacity` to retry
    transport errors and 5xx responses with exponential back-off.

    Args:
        decile_lookup: Coroutine function mapping an LSOA code to a decile.
        base_url: Geocoder base URL.
        max_attempts: Number of geocoder attempts (default 3).
        timeout: Per-request timeout in seconds (default 5).
    """

    def __init__(
        self,
        decile_lookup: Callable[[str], Awaitable[int | None]],
        *,
        base_url: str = "https://api.postcodes.io",
        max_attempts: int = _DEFAULT_MAX_ATTEMPTS,
        timeout: float = _DEFAULT_TIMEOUT_S,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._decile_lookup = decile_lookup
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Return (and lazily create) the shared ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _fetch_postcode(self, postcode: str) -> httpx.Response:
        """GET the geocoder record for *postcode* with retry.

        The retry decorator is built per call so ``max_attempts`` can be
        set at construction time.
        """

        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async def _inner() -> httpx.Response:
            client = await self._get_client()
            resp = await client.get(f"{self.base_url}/postcodes/{quote(postcode)}")
            if resp.status_code != 404:
                resp.raise_for_status()
            return resp

        return await _inner()

    async def lsoa_for_postcode(self, postcode: str) -> str | None:
        """Return the LSOA code for *postcode*, ``None`` if the geocoder has none."""
        resp = await self._fetch_postcode(postcode)
        if resp.status_code == 404:
            return None
        body: dict[str, Any] = resp.json()
        codes = (body.get("result") or {}).get("codes") or {}
        return codes.get("lsoa")

    async def resolve(self, postcode: str | None) -> DeprivationLookup:
        """Resolve *postcode* to a deprivation decile.

        Returns a ``not_provided`` outcome for a missing or blank postcode
        and ``unavailable`` when the geocoder or the reference table has
        no answer or fails, malformed geocoder bodies included.
        """
        if not postcode or not postcode.strip():
            return DeprivationLookup.not_provided()

        normalized = normalize_postcode(postcode)
        try:
            lsoa = await self.lsoa_for_postcode(normalized)
            decile = await self._decile_lookup(lsoa) if lsoa else None
        except (httpx.HTTPError, SQLAlchemyError, ValueError, AttributeError, TypeError) as exc:
            logger.warning("deprivation_lookup_failed", error=type(exc).__name__)
            deprivation_lookups_total.labels(outcome="error").inc()
            return DeprivationLookup.unavailable()

        if decile is None:
            logger.info("deprivation_decile_unknown", has_lsoa=lsoa is not None)
            deprivation_lookups_total.labels(outcome="unknown").inc()
            return DeprivationLookup.unavailable()

        deprivation_lookups_total.labels(outcome="resolved").inc()
        return DeprivationLookup(LookupStatus.RESOLVED, decile)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
