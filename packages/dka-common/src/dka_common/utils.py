"""
Shared utility functions for the DKA audit API.

Contains general-purpose helpers used by the API service and the
maintenance scripts: client address resolution behind reverse
proxies, postcode normalisation and timestamp helpers.
"""

from __future__ import annotations

import ipaddress
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_postcode(postcode: str) -> str:
    """Upper-case a UK postcode and strip all whitespace.

    ``"sw1a 1aa "`` becomes ``"SW1A1AA"``.
    """
    return "".join(postcode.split()).upper()


def resolve_client_ip(
    forwarded_for: str | None,
    peer: str | None,
    trusted_hops: int,
) -> str | None:
    """Return the originating client address of a request.

    The address chain is every ``X-Forwarded-For`` entry followed by the
    socket peer. Walking from the right, the last *trusted_hops* entries
    belong to our own proxies; the entry before them is the client. With
    no trusted hops the socket peer is used. A candidate that is not a
    valid IP address falls back to the socket peer, then to ``None``.

    Args:
        forwarded_for: Raw ``X-Forwarded-For`` header value, if any.
        peer: Address of the directly connected socket peer.
        trusted_hops: Number of reverse proxies in front of the service.

    Returns:
        The client address, or ``None`` when no valid address is known.
    """
    chain = [a.strip() for a in (forwarded_for or "").split(",") if a.strip()]
    if peer:
        chain.append(peer)
    fallback = _valid_ip(peer)
    if not chain or trusted_hops <= 0:
        return fallback
    index = len(chain) - 1 - trusted_hops
    return _valid_ip(chain[max(index, 0)]) or fallback


def _valid_ip(candidate: str | None) -> str | None:
    if not candidate:
        return None
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None
