"""Client key derivation for rate limiting.

The key is the client's IP address as best we can tell. Resolution order:

1. First address listed in ``X-Forwarded-For``
2. ``X-Real-IP``
3. Transport peer address
4. The literal sentinel ``"unknown"``

Forwarded headers are set by whoever sent the request, so steps 1 and 2 are
only taken when the transport peer is one of the configured trusted proxies.
Configure ``"*"`` to trust every peer (useful behind a platform proxy whose
address range is not known in advance).
"""

from __future__ import annotations

from ipaddress import IPv4Network, IPv6Network, ip_address, ip_network
from typing import Iterable

from fastapi import Request

UNKNOWN_CLIENT = "unknown"
TRUST_ALL = "*"


def parse_trusted_proxies(value: str | None) -> list[str]:
    """Split a comma-separated CIDR list into trimmed, non-empty entries.

    Examples:
        >>> parse_trusted_proxies("10.0.0.0/8, 127.0.0.1")
        ['10.0.0.0/8', '127.0.0.1']
        >>> parse_trusted_proxies(None)
        []
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class ClientKeyResolver:
    """Derive a rate limit key from request metadata."""

    def __init__(self, trusted_proxies: Iterable[str] = ()) -> None:
        """Build a resolver.

        Args:
            trusted_proxies: CIDRs or single addresses whose forwarded
                headers are honoured, or ``"*"`` to trust every peer.

        Raises:
            ValueError: If an entry is not a valid network.
        """
        entries = list(trusted_proxies)
        self._trust_all = TRUST_ALL in entries
        self._networks: list[IPv4Network | IPv6Network] = [
            ip_network(entry, strict=False) for entry in entries if entry != TRUST_ALL
        ]

    def is_trusted_peer(self, peer: str | None) -> bool:
        if self._trust_all:
            return True
        if not peer:
            return False
        try:
            addr = ip_address(peer)
        except ValueError:
            return False
        return any(addr in net for net in self._networks)

    def resolve(
        self,
        *,
        forwarded_for: str | None,
        real_ip: str | None,
        peer: str | None,
    ) -> str:
        """Return the client key for the given header values and peer address."""
        if self.is_trusted_peer(peer):
            if forwarded_for:
                first = forwarded_for.split(",")[0].strip()
                if first:
                    return first
            if real_ip and real_ip.strip():
                return real_ip.strip()

        return peer or UNKNOWN_CLIENT

    def resolve_request(self, request: Request) -> str:
        return self.resolve(
            forwarded_for=request.headers.get("x-forwarded-for"),
            real_ip=request.headers.get("x-real-ip"),
            peer=request.client.host if request.client else None,
        )
