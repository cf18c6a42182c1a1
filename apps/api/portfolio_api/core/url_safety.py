"""URL safety guards for server-side job description fetches.

Every URL the API is about to contact (the submitted URL and each redirect
target) goes through ``validate_public_url`` first. Hostnames are resolved
and every returned address is checked, so a public-looking domain that points
at internal infrastructure is rejected before any request is made.
"""

from __future__ import annotations

import asyncio
import ipaddress
import socket
from typing import Protocol

import httpx
import structlog

logger = structlog.get_logger(__name__)

INVALID_URL_REASON = "Invalid URL format."
UNSUPPORTED_SCHEME_REASON = "Only HTTP and HTTPS URLs are supported."
BLOCKED_URL_REASON = "This URL is not allowed."
DNS_UNAVAILABLE_REASON = "DNS resolution unavailable - URL fetching disabled for security."

_ALLOWED_SCHEMES = {"http", "https"}

_BLOCKED_HOSTNAMES = {
    "localhost",
    "localhost.",
    "127.0.0.1",
    "0.0.0.0",
    "::1",
    "169.254.169.254",  # cloud metadata service
}

_BLOCKED_IPV4_NETWORKS: tuple[ipaddress.IPv4Network, ...] = tuple(
    ipaddress.IPv4Network(cidr)
    for cidr in (
        "127.0.0.0/8",  # loopback
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "169.254.0.0/16",  # link-local
        "100.64.0.0/10",  # carrier-grade NAT
        "0.0.0.0/8",  # "this network"
        "224.0.0.0/4",  # multicast
        "240.0.0.0/4",  # reserved
    )
)

_IPV6_LOOPBACK = ipaddress.IPv6Address("::1")
_BLOCKED_IPV6_NETWORKS: tuple[ipaddress.IPv6Network, ...] = (
    ipaddress.IPv6Network("fc00::/7"),  # unique local
    ipaddress.IPv6Network("fe80::/10"),  # link-local
)


class HostResolver(Protocol):
    """Capability that maps a hostname to every address it resolves to."""

    async def resolve(self, hostname: str) -> list[str]: ...


class SystemHostResolver:
    """Resolve A and AAAA records through the event loop's getaddrinfo."""

    def __init__(self, timeout: float) -> None:
        self._timeout = timeout

    async def resolve(self, hostname: str) -> list[str]:
        loop = asyncio.get_running_loop()
        async with asyncio.timeout(self._timeout):
            infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
        # Keep order, drop duplicates across address families/protocols.
        return list(dict.fromkeys(str(info[4][0]) for info in infos))


def _is_blocked_ipv4(ip: ipaddress.IPv4Address) -> bool:
    return any(ip in network for network in _BLOCKED_IPV4_NETWORKS)


def is_blocked_ip(address: str) -> bool:
    """Return True when address is an IP literal in a private/reserved range."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False

    if isinstance(ip, ipaddress.IPv4Address):
        return _is_blocked_ipv4(ip)

    # ::ffff:a.b.c.d and ::ffff:XXXX:XXXX both parse to the same mapped address.
    mapped = ip.ipv4_mapped
    if mapped is not None:
        return _is_blocked_ipv4(mapped)

    if ip.scope_id is not None:
        ip = ipaddress.IPv6Address(str(ip).split("%", 1)[0])
    if ip == _IPV6_LOOPBACK:
        return True
    return any(ip in network for network in _BLOCKED_IPV6_NETWORKS)


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


async def validate_public_url(url: str, host_resolver: HostResolver | None) -> str | None:
    """Return None when url is safe to contact, else a human-readable reason.

    Parsing uses httpx.URL so the host checked here is exactly the host the
    HTTP client will connect to.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError):
        return INVALID_URL_REASON

    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        return UNSUPPORTED_SCHEME_REASON

    hostname = parsed.host.strip().lower()
    if not hostname:
        return INVALID_URL_REASON

    if hostname in _BLOCKED_HOSTNAMES:
        logger.info("url_safety.blocked", reason="blocked_hostname", host=hostname)
        return BLOCKED_URL_REASON

    # httpx already strips the brackets from IPv6 literals.
    if hostname.startswith("[") and hostname.endswith("]"):
        hostname = hostname[1:-1]

    if _is_ip_literal(hostname):
        if is_blocked_ip(hostname):
            logger.info("url_safety.blocked", reason="private_ip", host=hostname)
            return BLOCKED_URL_REASON
        return None

    if host_resolver is None:
        logger.warning("url_safety.dns_unavailable", host=hostname)
        return DNS_UNAVAILABLE_REASON

    try:
        addresses = await host_resolver.resolve(hostname)
    except Exception as exc:
        logger.info("url_safety.blocked", reason="dns_failed", host=hostname, error=str(exc))
        return BLOCKED_URL_REASON

    if not addresses:
        logger.info("url_safety.blocked", reason="dns_empty", host=hostname)
        return BLOCKED_URL_REASON

    blocked = [
        address
        for address in addresses
        if not _is_ip_literal(address) or is_blocked_ip(address)
    ]
    if blocked:
        logger.info("url_safety.blocked", reason="private_dns", host=hostname, addresses=blocked)
        return BLOCKED_URL_REASON

    return None
