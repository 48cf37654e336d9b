"""IP Weather Backend — Client IP extraction & reserved range checks"""

import re
import ipaddress
import logging
from typing import Mapping, Optional

from errors import InvalidClientIp

logger = logging.getLogger("ipweather.ip")

# Private (RFC1918), loopback, link-local and the 6to4 relay range.
# 172.16/12 is the only range that is not octet-aligned.
_IPV4_RESERVED = re.compile(
    r"^(10\..*|172\.(1[6-9]|2[0-9]|3[0-1])\..*|192\.168\..*|127\..*|169\.254\..*|192\.88\.99\..*)$"
)

# Link-local fe80::/10, loopback, unique-local (fc00::/7 approximated as fcXX:)
_IPV6_RESERVED = re.compile(r"^(fe[89ab][0-9a-f]:.*|::1|fc[0-9a-f]{2}:.*)$")

LOOPBACK_LITERALS = frozenset({"127.0.0.1", "::1", "localhost"})
_MAPPED_LOOPBACK_PREFIX = "::ffff:127."

# Checked in order, first non-empty value wins
_FORWARDING_HEADERS = ("cf-connecting-ip", "x-forwarded-for", "x-real-ip")


def is_reserved(ip: str) -> bool:
    """True if ``ip`` falls in a private, loopback or link-local range."""
    if _IPV4_RESERVED.match(ip):
        return True
    return bool(_IPV6_RESERVED.match(ip.lower()))


def _candidate_ip(headers: Mapping[str, str], peer: Optional[str]) -> str:
    for name in _FORWARDING_HEADERS:
        value = headers.get(name) or ""
        if name == "x-forwarded-for":
            # "client, proxy1, proxy2"
            value = value.split(",")[0]
        value = value.strip()
        if value:
            return value
    return (peer or "").strip()


def is_ip_literal(ip: str) -> bool:
    """True for a bare IPv4/IPv6 address, safe to put into the upstream URL path."""
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    # "fe80::1%eth0" parses, but the zone id is free text
    return getattr(addr, "scope_id", None) is None


def is_usable(ip: str) -> bool:
    if not ip or not is_ip_literal(ip):
        return False
    lowered = ip.lower()
    if lowered in LOOPBACK_LITERALS or lowered.startswith(_MAPPED_LOOPBACK_PREFIX):
        return False
    return not is_reserved(ip)


def extract_client_ip(headers: Mapping[str, str], peer: Optional[str], fallback_ip: str = "") -> str:
    """Pick the caller's address from proxy headers, falling back to the socket peer.

    Precedence is ``cf-connecting-ip``, the first ``x-forwarded-for`` entry,
    ``x-real-ip``, then the transport peer. ``headers`` must do
    case-insensitive lookups with lower-case keys (Starlette's ``Headers`` does).

    An empty, non-IP, loopback or reserved result raises :class:`InvalidClientIp`,
    unless ``fallback_ip`` is given, in which case that address is used instead.
    """
    ip = _candidate_ip(headers, peer)
    if is_usable(ip):
        return ip

    if fallback_ip:
        logger.warning(f"Client IP {ip!r} is not routable, using fallback {fallback_ip}")
        return fallback_ip

    logger.info(f"Rejecting request with unusable client IP {ip!r}")
    raise InvalidClientIp()
