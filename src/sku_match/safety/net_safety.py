"""Outbound URL guard: only public http(s) targets may be fetched."""

from __future__ import annotations

import ipaddress
import re
import socket
from urllib.parse import urlsplit

_ALLOWED_SCHEMES = {"http", "https"}
_BLOCKED_HOSTS = {"localhost", "169.254.169.254", "metadata.google.internal"}

# All-numeric or hex hosts, including shorthand forms such as 127.1 or 0x7f000001
_NUMERIC_HOST_RE = re.compile(r"^(0x[0-9a-f]*|[0-9]+)(\.(0x[0-9a-f]*|[0-9]+)){0,3}$", re.IGNORECASE)


def domain_of(url: str) -> str:
    """Best-effort lowercase hostname; ``""`` when the URL cannot be parsed."""
    try:
        return urlsplit(url).hostname or ""
    except (TypeError, ValueError, AttributeError):
        return ""


def _canonical_ipv4(host: str) -> str | None:
    """Dotted-quad form of a numeric host, ``""`` if it is not a valid address, None for names."""
    if not _NUMERIC_HOST_RE.match(host):
        return None
    try:
        return socket.inet_ntoa(socket.inet_aton(host))
    except OSError:
        return ""


def _is_internal_ip(host: str) -> bool:
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
    )


def is_safe_public_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
        # Accessing .port validates it and raises ValueError when malformed
        parts.port
    except (TypeError, ValueError, AttributeError):
        return False

    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        return False

    host = (parts.hostname or "").rstrip(".")
    if not host:
        return False
    numeric = _canonical_ipv4(host)
    if numeric is not None:
        if not numeric:
            return False
        host = numeric
    if host in _BLOCKED_HOSTS or host.endswith(".localhost"):
        return False
    if host.endswith(".local"):
        return False
    if _is_internal_ip(host):
        return False
    return True


def is_allowlisted(url: str, allow_domains: list[str]) -> bool:
    """An empty allowlist admits every domain."""
    if not allow_domains:
        return True
    return domain_of(url) in allow_domains
