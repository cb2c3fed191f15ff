"""
=============================================================================
SESSIONLOG - SECURITY MODULE
=============================================================================
Role model, per-request authentication context and client IP extraction.

Roles:
- ADMIN: Full access, including the user log (session audit) endpoints
- USER : Access to standard protected endpoints

The bearer token a client holds is never kept in process state: every
authenticated request gets its own AuthContext (see sessionlog.api.deps).
=============================================================================
"""

import ipaddress
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List
from uuid import UUID

from fastapi import Request

from sessionlog.core.config import settings

logger = logging.getLogger(__name__)

# Parsed trusted proxy networks (built once at import)
_trusted_networks: List[ipaddress.IPv4Network | ipaddress.IPv6Network] = []


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class AuthContext:
    """Identity claims and raw bearer token of the current request."""

    user_id: UUID
    role: str
    token: str


def _build_trusted_networks() -> None:
    """Parse TRUSTED_PROXIES setting into network objects."""
    global _trusted_networks
    nets = []
    for entry in settings.TRUSTED_PROXIES:
        try:
            nets.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            logger.warning("Invalid TRUSTED_PROXIES entry ignored: %s", entry)
    _trusted_networks = nets


_build_trusted_networks()


def normalize_ip(ip: str) -> str:
    """Collapse loopback and IPv4-mapped IPv6 forms into plain IPv4."""
    ip = ip.strip()
    if ip == "::1":
        return "127.0.0.1"
    if ip.lower().startswith("::ffff:"):
        return ip[len("::ffff:"):]
    return ip


def _is_trusted_proxy(ip_str: str) -> bool:
    try:
        addr = ipaddress.ip_address(normalize_ip(ip_str))
    except ValueError:
        return False
    return any(addr in net for net in _trusted_networks)


def get_client_ip(request: Request) -> str:
    """Extract client IP, trusting X-Forwarded-For only from trusted proxies."""
    direct_ip = normalize_ip(request.client.host) if request.client else "unknown"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and _is_trusted_proxy(direct_ip):
        parts = [normalize_ip(p) for p in forwarded.split(",") if p.strip()]
        # Rightmost untrusted IP is the real client
        for ip in reversed(parts):
            if not _is_trusted_proxy(ip):
                return ip
        # All IPs in chain are trusted, use leftmost
        if parts:
            return parts[0]

    return direct_ip
