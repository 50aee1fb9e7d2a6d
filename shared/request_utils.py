"""
Request helpers for FastAPI handlers.

Takes an explicit ``Request`` parameter so every function is testable without
a running app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

_PROXY_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def normalize_ip(ip: str) -> str:
    """Strip the IPv4-mapped IPv6 prefix and map IPv6 loopback to 127.0.0.1."""
    ip = ip.strip()
    if ip.startswith("::ffff:"):
        ip = ip[len("::ffff:"):]
    if ip == "::1":
        ip = "127.0.0.1"
    return ip


def get_client_ip(request: Request) -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    Proxy headers are checked in order (Cloudflare, Akamai, X-Forwarded-For,
    X-Real-IP), taking the first address of a comma-separated list; the direct
    connection address is the fallback. The result is normalized.

    Returns:
        The resolved client IP string, or ``""`` if none can be found.
    """
    for header in _PROXY_HEADERS:
        value: Optional[str] = request.headers.get(header)
        if value:
            candidate = value.split(",")[0].strip()
            if candidate:
                return normalize_ip(candidate)

    return normalize_ip(request.client.host) if request.client else ""


def public_url(request: Request, path: Optional[str]) -> Optional[str]:
    """Turn a stored relative path like ``/uploads/x.png`` into an absolute URL."""
    if not path:
        return None
    return f"{str(request.base_url).rstrip('/')}{path}"
