"""Client identity derivation for rate limiting.

The service sits behind serverless/CDN proxies, so the forwarded headers are
preferred over the socket peer address.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from fastapi import Request

SESSION_HEADER = "X-Session-ID"
UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class ClientIdentity:
    """Rate-limit partition keys for one request.

    Attributes:
        client_key: Namespaced IP key (``ip:<address>``).
        session_key: Namespaced session key, from the session header or
            derived from IP and user agent.
        ip: Resolved client address.
        user_agent: Raw User-Agent header (may be empty).
    """

    client_key: str
    session_key: str
    ip: str
    user_agent: str


def _hash(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8", errors="ignore")).hexdigest()[:16]


def resolve_client_ip(request: Request) -> str:
    """Pick the client address: X-Forwarded-For, X-Real-IP, peer, ``unknown``."""

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


def resolve_client_identity(request: Request) -> ClientIdentity:
    """Build the rate-limit keys for the current request."""

    ip = resolve_client_ip(request)
    user_agent = request.headers.get("user-agent", "")

    session_id = (request.headers.get(SESSION_HEADER) or "").strip()
    if session_id:
        session_key = f"session:{session_id}"
    else:
        session_key = f"session:{_hash(f'{ip}|{user_agent}')}"

    return ClientIdentity(
        client_key=f"ip:{ip}",
        session_key=session_key,
        ip=ip,
        user_agent=user_agent,
    )


def hash_key(key: str) -> str:
    """Hash a limiter key for logging without exposing addresses or sessions."""

    return _hash(key)
