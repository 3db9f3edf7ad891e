# reception/services/context.py
"""
Explicit per-request context passed into every service call:
who is acting (Identity) and where the request came from (RequestOrigin).
"""

from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class Identity:
    actor_id: str
    name: str
    cpf: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class RequestOrigin:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], client_host: Optional[str] = None) -> "RequestOrigin":
        """Best-effort client address: proxy headers first, then the socket peer."""
        forwarded = headers.get("x-forwarded-for")
        ip = (
            (forwarded.split(",")[0].strip() if forwarded else None)
            or headers.get("x-real-ip")
            or headers.get("cf-connecting-ip")
            or client_host
            or "unknown"
        )
        return cls(ip_address=ip, user_agent=headers.get("user-agent") or "unknown")
