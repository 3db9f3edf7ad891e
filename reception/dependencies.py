# reception/dependencies.py
"""
FastAPI dependencies shared by the routers: the audit emitter, request origin,
and the caller's identity resolved from the bearer token.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from reception.database import get_db
from reception.services.audit_service import AuditEmitter
from reception.services.auth_service import verify_identity
from reception.services.context import Identity, RequestOrigin
from reception.services.errors import AuthError

bearer = HTTPBearer(auto_error=False)

_audit_emitter = AuditEmitter()


def get_audit() -> AuditEmitter:
    """Overridden in tests to point the emitter at the test database."""
    return _audit_emitter


def get_origin(request: Request) -> RequestOrigin:
    return RequestOrigin.from_headers(request.headers, request.client.host if request.client else None)


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Identity:
    if not credentials:
        raise AuthError("Not authorized")
    identity = verify_identity(db, credentials.credentials)
    if not identity:
        raise AuthError("Not authorized")
    return identity
