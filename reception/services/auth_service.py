# reception/services/auth_service.py
"""
Operator authentication.
Passwords are stored as bcrypt hashes; sessions are stateless HS256 JWTs
valid for settings.TOKEN_EXPIRE_DAYS (7 days). Logout is audit-only.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from reception.config import settings
from reception.models.operator import Operator
from reception.services.audit_service import AuditAction, AuditEmitter
from reception.services.context import Identity, RequestOrigin
from reception.services.errors import AuthError, ConflictError, ValidationError
from reception.services.visitor_service import (
    CPF_MAX_DIGITS,
    EMAIL_MAX_LENGTH,
    EMAIL_RE,
    NAME_MAX_LENGTH,
    normalize_cpf,
)
from reception.utils.logger import get_logger

logger = get_logger(__name__)

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72   # bcrypt ignores anything past 72 bytes
INVALID_CREDENTIALS = "Invalid email or password"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def issue_token(operator_id: str, email: Optional[str] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.TOKEN_EXPIRE_DAYS)
    claims = {"sub": operator_id, "exp": expire}
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Claims of a valid, unexpired token, else None."""
    if not token:
        return None
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def identity_for(operator: Operator) -> Identity:
    return Identity(actor_id=operator.id, name=operator.name or operator.email,
                    cpf=operator.cpf, email=operator.email)


def verify_identity(db: Session, token: str) -> Optional[Identity]:
    claims = decode_token(token)
    if not claims or not claims.get("sub"):
        return None
    operator = db.query(Operator).filter(Operator.id == claims["sub"]).first()
    if not operator:
        return None
    return identity_for(operator)


def _validate_credentials(email: Optional[str], password: Optional[str]) -> str:
    email = (email or "").strip().lower()
    if len(email) > EMAIL_MAX_LENGTH or not EMAIL_RE.match(email):
        raise ValidationError("Invalid email")
    if len(password or "") < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must have at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must have at most {PASSWORD_MAX_BYTES} bytes")
    return email


def sign_up(db: Session, audit: AuditEmitter, email: str, password: str,
            name: Optional[str] = None, cpf: Optional[str] = None,
            origin: Optional[RequestOrigin] = None) -> tuple[Operator, str]:
    email = _validate_credentials(email, password)
    name = (name or "").strip() or None
    cpf = normalize_cpf(cpf) or None
    if name and len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must have at most {NAME_MAX_LENGTH} characters")
    if cpf and len(cpf) > CPF_MAX_DIGITS:
        raise ValidationError(f"CPF must have at most {CPF_MAX_DIGITS} digits")
    if db.query(Operator).filter(Operator.email == email).first():
        raise ConflictError("Email already in use")

    operator = Operator(email=email, name=name, cpf=cpf, password_hash=hash_password(password))
    db.add(operator)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Email already in use") from e

    identity = identity_for(operator)
    logger.info(f"[AUTH] Operator registered: {email}")
    audit.record(identity, AuditAction.REGISTER, "Operator account created",
                 target_id=operator.id, target_name=identity.name, origin=origin)
    return operator, issue_token(operator.id, operator.email)


def login(db: Session, audit: AuditEmitter, email: str, password: str,
          origin: Optional[RequestOrigin] = None) -> tuple[Operator, str]:
    email = (email or "").strip().lower()
    operator = db.query(Operator).filter(Operator.email == email).first()
    if not operator or not verify_password(password or "", operator.password_hash):
        logger.warning(f"[AUTH] Failed login for {email or '<empty>'}")
        audit.record(Identity(actor_id="anonymous", name=email or "unknown"), AuditAction.LOGIN,
                     "Login failed - invalid credentials", origin=origin)
        raise AuthError(INVALID_CREDENTIALS)

    identity = identity_for(operator)
    audit.record(identity, AuditAction.LOGIN, "Login successful", origin=origin)
    return operator, issue_token(operator.id, operator.email)


def logout(audit: AuditEmitter, actor: Identity, origin: Optional[RequestOrigin] = None):
    audit.record(actor, AuditAction.LOGOUT, "Logout successful", origin=origin)
