# reception/routers/auth.py
"""Operator sign-up, login and logout. Tokens go back in the body, not in cookies."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from reception.database import get_db
from reception.dependencies import get_audit, get_identity, get_origin
from reception.schemas.operator import IdentityOut, LoginRequest, SignUpRequest, TokenResponse
from reception.services import auth_service
from reception.services.audit_service import AuditEmitter
from reception.services.context import Identity, RequestOrigin

router = APIRouter()


@router.post("/auth/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED,
             summary="Create an operator account")
def register(body: SignUpRequest,
             db: Session = Depends(get_db),
             audit: AuditEmitter = Depends(get_audit),
             origin: RequestOrigin = Depends(get_origin)):
    operator, token = auth_service.sign_up(db, audit, body.email, body.password,
                                           name=body.name, cpf=body.cpf, origin=origin)
    return {"operator": operator, "access_token": token}


@router.post("/auth/login", response_model=TokenResponse, summary="Exchange credentials for a 7-day token")
def login(body: LoginRequest,
          db: Session = Depends(get_db),
          audit: AuditEmitter = Depends(get_audit),
          origin: RequestOrigin = Depends(get_origin)):
    operator, token = auth_service.login(db, audit, body.email, body.password, origin=origin)
    return {"operator": operator, "access_token": token}


@router.post("/auth/logout", summary="Record a logout")
def logout(audit: AuditEmitter = Depends(get_audit),
           actor: Identity = Depends(get_identity),
           origin: RequestOrigin = Depends(get_origin)):
    auth_service.logout(audit, actor, origin=origin)
    return {"status": "logged_out"}


@router.get("/auth/me", response_model=IdentityOut, summary="Identity behind the bearer token")
def me(actor: Identity = Depends(get_identity)):
    return asdict(actor)
