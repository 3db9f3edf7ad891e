# reception/routers/visitors.py
"""Visitor lifecycle endpoints: register, check-in, check-out, delete, list, search, history."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from reception.database import get_db
from reception.dependencies import get_audit, get_identity, get_origin
from reception.schemas.visitor import (
    HistoryOut,
    VisitorCreate,
    VisitorDeleted,
    VisitorList,
    VisitorResponse,
)
from reception.services import visitor_service
from reception.services.audit_service import AuditEmitter
from reception.services.context import Identity, RequestOrigin

router = APIRouter()


@router.post("/visitors", response_model=VisitorResponse, status_code=status.HTTP_201_CREATED,
             summary="Register a visitor and check them in")
def register_visitor(body: VisitorCreate,
                     db: Session = Depends(get_db),
                     audit: AuditEmitter = Depends(get_audit),
                     actor: Identity = Depends(get_identity),
                     origin: RequestOrigin = Depends(get_origin)):
    visitor = visitor_service.register_visitor(
        db, audit, actor,
        name=body.name, cpf=body.cpf, room=body.room,
        birth_date=body.birth_date, email=body.email, origin=origin,
    )
    return {"visitor": visitor}


@router.get("/visitors", response_model=VisitorList, summary="List visits, newest check-in first")
def list_visitors(active_only: bool = False,
                  db: Session = Depends(get_db),
                  audit: AuditEmitter = Depends(get_audit),
                  actor: Identity = Depends(get_identity),
                  origin: RequestOrigin = Depends(get_origin)):
    return {"visitors": visitor_service.list_visitors(db, audit, actor, active_only=active_only, origin=origin)}


@router.get("/visitors/search", response_model=VisitorList, summary="Latest visit per CPF matching a fragment")
def search_visitors(cpf: str = "",
                    db: Session = Depends(get_db),
                    audit: AuditEmitter = Depends(get_audit),
                    actor: Identity = Depends(get_identity),
                    origin: RequestOrigin = Depends(get_origin)):
    return {"visitors": visitor_service.search_visitors(db, audit, actor, cpf, origin=origin)}


@router.get("/visitors/history", response_model=HistoryOut, summary="Every visit with status and duration")
def visit_history(db: Session = Depends(get_db),
                  audit: AuditEmitter = Depends(get_audit),
                  actor: Identity = Depends(get_identity),
                  origin: RequestOrigin = Depends(get_origin)):
    return visitor_service.visit_history(db, audit, actor, origin=origin)


@router.post("/visitors/{visitor_id}/checkin", response_model=VisitorResponse,
             status_code=status.HTTP_201_CREATED, summary="Start a new visit from an existing profile")
def check_in_visitor(visitor_id: str,
                     db: Session = Depends(get_db),
                     audit: AuditEmitter = Depends(get_audit),
                     actor: Identity = Depends(get_identity),
                     origin: RequestOrigin = Depends(get_origin)):
    return {"visitor": visitor_service.check_in_visitor(db, audit, actor, visitor_id, origin=origin)}


@router.post("/visitors/{visitor_id}/checkout", response_model=VisitorResponse, summary="Close an active visit")
def check_out_visitor(visitor_id: str,
                      db: Session = Depends(get_db),
                      audit: AuditEmitter = Depends(get_audit),
                      actor: Identity = Depends(get_identity),
                      origin: RequestOrigin = Depends(get_origin)):
    return {"visitor": visitor_service.check_out_visitor(db, audit, actor, visitor_id, origin=origin)}


@router.delete("/visitors/{visitor_id}", response_model=VisitorDeleted, summary="Delete a finished visit")
def delete_visitor(visitor_id: str,
                   db: Session = Depends(get_db),
                   audit: AuditEmitter = Depends(get_audit),
                   actor: Identity = Depends(get_identity),
                   origin: RequestOrigin = Depends(get_origin)):
    deleted = visitor_service.delete_visitor(db, audit, actor, visitor_id, origin=origin)
    return {"message": "Visitor deleted", "deleted_visitor": deleted}
