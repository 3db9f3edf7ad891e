# reception/routers/audit_logs.py
"""Audit log viewer - newest first, filterable by action and actor, offset-paginated."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from reception.database import get_db
from reception.dependencies import get_audit, get_identity, get_origin
from reception.schemas.audit_entry import AuditPage
from reception.services import audit_service
from reception.services.audit_service import AuditAction, AuditEmitter
from reception.services.context import Identity, RequestOrigin

router = APIRouter()


@router.get("/audit-logs", response_model=AuditPage, summary="Audit entries, newest first")
def get_audit_logs(action: Optional[str] = None,
                   actor_id: Optional[str] = None,
                   limit: int = audit_service.DEFAULT_PAGE_SIZE,
                   offset: int = 0,
                   db: Session = Depends(get_db),
                   audit: AuditEmitter = Depends(get_audit),
                   actor: Identity = Depends(get_identity),
                   origin: RequestOrigin = Depends(get_origin)):
    """`limit` is clamped to 1..1000 (default 100)."""
    page = audit_service.list_entries(db, action=action, actor_id=actor_id, limit=limit, offset=offset)
    audit.record(actor, AuditAction.VIEW_SYSTEM_LOGS,
                 f"System logs accessed - {len(page['entries'])} of {page['total']} records", origin=origin)
    return page
