# reception/services/audit_service.py
"""
Audit trail for every operator action.
The visitor service decides first, commits or rolls back, and only then hands an
AuditEvent to the emitter. The emitter writes it in its own session; a failed
write is logged and dropped so it can never change the outcome of the action.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session
from reception.database import SessionLocal
from reception.models.audit_entry import AuditEntry
from reception.services.context import Identity, RequestOrigin
from reception.utils.logger import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 1000
DEFAULT_PAGE_SIZE = 100


def _fit(column, value: Optional[str]) -> Optional[str]:
    """Cut `value` to the VARCHAR width of `column`; the store rejects longer strings."""
    if value is None:
        return None
    return value[:column.type.length]


class AuditAction:
    # Authentication
    LOGIN = "login"
    LOGOUT = "logout"
    REGISTER = "register"

    # Visitors
    CREATE_VISITOR = "create_visitor"
    CHECKIN_VISITOR = "checkin_visitor"
    CHECKOUT_VISITOR = "checkout_visitor"
    DELETE_VISITOR = "delete_visitor"
    SEARCH_VISITORS = "search_visitors"
    VIEW_HISTORY = "view_history"

    # System
    ACCESS_CONTROLE = "access_controle"
    VIEW_SYSTEM_LOGS = "view_system_logs"


@dataclass(frozen=True)
class AuditEvent:
    actor: Identity
    action: str
    detail: str
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    origin: Optional[RequestOrigin] = None


class AuditEmitter:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def record(self, actor: Identity, action: str, detail: str,
               target_id: Optional[str] = None, target_name: Optional[str] = None,
               origin: Optional[RequestOrigin] = None) -> bool:
        return self.emit(AuditEvent(actor=actor, action=action, detail=detail,
                                    target_id=target_id, target_name=target_name, origin=origin))

    def emit(self, event: AuditEvent) -> bool:
        """Persist one audit row. Returns False (never raises) when the write fails."""
        origin = event.origin or RequestOrigin()
        try:
            with self.session_factory() as db:
                db.add(AuditEntry(
                    actor_id=_fit(AuditEntry.actor_id, event.actor.actor_id),
                    actor_name=_fit(AuditEntry.actor_name, event.actor.name),
                    actor_cpf=_fit(AuditEntry.actor_cpf, event.actor.cpf),
                    action=event.action,
                    target_id=_fit(AuditEntry.target_id, event.target_id),
                    target_name=_fit(AuditEntry.target_name, event.target_name),
                    detail=event.detail,
                    ip_address=_fit(AuditEntry.ip_address, origin.ip_address),
                    user_agent=_fit(AuditEntry.user_agent, origin.user_agent),
                ))
                db.commit()
        except Exception as e:
            logger.error(f"[AUDIT] Failed to record {event.action} by {event.actor.actor_id}: {e}", exc_info=True)
            return False

        logger.info(f"[AUDIT] {event.action} - {event.actor.name} - {event.detail}")
        return True


def list_entries(db: Session, action: Optional[str] = None, actor_id: Optional[str] = None,
                 limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> dict:
    """Newest-first page of audit entries with optional action / actor filters."""
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)

    q = db.query(AuditEntry)
    if action:
        q = q.filter(AuditEntry.action == action)
    if actor_id:
        q = q.filter(AuditEntry.actor_id == actor_id)

    total = q.count()
    entries = (
        q.order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {
        "entries": entries,
        "total": total,
        "limit": limit,
        "offset": offset,
        "has_more": offset + len(entries) < total,
    }
