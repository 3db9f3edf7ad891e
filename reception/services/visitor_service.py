# reception/services/visitor_service.py
"""
Visit lifecycle: register, check-in, check-out, delete, plus the read views.

States per cpf: no active visit → active → no active visit → ...
  - register / check-in INSERT a new visitors row (a repeat visit clones the
    old profile into a fresh row; old rows are never reopened)
  - check-out sets check_out_at exactly once
  - delete is only allowed once check_out_at is set

Capacity and duplicate-active checks run after occupancy_service.lock_room()
in the same transaction as the INSERT. The partial unique index on
visitors(cpf) WHERE check_out_at IS NULL backs up the duplicate check.

Every command writes exactly one audit entry, for successes and rejections
alike, after its transaction has been committed or rolled back.
"""

import re
from datetime import date
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from reception.config import settings
from reception.models.visitor import Visitor
from reception.services.audit_service import AuditAction, AuditEmitter
from reception.services.context import Identity, RequestOrigin
from reception.services.errors import (
    ActiveVisitorError,
    AlreadyActiveError,
    AlreadyCheckedOutError,
    CapacityError,
    InternalError,
    NotFoundError,
    ReceptionError,
    ValidationError,
)
from reception.services.occupancy_service import is_full, lock_room
from reception.utils.logger import get_logger
from reception.utils.timeutils import utcnow

logger = get_logger(__name__)

T = TypeVar("T")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CPF_MIN_DIGITS = 10
CPF_MAX_DIGITS = 14
NAME_MAX_LENGTH = 200     # visitors.name
EMAIL_MAX_LENGTH = 254    # visitors.email

STATUS_ACTIVE = "Active"
STATUS_CHECKOUT = "Checkout"


def normalize_cpf(raw: Optional[str]) -> str:
    """Keep digits only: '123.456.789-01' -> '12345678901'."""
    return re.sub(r"\D", "", raw or "")


def validate_profile(name: Optional[str], cpf: Optional[str], room: Optional[str],
                     email: Optional[str] = None) -> dict:
    """Clean and check visitor input. Returns the normalized fields or raises ValidationError."""
    name = (name or "").strip()
    digits = normalize_cpf(cpf)
    room = (room or "").strip()
    email = (email or "").strip() or None

    if not name:
        raise ValidationError("Name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must have at most {NAME_MAX_LENGTH} characters")
    if not CPF_MIN_DIGITS <= len(digits) <= CPF_MAX_DIGITS:
        raise ValidationError(f"CPF must have between {CPF_MIN_DIGITS} and {CPF_MAX_DIGITS} digits")
    if not room:
        raise ValidationError("Destination room is required")
    if room not in settings.ROOMS:
        raise ValidationError(f"Unknown room '{room}'. Valid rooms: {', '.join(settings.ROOMS)}")
    if email and len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"Email must have at most {EMAIL_MAX_LENGTH} characters")
    if email and not EMAIL_RE.match(email):
        raise ValidationError("Invalid email")
    return {"name": name, "cpf": digits, "room": room, "email": email}


def visitor_snapshot(visitor: Visitor) -> dict:
    return {
        "id": visitor.id,
        "name": visitor.name,
        "cpf": visitor.cpf,
        "room": visitor.room,
        "birth_date": visitor.birth_date,
        "email": visitor.email,
        "check_in_at": visitor.check_in_at,
        "check_out_at": visitor.check_out_at,
        "created_at": visitor.created_at,
    }


def duration_hours(visitor: Visitor) -> Optional[float]:
    """Visit length in hours, two decimals; None while the visit is still open."""
    if visitor.check_out_at is None:
        return None
    return round((visitor.check_out_at - visitor.check_in_at).total_seconds() / 3600, 2)


def _in_transaction(db: Session, work: Callable[[], T]) -> T:
    """Run `work` and commit. Any failure rolls back; store errors surface as InternalError."""
    try:
        result = work()
        db.commit()
    except ReceptionError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Visitor store failure: {e}", exc_info=True)
        raise InternalError() from e
    return result


def _active_visit_for(db: Session, cpf: str) -> Optional[Visitor]:
    return (
        db.query(Visitor)
        .filter(Visitor.cpf == cpf, Visitor.check_out_at.is_(None))
        .first()
    )


def _open_visit(db: Session, name: str, cpf: str, room: str,
                birth_date: Optional[date], email: Optional[str]) -> Visitor:
    """INSERT a new active visit. Caller owns the transaction."""
    capacity = lock_room(db, room)

    active = _active_visit_for(db, cpf)
    if active:
        raise AlreadyActiveError(f"Visitor {active.name} already has an active check-in in {active.room}")
    if is_full(db, room, capacity):
        raise CapacityError(f"{room} already has {capacity} active visitors. Maximum reached.")

    now = utcnow()
    visitor = Visitor(name=name, cpf=cpf, room=room, birth_date=birth_date, email=email,
                      check_in_at=now, created_at=now)
    db.add(visitor)
    try:
        db.flush()
    except IntegrityError as e:
        # Lost a race on the one-active-visit-per-cpf index
        raise AlreadyActiveError(f"Visitor {name} already has an active check-in") from e
    return visitor


def _get_visitor(db: Session, visitor_id: str) -> Visitor:
    visitor = db.query(Visitor).filter(Visitor.id == visitor_id).first()
    if not visitor:
        raise NotFoundError("Visitor not found")
    return visitor


# ── Commands ──────────────────────────────────────────────────────────────


def register_visitor(db: Session, audit: AuditEmitter, actor: Identity,
                     name: str, cpf: str, room: str,
                     birth_date: Optional[date] = None, email: Optional[str] = None,
                     origin: Optional[RequestOrigin] = None) -> Visitor:
    target_name = (name or "").strip() or None
    try:
        profile = validate_profile(name, cpf, room, email)
        visitor = _in_transaction(db, lambda: _open_visit(db, birth_date=birth_date, **profile))
    except ReceptionError as e:
        logger.warning(f"[VISIT] Register rejected ({e.kind}): {e.message}")
        audit.record(actor, AuditAction.CREATE_VISITOR,
                     f"Visitor creation rejected in {(room or '').strip() or 'unknown room'}: {e.message}",
                     target_name=target_name, origin=origin)
        raise

    logger.info(f"[VISIT] Registered {visitor.id} cpf={visitor.cpf} room={visitor.room}")
    audit.record(actor, AuditAction.CREATE_VISITOR, f"Visitor created in {visitor.room}",
                 target_id=visitor.id, target_name=visitor.name, origin=origin)
    return visitor


def check_in_visitor(db: Session, audit: AuditEmitter, actor: Identity, visitor_id: str,
                     origin: Optional[RequestOrigin] = None) -> Visitor:
    """Start a new visit cloned from the profile of `visitor_id`. The source row is left untouched."""
    source_name = None

    def work() -> Visitor:
        nonlocal source_name
        source = _get_visitor(db, visitor_id)
        source_name = source.name
        return _open_visit(db, name=source.name, cpf=source.cpf, room=source.room,
                           birth_date=source.birth_date, email=source.email)

    try:
        visitor = _in_transaction(db, work)
    except ReceptionError as e:
        logger.warning(f"[VISIT] Check-in of {visitor_id} rejected ({e.kind}): {e.message}")
        audit.record(actor, AuditAction.CHECKIN_VISITOR, f"Check-in rejected: {e.message}",
                     target_id=visitor_id, target_name=source_name, origin=origin)
        raise

    logger.info(f"[VISIT] Checked in {visitor.id} (from {visitor_id}) room={visitor.room}")
    audit.record(actor, AuditAction.CHECKIN_VISITOR, f"Check-in completed - {visitor.room}",
                 target_id=visitor.id, target_name=visitor.name, origin=origin)
    return visitor


def check_out_visitor(db: Session, audit: AuditEmitter, actor: Identity, visitor_id: str,
                      origin: Optional[RequestOrigin] = None) -> Visitor:
    visitor = None
    visitor_name = None

    def work() -> Visitor:
        nonlocal visitor, visitor_name
        visitor = _get_visitor(db, visitor_id)
        visitor_name = visitor.name
        if visitor.check_out_at is not None:
            raise AlreadyCheckedOutError("Visitor has already checked out")
        # Conditional UPDATE so two concurrent check-outs cannot both win
        updated = (
            db.query(Visitor)
            .filter(Visitor.id == visitor_id, Visitor.check_out_at.is_(None))
            .update({Visitor.check_out_at: utcnow()}, synchronize_session=False)
        )
        if not updated:
            raise AlreadyCheckedOutError("Visitor has already checked out")
        return visitor

    try:
        _in_transaction(db, work)
    except ReceptionError as e:
        logger.warning(f"[VISIT] Check-out of {visitor_id} rejected ({e.kind}): {e.message}")
        audit.record(actor, AuditAction.CHECKOUT_VISITOR, f"Check-out rejected: {e.message}",
                     target_id=visitor_id, target_name=visitor_name, origin=origin)
        raise

    db.refresh(visitor)
    logger.info(f"[VISIT] Checked out {visitor.id} room={visitor.room}")
    audit.record(actor, AuditAction.CHECKOUT_VISITOR, f"Check-out completed - {visitor.room}",
                 target_id=visitor.id, target_name=visitor.name, origin=origin)
    return visitor


def delete_visitor(db: Session, audit: AuditEmitter, actor: Identity, visitor_id: str,
                   origin: Optional[RequestOrigin] = None) -> dict:
    """Permanently remove a finished visit. Returns the deleted row as a dict."""
    snapshot = None

    def work() -> dict:
        nonlocal snapshot
        visitor = _get_visitor(db, visitor_id)
        snapshot = visitor_snapshot(visitor)
        if visitor.check_out_at is None:
            raise ActiveVisitorError("Cannot delete an active visitor. Check the visitor out first.")
        deleted = (
            db.query(Visitor)
            .filter(Visitor.id == visitor_id, Visitor.check_out_at.isnot(None))
            .delete(synchronize_session="fetch")
        )
        if not deleted:
            raise NotFoundError("Visitor not found")
        return snapshot

    try:
        _in_transaction(db, work)
    except ReceptionError as e:
        logger.warning(f"[VISIT] Delete of {visitor_id} rejected ({e.kind}): {e.message}")
        audit.record(actor, AuditAction.DELETE_VISITOR, f"Deletion rejected: {e.message}",
                     target_id=visitor_id, target_name=snapshot["name"] if snapshot else None, origin=origin)
        raise

    logger.info(f"[VISIT] Deleted {visitor_id}")
    audit.record(actor, AuditAction.DELETE_VISITOR, "Visitor deleted",
                 target_id=snapshot["id"], target_name=snapshot["name"], origin=origin)
    return snapshot


# ── Queries ───────────────────────────────────────────────────────────────


def search_visitors(db: Session, audit: AuditEmitter, actor: Identity, cpf: str,
                    origin: Optional[RequestOrigin] = None) -> list[Visitor]:
    """Latest record of every distinct cpf containing `cpf`, newest first."""
    digits = normalize_cpf(cpf)
    if not digits:
        audit.record(actor, AuditAction.SEARCH_VISITORS, "Search rejected: CPF is required", origin=origin)
        raise ValidationError("CPF is required")

    records = (
        db.query(Visitor)
        .filter(Visitor.cpf.contains(digits, autoescape=True))
        .order_by(Visitor.created_at.desc(), Visitor.check_in_at.desc())
        .all()
    )
    latest = {}
    for visitor in records:
        latest.setdefault(visitor.cpf, visitor)
    visitors = list(latest.values())

    audit.record(actor, AuditAction.SEARCH_VISITORS, f"Search by CPF: {digits} - {len(visitors)} results",
                 origin=origin)
    return visitors


def list_visitors(db: Session, audit: AuditEmitter, actor: Identity, active_only: bool = False,
                  origin: Optional[RequestOrigin] = None) -> list[Visitor]:
    q = db.query(Visitor)
    if active_only:
        q = q.filter(Visitor.check_out_at.is_(None))
    visitors = q.order_by(Visitor.check_in_at.desc()).all()

    audit.record(actor, AuditAction.ACCESS_CONTROLE,
                 f"Visitor list accessed - {len(visitors)} records{' (active only)' if active_only else ''}",
                 origin=origin)
    return visitors


def visit_history(db: Session, audit: AuditEmitter, actor: Identity,
                  origin: Optional[RequestOrigin] = None) -> dict:
    """Every visit, newest check-in first, with status and duration in hours."""
    visitors = db.query(Visitor).order_by(Visitor.check_in_at.desc()).all()

    history = []
    for visitor in visitors:
        item = visitor_snapshot(visitor)
        item["status"] = STATUS_ACTIVE if visitor.check_out_at is None else STATUS_CHECKOUT
        item["duration_hours"] = duration_hours(visitor)
        history.append(item)

    active = sum(1 for item in history if item["status"] == STATUS_ACTIVE)
    result = {
        "history": history,
        "total": len(history),
        "active": active,
        "completed": len(history) - active,
    }

    audit.record(actor, AuditAction.VIEW_HISTORY,
                 f"History accessed - {result['total']} records "
                 f"({result['active']} active, {result['completed']} checkouts)",
                 origin=origin)
    return result
