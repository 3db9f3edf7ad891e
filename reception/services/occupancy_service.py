# reception/services/occupancy_service.py
"""
Room occupancy: active visitor counts and the per-room capacity cap.
A visitor is active while check_out_at IS NULL. Counts are always computed from
the visitors table, never cached, and capacity decisions must run after
lock_room() in the same transaction as the insert they guard.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session
from reception.config import settings
from reception.models.room import Room
from reception.models.visitor import Visitor
from reception.services.errors import ValidationError
from reception.utils.logger import get_logger

logger = get_logger(__name__)


def lock_room(db: Session, room: str) -> int:
    """
    Take the write lock for `room` inside the current transaction and return its capacity.
    Bumping the version row makes a second writer for the same room wait until we commit.
    """
    updated = (
        db.query(Room)
        .filter(Room.id == room)
        .update({Room.version: Room.version + 1}, synchronize_session=False)
    )
    if not updated:
        logger.warning(f"[ROOM] Lock requested for unknown room '{room}'")
        raise ValidationError(f"Unknown room '{room}'. Valid rooms: {', '.join(settings.ROOMS)}")
    return db.query(Room.capacity).filter(Room.id == room).scalar()


def active_count(db: Session, room: str) -> int:
    return (
        db.query(func.count(Visitor.id))
        .filter(Visitor.room == room, Visitor.check_out_at.is_(None))
        .scalar()
    ) or 0


def is_full(db: Session, room: str, capacity: Optional[int] = None) -> bool:
    if capacity is None:
        capacity = db.query(Room.capacity).filter(Room.id == room).scalar() or settings.ROOM_CAPACITY
    return active_count(db, room) >= capacity


def room_status(db: Session) -> list[dict]:
    """Active count, capacity and full flag for every configured room, in settings.ROOMS order."""
    configured = settings.ROOMS
    counts = dict(
        db.query(Visitor.room, func.count(Visitor.id))
        .filter(Visitor.check_out_at.is_(None))
        .group_by(Visitor.room)
        .all()
    )
    rooms = {room.id: room for room in db.query(Room).filter(Room.id.in_(configured)).all()}
    status = []
    for room_id in configured:
        room = rooms.get(room_id)
        if room is None:
            continue
        count = counts.get(room_id, 0)
        status.append({
            "room": room_id,
            "active_count": count,
            "capacity": room.capacity,
            "is_full": count >= room.capacity,
        })
    return status
