# reception/routers/rooms.py
"""Room occupancy - active visitors per room against the capacity cap."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from reception.database import get_db
from reception.dependencies import get_identity
from reception.schemas.room import RoomStatusOut
from reception.services.context import Identity
from reception.services.occupancy_service import room_status

router = APIRouter()


@router.get("/rooms", response_model=list[RoomStatusOut], summary="Active count and capacity for every room")
def get_rooms(db: Session = Depends(get_db), actor: Identity = Depends(get_identity)):
    return room_status(db)
