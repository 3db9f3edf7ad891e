# reception/schemas/room.py
from pydantic import BaseModel


class RoomStatusOut(BaseModel):
    room: str
    active_count: int
    capacity: int
    is_full: bool
