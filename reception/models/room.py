# reception/models/room.py
"""
Rooms table - the fixed set of destination rooms, seeded from settings.ROOMS.
`version` is bumped inside every capacity decision so concurrent writers for the
same room queue up on the row (PostgreSQL) or the database write lock (SQLite).
"""

from sqlalchemy import Column, Integer, String
from reception.database import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(String(50), primary_key=True)     # e.g. "Room 1"
    capacity = Column(Integer, nullable=False, default=3)
    version = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Room {self.id} capacity={self.capacity}>"
