# reception/models/visitor.py
"""
Visitors table - one row per physical check-in.
A repeat visit creates a new row cloned from the previous profile; check_out_at
is written exactly once and a NULL value means the visitor is still inside.
"""

import uuid

from sqlalchemy import Column, Date, DateTime, Index, String, text
from reception.database import Base
from reception.utils.timeutils import utcnow


class Visitor(Base):
    __tablename__ = "visitors"
    __table_args__ = (
        Index("ix_visitors_room_active", "room", "check_out_at"),
        # At most one active visit per cpf, enforced by the database as well
        Index(
            "uq_visitors_active_cpf", "cpf", unique=True,
            postgresql_where=text("check_out_at IS NULL"),
            sqlite_where=text("check_out_at IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    cpf = Column(String(14), nullable=False, index=True)    # digits only
    room = Column(String(50), nullable=False)
    birth_date = Column(Date)
    email = Column(String(254))
    check_in_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    check_out_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    @property
    def is_active(self) -> bool:
        return self.check_out_at is None

    def __repr__(self):
        return f"<Visitor {self.id} cpf={self.cpf} room={self.room} active={self.is_active}>"
