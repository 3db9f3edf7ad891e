# reception/models/operator.py
"""Operator accounts - the reception staff who sign in and act on visitors."""

import uuid

from sqlalchemy import Column, DateTime, String
from reception.database import Base
from reception.utils.timeutils import utcnow


class Operator(Base):
    __tablename__ = "operators"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(254), unique=True, nullable=False, index=True)
    name = Column(String(200))
    cpf = Column(String(14))
    password_hash = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Operator {self.id} email={self.email}>"
