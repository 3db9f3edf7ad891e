# reception/models/audit_entry.py
"""
Audit log table - append-only record of every operator action,
including rejected attempts. Written by audit_service only.
"""

from sqlalchemy import Column, DateTime, Integer, String, Text
from reception.database import Base
from reception.utils.timeutils import utcnow


class AuditEntry(Base):
    __tablename__ = "audit_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(String(36), nullable=False, index=True)
    actor_name = Column(String(200), nullable=False)
    actor_cpf = Column(String(14))
    action = Column(String(50), nullable=False, index=True)
    target_id = Column(String(36))
    target_name = Column(String(200))
    detail = Column(Text)
    ip_address = Column(String(64))       # best-effort, taken from proxy headers
    user_agent = Column(String(512))
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<AuditEntry {self.id} action={self.action} actor={self.actor_id}>"
