# reception/schemas/audit_entry.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class AuditEntryOut(BaseModel):
    id: int
    actor_id: str
    actor_name: str
    actor_cpf: Optional[str]
    action: str
    target_id: Optional[str]
    target_name: Optional[str]
    detail: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class AuditPage(BaseModel):
    entries: list[AuditEntryOut]
    total: int
    limit: int
    offset: int
    has_more: bool
