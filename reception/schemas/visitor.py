# reception/schemas/visitor.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional


class VisitorCreate(BaseModel):
    name: Optional[str] = None
    cpf: Optional[str] = None    # any mask accepted; digits are kept
    room: Optional[str] = None   # "Room 1" … "Room N"
    birth_date: Optional[date] = None
    email: Optional[str] = None


class VisitorOut(BaseModel):
    id: str
    name: Optional[str] = None
    cpf: str
    room: str
    birth_date: Optional[date]
    email: Optional[str]
    check_in_at: datetime
    check_out_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class VisitorList(BaseModel):
    visitors: list[VisitorOut]


class VisitorResponse(BaseModel):
    visitor: VisitorOut


class VisitorDeleted(BaseModel):
    message: str
    deleted_visitor: VisitorOut


class HistoryItem(VisitorOut):
    status: str                      # Active | Checkout
    duration_hours: Optional[float]  # set once checked out


class HistoryOut(BaseModel):
    history: list[HistoryItem]
    total: int
    active: int
    completed: int
