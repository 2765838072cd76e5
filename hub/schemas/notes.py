from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from hub.core.enums import NoteVisibility


class NoteCreate(BaseModel):
    body: Optional[str] = None
    visibility: NoteVisibility = NoteVisibility.SELF
    reminder_date: Optional[date] = None


class NoteUpdate(BaseModel):
    action: Optional[Literal["resolve", "unresolve"]] = None
    body: Optional[str] = None
    visibility: Optional[NoteVisibility] = None
    reminder_date: Optional[date] = None


class NoteRead(BaseModel):
    id: int
    body: str
    visibility: NoteVisibility
    reminder_date: Optional[date] = None
    is_resolved: bool
    resolved_by: Optional[int] = None
    resolved_at: Optional[datetime] = None
    created_by: int
    created_by_username: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NoteResponse(BaseModel):
    note: NoteRead


class NoteList(BaseModel):
    notes: List[NoteRead]
