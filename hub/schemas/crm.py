from typing import List, Literal, Optional

from pydantic import BaseModel

from hub.schemas.b2b import B2BSaleRead
from hub.schemas.common import TrimmedStr


class FirmCreate(BaseModel):
    name: str
    contact_person: TrimmedStr = None
    phone: TrimmedStr = None
    email: TrimmedStr = None
    address: TrimmedStr = None
    tax_number: TrimmedStr = None
    tax_office: TrimmedStr = None
    notes: TrimmedStr = None


class FirmUpdate(BaseModel):
    """Regular field update, or action=lock/unlock."""
    action: Optional[Literal["lock", "unlock"]] = None
    lock_reason: TrimmedStr = None

    name: Optional[str] = None
    contact_person: TrimmedStr = None
    phone: TrimmedStr = None
    email: TrimmedStr = None
    address: TrimmedStr = None
    tax_number: TrimmedStr = None
    tax_office: TrimmedStr = None
    notes: TrimmedStr = None


class FirmRead(BaseModel):
    id: int
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    tax_number: Optional[str] = None
    tax_office: Optional[str] = None
    notes: Optional[str] = None
    is_locked: bool
    lock_reason: Optional[str] = None
    sale_count: int = 0

    class Config:
        from_attributes = True


class FirmDetail(BaseModel):
    firm: FirmRead
    sales: List[B2BSaleRead]
