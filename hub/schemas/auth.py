from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from hub.core.enums import UserRole


class LoginRequest(BaseModel):
    username: str
    password: str


class AuthUserRead(BaseModel):
    id: int
    username: str
    role: UserRole

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    user: AuthUserRead
    # Same token as the cookie, for clients using the Authorization header
    access_token: str
    token_type: str = "bearer"


class UserBase(BaseModel):
    username: str
    display_name: Optional[str] = None
    role: UserRole = UserRole.EMPLOYEE
    is_active: bool = True


class UserCreate(UserBase):
    password: str


class UserUpdate(BaseModel):
    display_name: Optional[str] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None
    is_active: Optional[bool] = None


class UserRead(UserBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
