from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from food_ordering.models.user import RoleEnum
from .base import CamelModel


class UserCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    address: Optional[str] = Field(None, max_length=255)


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    role: RoleEnum
    address: Optional[str] = None
    is_active: bool
    is_deleted: bool
    created_at: datetime


class TokenRead(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class UserStatusChanged(CamelModel):
    message: str
    user: UserRead
