"""
Farm accounts and access tokens.

Every account carries one farm role. Workers record day-to-day events,
managers may also delete records, admins manage users from the CLI and
viewers only read. ``UserResponse`` exposes what the account may do so
clients can hide actions they would be refused.
"""

from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Literal
import datetime

Role = Literal["admin", "manager", "worker", "viewer"]


class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    """Self-registration; the account always starts as a worker."""
    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    public_id: str
    role: Role
    is_active: bool
    can_edit: bool = Field(..., description="May create and update farm records")
    can_manage: bool = Field(..., description="May also delete farm records")
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role
    expires_in: int = Field(..., description="Seconds until the token expires")
