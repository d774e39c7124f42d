from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from makeeasy.models import KycStatus
from makeeasy.roles import Role


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None
    role: Role
    kyc_status: KycStatus
    date_of_birth: date | None = None
    gender: str = ""
    address: str | None = None
    profile_image: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserRecord(UserResponse):
    """UserResponse plus the password hash. Never returned to clients."""

    password_hash: str


class UserSummary(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str | None = Field(default=None, max_length=20)
    role: Role = Role.USER


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserDetailsUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    date_of_birth: date | None = None
    gender: str | None = None
    address: str | None = Field(default=None, max_length=500)
    profile_image: str | None = None


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class TokenResponse(BaseModel):
    success: bool = True
    token: str
    user: UserResponse
