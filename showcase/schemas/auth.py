"""Auth and account schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "admin"]


class UserRecord(BaseModel):
    """Stored account (users collection)."""

    id: str
    username: str
    password_hash: str
    role: Role = "user"
    created_at: datetime
    updated_at: datetime


class Principal(BaseModel):
    """Verified identity carried by an access token."""

    id: str
    username: str
    role: Role


class LoginRequest(BaseModel):
    """Body for POST /api/admin/login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    token: str
    user: Principal


class ProfileResponse(BaseModel):
    user: Principal
    message: str
