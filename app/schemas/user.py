"""User Pydantic schemas — registration, login, profile output."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from app.models.user import RoleEnum
from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Fields submitted on the registration form."""
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=8)


class UserLogin(CamelModel):
    """Fields submitted on the login form."""
    email: EmailStr
    password: str


class VerifyEmailIn(CamelModel):
    token: str


class ResendVerificationIn(CamelModel):
    email: EmailStr


class UserOut(CamelModel):
    """Public user representation returned by the API."""
    id: int
    email: str
    name: str
    image: Optional[str] = None
    role: RoleEnum
    points: int
    ideas_count: int
    feedback_count: int
    email_verified_at: Optional[datetime] = None
    last_active: Optional[datetime] = None
    created_at: Optional[datetime] = None


class LeaderboardEntry(CamelModel):
    rank: int
    id: int
    name: str
    image: Optional[str] = None
    points: int
    ideas_count: int
    feedback_count: int


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
