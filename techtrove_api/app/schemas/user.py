"""
Pydantic models for account payloads.

Field names follow the wire format used by the web client, which is
why ``googleId``, ``userId`` and ``createdAt`` are camelCase.  None of
the read models has a password field, so a stored hash cannot leak
through a response even by accident.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from ..core.db import format_datetime


class SignupRequest(BaseModel):
    """Body of ``POST /signup``.  All four fields are required."""

    name: Optional[str] = Field(None, examples=["Ada Lovelace"])
    email: Optional[str] = Field(None, examples=["ada@example.com"])
    username: Optional[str] = Field(None, examples=["ada"])
    password: Optional[str] = Field(None, examples=["correct horse battery staple"])


class LoginRequest(BaseModel):
    email: Optional[str] = Field(None, examples=["ada@example.com"])
    password: Optional[str] = None


class GoogleSignupRequest(BaseModel):
    """Body of ``POST /google-signup`` as sent after a Google sign-in."""

    email: Optional[str] = Field(None, examples=["ada@example.com"])
    name: Optional[str] = Field(None, examples=["Ada Lovelace"])
    googleId: Optional[str] = Field(None, examples=["109876543210987654321"])


class UserRead(BaseModel):
    """Public view of a user."""

    id: str
    name: Optional[str] = None
    email: str
    username: Optional[str] = None


class GoogleUserRead(UserRead):
    """User view returned by google-signup, with the social fields."""

    googleId: Optional[str] = None
    createdAt: Optional[datetime] = None

    @field_serializer("createdAt")
    def _serialize_created_at(self, value: Optional[datetime]) -> Optional[str]:
        return None if value is None else format_datetime(value)


class SignupResponse(BaseModel):
    success: bool = True
    message: str = "User registered successfully"
    userId: str


class LoginResponse(BaseModel):
    success: bool = True
    user: UserRead


class GoogleSignupResponse(BaseModel):
    success: bool = True
    user: GoogleUserRead
