"""Pydantic schemas for the authenticated user."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Public profile of the authenticated user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    email: str | None
    avatar: str | None
    provider: str
    email_verified_at: datetime | None
    created_at: datetime


class UserData(BaseModel):
    """Data payload for /auth/me."""

    user: UserResponse
