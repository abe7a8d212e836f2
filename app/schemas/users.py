"""Pydantic schemas for the users resource."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserQuery(BaseModel):
    """Optional filters for listing users."""

    id: UUID | None = Field(default=None, description="Exact user id.")
    email: EmailStr | None = Field(default=None, description="Exact email address.")


class UserCreate(BaseModel):
    """Request body for creating a user."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr = Field(..., description="Unique email address.")
    name: str = Field(..., min_length=1, max_length=100, description="Display name.")


class UserOut(BaseModel):
    """Public user representation (no credentials)."""

    id: UUID
    email: EmailStr
    name: str
    created_at: datetime


class UserListResponse(BaseModel):
    users: list[UserOut] = Field(default_factory=list)


class UserResponse(BaseModel):
    user: UserOut
