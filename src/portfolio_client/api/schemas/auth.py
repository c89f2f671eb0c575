"""Pydantic schemas for authentication endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request schema for logging in."""

    user: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """Response schema describing the current session."""

    logged_in: bool
    expires_at: Optional[datetime] = None
