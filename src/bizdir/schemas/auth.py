"""Pydantic schemas for the REST auth routes."""

import uuid
from typing import Optional

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=128)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    reserve_service_description: str = ""


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class AuthResponse(BaseModel):
    """Account summary plus a fresh access token."""
    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    reserve_service_description: str
    role: str
    access_token: str
    token_type: str = "bearer"


class ProfileResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    role: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    reserve_service_description: str


class MessageResponse(BaseModel):
    message: str
