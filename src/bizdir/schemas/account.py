"""Gateway schemas for user accounts."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from bizdir.schemas.auth import EMAIL_PATTERN
from bizdir.schemas.base import GatewayModel
from bizdir.schemas.business import BusinessRead


class AccountSummary(GatewayModel):
    """Public account view — never includes the password hash."""
    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: str
    reserve_service_description: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AccountRead(AccountSummary):
    """Account with its businesses.

    Built from an AccountSummary plus an explicit list, never straight from
    the ORM object: the businesses relationship is not loaded in async code.
    """
    businesses: list[BusinessRead] = []


class UpdateUserInput(GatewayModel):
    id: uuid.UUID
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    reserve_service_description: Optional[str] = None
