"""Gateway schemas for businesses, tags and pagination."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from bizdir.schemas.base import GatewayModel


class TagRead(GatewayModel):
    id: uuid.UUID
    name: str
    type: str  # LOCATION, AREA, FIELD
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BusinessRead(GatewayModel):
    id: uuid.UUID
    name: str
    description: str
    owner_id: uuid.UUID
    contact_info: dict[str, Any]
    links: dict[str, Any]
    photos: list[str]
    created_at: datetime
    updated_at: Optional[datetime] = None
    tags: list[TagRead] = []


class CreateBusinessInput(GatewayModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    contact_info: dict[str, Any]
    links: dict[str, Any]
    photos: Optional[list[str]] = None


class UpdateBusinessInput(GatewayModel):
    """Every field but id is optional; absent fields are left untouched."""
    id: uuid.UUID
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    contact_info: Optional[dict[str, Any]] = None
    links: Optional[dict[str, Any]] = None
    photos: Optional[list[str]] = None


class PaginationInput(GatewayModel):
    take: Optional[int] = Field(None, gt=0)
    cursor: Optional[str] = None


class BusinessConnection(GatewayModel):
    nodes: list[BusinessRead]
    next_cursor: Optional[str] = None
    total_count: int
