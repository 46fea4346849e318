"""Business service — listing CRUD behind owner-or-admin checks.

Learn: Every mutation walks the same four steps, in order:
1. look the target up          → NotFoundError
2. evaluate owner-or-admin     → ForbiddenError
3. apply only the given fields (partial update)
4. write

Step 1 before step 2 is the contract. A non-owner asking about a
missing id learns "not found", same as anyone else would.
"""

import uuid
from typing import Any, Optional

import structlog

from bizdir.auth.access import ADMIN_ONLY, AUTHENTICATED, OWNER_OR_ADMIN, enforce
from bizdir.auth.identity import RequestContext
from bizdir.db.models import Business
from bizdir.errors import NotFoundError
from bizdir.repositories.base import BusinessRepository
from bizdir.services.pagination import Page, paginate

logger = structlog.get_logger()

UPDATABLE_FIELDS = {"name", "description", "contact_info", "links", "photos"}


def present_fields(changes: dict[str, Any], allowed: set[str]) -> dict[str, Any]:
    """Keep only fields the caller actually supplied with a value.

    Absent keys and explicit nulls both mean "leave it alone".
    """
    return {k: v for k, v in changes.items() if k in allowed and v is not None}


class BusinessService:
    """Business logic for business listings."""

    def __init__(self, businesses: BusinessRepository, default_take: int = 10):
        self.businesses = businesses
        self.default_take = default_take

    # ─── Reads ──────────────────────────────────────────

    async def list_page(self, take: Optional[int] = None, cursor: Optional[str] = None) -> Page:
        return await paginate(
            self.businesses,
            take=take if take is not None else self.default_take,
            cursor=cursor,
        )

    async def get(self, business_id: uuid.UUID) -> Business:
        business = await self.businesses.get(business_id)
        if business is None:
            raise NotFoundError(f"Business with ID {business_id} not found")
        return business

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Business]:
        return await self.businesses.list_by_owner(owner_id)

    async def list_mine(self, ctx: RequestContext) -> list[Business]:
        enforce(AUTHENTICATED, ctx.identity)
        return await self.businesses.list_by_owner(ctx.identity.id)

    # ─── Mutations ──────────────────────────────────────

    async def create(
        self,
        ctx: RequestContext,
        name: str,
        description: str,
        contact_info: dict,
        links: dict,
        photos: Optional[list[str]] = None,
    ) -> Business:
        enforce(AUTHENTICATED, ctx.identity)
        business = await self.businesses.create(
            owner_id=ctx.identity.id,
            name=name,
            description=description,
            contact_info=contact_info,
            links=links,
            photos=photos or [],
        )
        logger.info(
            "business.created",
            business_id=str(business.id),
            owner_id=str(ctx.identity.id),
        )
        return business

    async def update(
        self,
        ctx: RequestContext,
        business_id: uuid.UUID,
        changes: dict[str, Any],
    ) -> Business:
        enforce(AUTHENTICATED, ctx.identity)
        business = await self.get(business_id)
        enforce(
            OWNER_OR_ADMIN,
            ctx.identity,
            owner_id=business.owner_id,
            action="update this business",
        )
        fields = present_fields(changes, UPDATABLE_FIELDS)
        if not fields:
            return business
        business = await self.businesses.update(business, fields)
        logger.info(
            "business.updated",
            business_id=str(business_id),
            fields=sorted(fields),
        )
        return business

    async def remove(self, ctx: RequestContext, business_id: uuid.UUID) -> bool:
        enforce(AUTHENTICATED, ctx.identity)
        business = await self.get(business_id)
        enforce(
            OWNER_OR_ADMIN,
            ctx.identity,
            owner_id=business.owner_id,
            action="delete this business",
        )
        await self.businesses.delete(business)
        logger.info(
            "business.deleted",
            business_id=str(business_id),
            by=str(ctx.identity.id),
        )
        return True

    async def admin_remove(self, ctx: RequestContext, business_id: uuid.UUID) -> bool:
        """Role-gated delete: the role check runs before the lookup."""
        enforce(ADMIN_ONLY, ctx.identity, action="remove businesses as admin")
        return await self.remove(ctx, business_id)
