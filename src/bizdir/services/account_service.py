"""Account service — profiles, updates and cascading deletion.

Learn: Same four-step order as BusinessService (lookup → authorize →
apply present fields → write). Two account-specific rules:

- Changing the email re-checks uniqueness first. A collision is a
  ForbiddenError, not a Conflict — that is how the API has always
  reported it, so clients depend on the 403.
- Deleting an account removes its businesses and the account in one
  transaction. A crash can't leave one half done.
"""

import uuid
from typing import Any

import structlog

from bizdir.auth.access import ADMIN_ONLY, AUTHENTICATED, OWNER_OR_ADMIN, enforce
from bizdir.auth.identity import RequestContext
from bizdir.db.models import Account
from bizdir.errors import ForbiddenError, NotFoundError
from bizdir.repositories.base import AccountRepository, DuplicateAccountError
from bizdir.services.business_service import present_fields

logger = structlog.get_logger()

UPDATABLE_FIELDS = {
    "first_name",
    "last_name",
    "email",
    "phone",
    "reserve_service_description",
}

EMAIL_IN_USE = "Email is already in use"


class AccountService:
    """Business logic for user accounts."""

    def __init__(self, accounts: AccountRepository):
        self.accounts = accounts

    # ─── Reads ──────────────────────────────────────────

    async def list_accounts(self, ctx: RequestContext) -> list[Account]:
        enforce(ADMIN_ONLY, ctx.identity, action="list users")
        return await self.accounts.list_all()

    async def get(self, account_id: uuid.UUID) -> Account:
        account = await self.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"User with ID {account_id} not found")
        return account

    async def get_as_admin(self, ctx: RequestContext, account_id: uuid.UUID) -> Account:
        enforce(ADMIN_ONLY, ctx.identity, action="view other users")
        return await self.get(account_id)

    async def profile(self, ctx: RequestContext) -> Account:
        enforce(AUTHENTICATED, ctx.identity)
        return await self.get(ctx.identity.id)

    # ─── Mutations ──────────────────────────────────────

    async def update(
        self,
        ctx: RequestContext,
        account_id: uuid.UUID,
        changes: dict[str, Any],
    ) -> Account:
        enforce(AUTHENTICATED, ctx.identity)
        account = await self.get(account_id)
        enforce(
            OWNER_OR_ADMIN,
            ctx.identity,
            owner_id=account.id,
            action="update this user",
        )

        fields = present_fields(changes, UPDATABLE_FIELDS)
        new_email = fields.get("email")
        if new_email is not None and new_email != account.email:
            if await self.accounts.find_by_email(new_email):
                raise ForbiddenError(EMAIL_IN_USE)

        if not fields:
            return account
        try:
            account = await self.accounts.update(account, fields)
        except DuplicateAccountError:
            # Lost a race with another writer of the same email
            raise ForbiddenError(EMAIL_IN_USE)
        logger.info("account.updated", user_id=str(account_id), fields=sorted(fields))
        return account

    async def remove(self, ctx: RequestContext, account_id: uuid.UUID) -> bool:
        enforce(AUTHENTICATED, ctx.identity)
        account = await self.get(account_id)
        enforce(
            OWNER_OR_ADMIN,
            ctx.identity,
            owner_id=account.id,
            action="delete this user",
        )
        removed = await self.accounts.delete_with_businesses(account)
        logger.info(
            "account.deleted",
            user_id=str(account_id),
            by=str(ctx.identity.id),
            businesses_removed=removed,
        )
        return True

    async def remove_self(self, ctx: RequestContext) -> bool:
        enforce(AUTHENTICATED, ctx.identity)
        return await self.remove(ctx, ctx.identity.id)
