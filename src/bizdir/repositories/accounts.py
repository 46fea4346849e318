"""SQLAlchemy account repository."""

import uuid
from typing import Any, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.db.models import Account, Business
from bizdir.repositories.base import DuplicateAccountError


class SqlAccountRepository:
    """Account persistence on an AsyncSession (one session per request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, account_id: uuid.UUID) -> Optional[Account]:
        return await self.db.get(Account, account_id)

    async def find_by_username(self, username: str) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(Account.username == username)
        )
        return result.scalars().first()

    async def find_by_email(self, email: str) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(Account.email == email)
        )
        return result.scalars().first()

    async def find_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(
                or_(Account.username == username, Account.email == email)
            )
        )
        return result.scalars().first()

    async def list_all(self) -> list[Account]:
        result = await self.db.execute(
            select(Account).order_by(Account.created_at, Account.id)
        )
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> Account:
        account = Account(**fields)
        self.db.add(account)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateAccountError(str(e.orig)) from e
        await self.db.refresh(account)
        return account

    async def update(self, account: Account, changes: dict[str, Any]) -> Account:
        for name, value in changes.items():
            setattr(account, name, value)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateAccountError(str(e.orig)) from e
        await self.db.refresh(account)
        return account

    async def delete_with_businesses(self, account: Account) -> int:
        """Both deletes commit together or not at all.

        Learn: The FK also cascades at the database level; deleting the
        businesses explicitly first keeps the count and keeps the ORM's
        identity map consistent within this session.
        """
        result = await self.db.execute(
            delete(Business).where(Business.owner_id == account.id)
        )
        await self.db.delete(account)
        await self.db.commit()
        return result.rowcount or 0
