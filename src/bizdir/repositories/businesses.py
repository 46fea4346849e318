"""SQLAlchemy business repository, including the pagination window query."""

import uuid
from typing import Any, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bizdir.db.models import Business


class SqlBusinessRepository:
    """Business persistence on an AsyncSession (one session per request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _select(self):
        # Tags are loaded eagerly; lazy loads are not allowed under asyncio.
        return select(Business).options(selectinload(Business.tags))

    async def get(self, business_id: uuid.UUID) -> Optional[Business]:
        result = await self.db.execute(
            self._select().where(Business.id == business_id)
        )
        return result.scalars().first()

    async def create(self, owner_id: uuid.UUID, **fields: Any) -> Business:
        business = Business(owner_id=owner_id, **fields)
        self.db.add(business)
        await self.db.commit()
        return await self.get(business.id)

    async def update(self, business: Business, changes: dict[str, Any]) -> Business:
        for name, value in changes.items():
            setattr(business, name, value)
        await self.db.commit()
        return await self.get(business.id)

    async def delete(self, business: Business) -> None:
        await self.db.delete(business)
        await self.db.commit()

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Business]:
        result = await self.db.execute(
            self._select()
            .where(Business.owner_id == owner_id)
            .order_by(Business.created_at.desc(), Business.id.desc())
        )
        return list(result.scalars().all())

    async def fetch_window(
        self, limit: int, after: Optional[uuid.UUID] = None
    ) -> list[Business]:
        """Keyset window over (created_at DESC, id DESC).

        Learn: Offsets drift when rows are inserted ahead of the reader;
        a keyset on the cursor row's (created_at, id) does not. The id
        tie-break makes the order total even for identical timestamps.
        """
        query = self._select()
        if after is not None:
            anchor = (
                await self.db.execute(
                    select(Business.created_at, Business.id).where(
                        Business.id == after
                    )
                )
            ).first()
            if anchor is None:
                return []
            query = query.where(
                or_(
                    Business.created_at < anchor.created_at,
                    and_(
                        Business.created_at == anchor.created_at,
                        Business.id < anchor.id,
                    ),
                )
            )
        result = await self.db.execute(
            query.order_by(Business.created_at.desc(), Business.id.desc()).limit(
                limit
            )
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Business))
        return result.scalar_one()
