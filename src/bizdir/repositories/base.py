"""Repository protocols (ports).

This is a Protocol (not ABC) for structural typing — implementations
don't need to inherit from it.

Every method is a coroutine: each storage read or write is a suspension
point for the calling request and nothing else.
"""

import uuid
from typing import Any, Optional, Protocol

from bizdir.db.models import Account, Business


class DuplicateAccountError(Exception):
    """A unique constraint on username or email rejected a write."""


class AccountRepository(Protocol):
    async def get(self, account_id: uuid.UUID) -> Optional[Account]:
        ...

    async def find_by_username(self, username: str) -> Optional[Account]:
        ...

    async def find_by_email(self, email: str) -> Optional[Account]:
        ...

    async def find_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[Account]:
        """Exact, case-sensitive match on either field."""
        ...

    async def list_all(self) -> list[Account]:
        ...

    async def create(self, **fields: Any) -> Account:
        """Insert an account. Raises DuplicateAccountError on a unique violation."""
        ...

    async def update(self, account: Account, changes: dict[str, Any]) -> Account:
        """Apply changes. Raises DuplicateAccountError on a unique violation."""
        ...

    async def delete_with_businesses(self, account: Account) -> int:
        """Delete the account's businesses, then the account, atomically.

        Returns the number of businesses removed.
        """
        ...


class BusinessRepository(Protocol):
    async def get(self, business_id: uuid.UUID) -> Optional[Business]:
        ...

    async def create(self, owner_id: uuid.UUID, **fields: Any) -> Business:
        ...

    async def update(self, business: Business, changes: dict[str, Any]) -> Business:
        ...

    async def delete(self, business: Business) -> None:
        ...

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Business]:
        ...

    async def fetch_window(
        self, limit: int, after: Optional[uuid.UUID] = None
    ) -> list[Business]:
        """Up to `limit` rows, newest first (created_at DESC, id DESC),
        strictly after the `after` row. Unknown `after` → []."""
        ...

    async def count(self) -> int:
        ...
