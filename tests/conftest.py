"""Test fixtures — in-memory repositories behind the real app.

Learn: Services only see the repository protocols, so tests swap the
SQLAlchemy repositories for dict-backed ones through
app.dependency_overrides. Everything above storage — token checks,
context propagation, access evaluation, services, routing, middleware —
is the production code path. No Postgres or Redis needed.

The in-memory repositories honour the same contracts as the SQL ones:
unique username/email, (created_at DESC, id DESC) ordering, and
businesses removed together with their owner.

The SQL repositories themselves are tested against real Postgres with
the db_session / sql_client fixtures below: one connection, one outer
transaction, join_transaction_mode="create_savepoint" so every commit()
becomes a SAVEPOINT, and a rollback at the end. Set
BIZDIR_TEST_DATABASE_URL to an empty database; those tests skip when
Postgres is not reachable.
"""

import os
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from bizdir.api.deps import get_business_repository
from bizdir.auth.dependencies import get_account_repository
from bizdir.auth.identity import Role
from bizdir.config import Settings, settings as app_settings
from bizdir.db.engine import get_db
from bizdir.db.models import Account, Base, Business
from bizdir.main import create_app
from bizdir.repositories.base import DuplicateAccountError

EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)

TEST_DB_URL = os.environ.get("BIZDIR_TEST_DATABASE_URL", app_settings.database_url)


class InMemoryStore:
    """Shared state for one test. Timestamps tick one second per insert."""

    def __init__(self):
        self.accounts: dict[uuid.UUID, Account] = {}
        self.businesses: dict[uuid.UUID, Business] = {}
        self._ticks = 0

    def now(self) -> datetime:
        self._ticks += 1
        return EPOCH + timedelta(seconds=self._ticks)


class InMemoryAccountRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get(self, account_id: uuid.UUID) -> Optional[Account]:
        return self.store.accounts.get(account_id)

    async def find_by_username(self, username: str) -> Optional[Account]:
        return next(
            (a for a in self.store.accounts.values() if a.username == username), None
        )

    async def find_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self.store.accounts.values() if a.email == email), None)

    async def find_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[Account]:
        return next(
            (
                a
                for a in self.store.accounts.values()
                if a.username == username or a.email == email
            ),
            None,
        )

    async def list_all(self) -> list[Account]:
        return sorted(self.store.accounts.values(), key=lambda a: a.created_at)

    def _check_unique(self, username: str, email: str, exclude=None) -> None:
        for other in self.store.accounts.values():
            if other is exclude:
                continue
            if other.username == username or other.email == email:
                raise DuplicateAccountError("duplicate key value")

    async def create(self, **fields: Any) -> Account:
        self._check_unique(fields["username"], fields["email"])
        now = self.store.now()
        account = Account(id=uuid.uuid4(), created_at=now, updated_at=now, **fields)
        self.store.accounts[account.id] = account
        return account

    async def update(self, account: Account, changes: dict[str, Any]) -> Account:
        self._check_unique(
            changes.get("username", account.username),
            changes.get("email", account.email),
            exclude=account,
        )
        for name, value in changes.items():
            setattr(account, name, value)
        account.updated_at = self.store.now()
        return account

    async def delete_with_businesses(self, account: Account) -> int:
        owned = [b for b in self.store.businesses.values() if b.owner_id == account.id]
        for business in owned:
            del self.store.businesses[business.id]
        del self.store.accounts[account.id]
        return len(owned)


class InMemoryBusinessRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def _ordered(self) -> list[Business]:
        return sorted(
            self.store.businesses.values(),
            key=lambda b: (b.created_at, b.id),
            reverse=True,
        )

    async def get(self, business_id: uuid.UUID) -> Optional[Business]:
        return self.store.businesses.get(business_id)

    async def create(self, owner_id: uuid.UUID, **fields: Any) -> Business:
        if owner_id not in self.store.accounts:
            raise AssertionError("foreign key violation: unknown owner")
        created_at = fields.pop("created_at", None) or self.store.now()
        business = Business(
            id=fields.pop("id", None) or uuid.uuid4(),
            owner_id=owner_id,
            created_at=created_at,
            updated_at=created_at,
            **fields,
        )
        self.store.businesses[business.id] = business
        return business

    async def update(self, business: Business, changes: dict[str, Any]) -> Business:
        for name, value in changes.items():
            setattr(business, name, value)
        business.updated_at = self.store.now()
        return business

    async def delete(self, business: Business) -> None:
        del self.store.businesses[business.id]

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Business]:
        return [b for b in self._ordered() if b.owner_id == owner_id]

    async def fetch_window(
        self, limit: int, after: Optional[uuid.UUID] = None
    ) -> list[Business]:
        rows = self._ordered()
        if after is not None:
            ids = [b.id for b in rows]
            if after not in ids:
                return []
            rows = rows[ids.index(after) + 1:]
        return rows[:limit]

    async def count(self) -> int:
        return len(self.store.businesses)


# ─── Fixtures ────────────────────────────────────────────


@pytest.fixture()
def settings():
    return Settings(
        jwt_secret="test-secret-for-unit-tests",
        environment="test",
        bcrypt_rounds=4,
    )


@pytest.fixture()
def store():
    return InMemoryStore()


@pytest.fixture()
def accounts(store):
    return InMemoryAccountRepository(store)


@pytest.fixture()
def businesses(store):
    return InMemoryBusinessRepository(store)


@pytest.fixture()
def app(settings, store):
    application = create_app(settings)
    application.dependency_overrides[get_account_repository] = (
        lambda: InMemoryAccountRepository(store)
    )
    application.dependency_overrides[get_business_repository] = (
        lambda: InMemoryBusinessRepository(store)
    )
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def container(app):
    return app.state.container


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_account(accounts, container):
    """Create an account straight in storage; returns (account, token)."""

    async def _make(
        username: Optional[str] = None,
        role: Role = Role.USER,
        password: str = "password123",
        email: Optional[str] = None,
    ):
        username = username or f"user-{uuid.uuid4().hex[:8]}"
        account = await accounts.create(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=container.passwords.hash(password),
            first_name="Test",
            last_name="User",
            phone=None,
            reserve_service_description="Served as a combat engineer",
            role=role.value,
        )
        return account, container.tokens.issue(account.id, account.username)

    return _make


@pytest.fixture()
def make_business(businesses):
    async def _make(owner_id: uuid.UUID, name: str = "Test Business", **fields):
        return await businesses.create(
            owner_id=owner_id,
            name=name,
            description=fields.pop("description", "A test business"),
            contact_info=fields.pop("contact_info", {"email": "shop@example.com"}),
            links=fields.pop("links", {"website": "https://example.com"}),
            photos=fields.pop("photos", ["front.jpg"]),
            **fields,
        )

    return _make


@pytest.fixture()
def gql(client):
    """Call one gateway operation; returns the decoded envelope."""

    async def _call(operation: str, variables: Optional[dict] = None, token: Optional[str] = None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        r = await client.post(
            "/api/v1/graphql",
            json={"operation": operation, "variables": variables or {}},
            headers=headers,
        )
        assert r.status_code == 200
        return r.json()

    return _call


def error_code(envelope: dict) -> Optional[str]:
    errors = envelope.get("errors")
    return errors[0]["extensions"]["code"] if errors else None


# ─── Postgres fixtures ──────────────────────────────────


@asynccontextmanager
async def rolled_back_session(url: str = TEST_DB_URL):
    """Session on one connection whose outer transaction always rolls back.

    Learn: The schema is created inside that same transaction, so a test
    database needs no migration run and is left exactly as it was found.
    Postgres DDL is transactional, which is what makes this work.
    """
    engine = create_async_engine(url, echo=False)
    try:
        try:
            conn = await engine.connect()
        except (OSError, DBAPIError) as e:
            pytest.skip(f"Postgres not reachable at {url}: {e}")
        async with conn:
            trans = await conn.begin()
            await conn.run_sync(Base.metadata.create_all)
            session = AsyncSession(
                bind=conn,
                expire_on_commit=False,
                join_transaction_mode="create_savepoint",
            )
            try:
                yield session
            finally:
                await session.close()
                await trans.rollback()
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session():
    async with rolled_back_session() as session:
        yield session


@pytest_asyncio.fixture()
async def sql_client(settings, db_session):
    """HTTP client on the real SQL repositories; only get_db is overridden."""
    application = create_app(settings)

    async def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    application.dependency_overrides.clear()
