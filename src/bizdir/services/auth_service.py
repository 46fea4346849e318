"""Credential service — registration, login, identity re-hydration.

Learn: Login failures are deliberately boring. Unknown username and wrong
password raise the exact same UnauthorizedError, so the response can't be
used to discover which usernames exist.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog

from bizdir.auth.identity import Role
from bizdir.auth.jwt import TokenIssuer
from bizdir.auth.password import PasswordHasher
from bizdir.db.models import Account
from bizdir.errors import ConflictError, UnauthorizedError
from bizdir.repositories.base import AccountRepository, DuplicateAccountError

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"
DUPLICATE_ACCOUNT = "Username or email already exists"


@dataclass
class AuthResult:
    account: Account
    access_token: str


class CredentialService:
    """Verifies credentials and issues identity tokens."""

    def __init__(
        self,
        accounts: AccountRepository,
        tokens: TokenIssuer,
        passwords: PasswordHasher,
    ):
        self.accounts = accounts
        self.tokens = tokens
        self.passwords = passwords

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        reserve_service_description: str = "",
        role: Role = Role.USER,
    ) -> AuthResult:
        """Create an account and sign a token for it.

        Learn: The OR pre-check gives a clean 409 in the common case. Two
        concurrent registrations can both pass it, though — the unique
        constraints in storage are what actually decide, and their
        violation is reported as the same Conflict.
        """
        if await self.accounts.find_by_username_or_email(username, email):
            raise ConflictError(DUPLICATE_ACCOUNT)

        password_hash = await self.passwords.hash_async(password)
        try:
            account = await self.accounts.create(
                username=username,
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                reserve_service_description=reserve_service_description,
                role=role.value,
            )
        except DuplicateAccountError:
            raise ConflictError(DUPLICATE_ACCOUNT)

        logger.info("auth.registered", user_id=str(account.id), role=account.role)
        return AuthResult(account, self.tokens.issue(account.id, account.username))

    async def login(self, username: str, password: str) -> AuthResult:
        account = await self.accounts.find_by_username(username)
        if account is None:
            logger.info("auth.login_failed", reason="unknown_user")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await self.passwords.verify_async(password, account.password_hash):
            logger.info("auth.login_failed", reason="bad_password")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info("auth.logged_in", user_id=str(account.id))
        return AuthResult(account, self.tokens.issue(account.id, account.username))

    async def validate(self, account_id: uuid.UUID) -> Optional[Account]:
        """Re-read the canonical account for a token subject."""
        return await self.accounts.get(account_id)
