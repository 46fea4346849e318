"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers. get_request_context
runs the IdentityPropagator once per request; everything downstream gets
the finished, immutable RequestContext.

- get_request_context → "soft" auth: anonymous context when no token
- get_current_identity → "hard" auth: 401 when no token
- require(requirement) → evaluates a role requirement at the route level
"""

from typing import Optional

from fastapi import Depends, Header, Request

from bizdir.auth.access import AccessRequirement, enforce
from bizdir.auth.context import IdentityPropagator
from bizdir.auth.identity import Identity, RequestContext
from bizdir.auth.jwt import TokenIssuer
from bizdir.container import Container
from bizdir.db.engine import get_db
from bizdir.errors import UnauthorizedError
from bizdir.repositories.accounts import SqlAccountRepository
from bizdir.repositories.base import AccountRepository


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_token_issuer(container: Container = Depends(get_container)) -> TokenIssuer:
    return container.tokens


def get_account_repository(db=Depends(get_db)) -> AccountRepository:
    return SqlAccountRepository(db)


def get_propagator(
    tokens: TokenIssuer = Depends(get_token_issuer),
    accounts: AccountRepository = Depends(get_account_repository),
) -> IdentityPropagator:
    return IdentityPropagator(tokens, accounts)


async def get_request_context(
    authorization: Optional[str] = Header(None),
    propagator: IdentityPropagator = Depends(get_propagator),
) -> RequestContext:
    """Resolve the caller (optional — anonymous context if no token)."""
    headers = {"authorization": authorization} if authorization is not None else {}
    return await propagator.from_headers(headers)


async def get_current_identity(
    context: RequestContext = Depends(get_request_context),
) -> Identity:
    """Resolve the caller (required — 401 if no token)."""
    if context.identity is None:
        raise UnauthorizedError("Authentication required")
    return context.identity


def require(requirement: AccessRequirement):
    """Build a dependency that enforces a requirement needing no resource."""

    async def _check(
        context: RequestContext = Depends(get_request_context),
    ) -> RequestContext:
        enforce(requirement, context.identity)
        return context

    return _check
