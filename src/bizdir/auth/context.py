"""Identity context propagation — bearer token → RequestContext.

Learn: Two entry points, one shape. REST routes hand over request headers
directly; the gateway hands over a GatewayExecution and we unwrap the
underlying Starlette request from it. Both paths end in resolve(), so
downstream handlers cannot tell them apart.

Resolution is all-or-nothing: the context is returned only after the
token is verified AND the account is re-read. A half-built context is
never visible to a handler.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import structlog
from starlette.requests import Request

from bizdir.auth.identity import ANONYMOUS, Identity, RequestContext
from bizdir.auth.jwt import TokenError, TokenIssuer
from bizdir.errors import UnauthorizedError
from bizdir.repositories.base import AccountRepository

logger = structlog.get_logger()

BEARER_PREFIX = "bearer "


@dataclass
class GatewayExecution:
    """Execution context of one gateway operation.

    Wraps the transport request the operation arrived on, plus the
    operation name and its variables.
    """

    request: Request
    operation: str
    variables: dict[str, Any] = field(default_factory=dict)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an Authorization header value.

    None when the header is absent. A header with any other scheme, or
    with an empty token, is rejected rather than ignored.
    """
    if authorization is None or not authorization.strip():
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        raise UnauthorizedError("Invalid authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Invalid authorization header")
    return token


class IdentityPropagator:
    """Resolves the caller of a request into a RequestContext."""

    def __init__(self, tokens: TokenIssuer, accounts: AccountRepository):
        self.tokens = tokens
        self.accounts = accounts

    async def resolve(self, token: Optional[str]) -> RequestContext:
        if token is None:
            return ANONYMOUS
        try:
            account_id = self.tokens.subject_of(token)
        except TokenError as e:
            raise UnauthorizedError(str(e))

        account = await self.accounts.get(account_id)
        if account is None:
            # Valid signature, but the account was deleted since issuance
            logger.info("auth.unknown_subject", user_id=str(account_id))
            raise UnauthorizedError("User not found")
        return RequestContext(identity=Identity.from_account(account))

    async def from_headers(self, headers: Mapping[str, str]) -> RequestContext:
        """Direct-transport flavor."""
        return await self.resolve(extract_bearer_token(headers.get("authorization")))

    async def from_gateway(self, execution: GatewayExecution) -> RequestContext:
        """Gateway flavor — unwrap the transport request first."""
        return await self.from_headers(execution.request.headers)
