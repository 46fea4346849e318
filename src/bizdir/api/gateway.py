"""Gateway API — GraphQL-style operations over one endpoint.

Learn: POST /graphql with {"operation": "...", "variables": {...}}.
Each operation is a row in OPERATIONS: a name, its AccessRequirement and
a resolver. The dispatcher does the same thing for every operation:

1. unwrap the transport request and resolve the RequestContext
2. precheck the declared requirement (role / authentication)
3. run the resolver (ownership checks happen inside the services,
   after the resource lookup)

Responses follow the GraphQL envelope — {"data": {...}} on success,
{"data": null, "errors": [{message, path, extensions: {code}}]} on
failure — always with HTTP 200, like any GraphQL server. A body that
can't be read as a request at all (bad JSON, no operation) gets the same
envelope without a path, since no operation was selected.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, ValidationError

from bizdir.auth.access import (
    ADMIN_ONLY,
    AUTHENTICATED,
    OPEN,
    OWNER_OR_ADMIN,
    AccessRequirement,
    precheck,
)
from bizdir.auth.context import GatewayExecution, IdentityPropagator
from bizdir.auth.dependencies import get_propagator
from bizdir.auth.identity import RequestContext
from bizdir.api.deps import get_account_service, get_business_service
from bizdir.errors import AppError, BadRequestError
from bizdir.schemas.account import AccountRead, AccountSummary, UpdateUserInput
from bizdir.schemas.business import (
    BusinessConnection,
    BusinessRead,
    CreateBusinessInput,
    PaginationInput,
    UpdateBusinessInput,
)
from bizdir.services.account_service import AccountService
from bizdir.services.business_service import BusinessService

logger = structlog.get_logger()

router = APIRouter()


class GatewayRequest(BaseModel):
    operation: str = Field(..., min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)


@dataclass
class Services:
    accounts: AccountService
    businesses: BusinessService


Resolver = Callable[[Services, RequestContext, dict], Awaitable[Any]]


@dataclass(frozen=True)
class Operation:
    name: str
    requirement: AccessRequirement
    resolve: Resolver


# ─── Helpers ────────────────────────────────────────────


def _id(variables: dict, name: str = "id") -> uuid.UUID:
    raw = variables.get(name)
    if raw is None:
        raise BadRequestError(f"Variable '{name}' is required")
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise BadRequestError(f"Variable '{name}' is not a valid ID")


def _business(business) -> dict:
    return BusinessRead.model_validate(business).dump()


async def _account(svc: Services, account) -> dict:
    """Account view with its businesses attached."""
    businesses = await svc.businesses.list_by_owner(account.id)
    summary = AccountSummary.model_validate(account)
    return AccountRead(
        **summary.model_dump(),
        businesses=[BusinessRead.model_validate(b) for b in businesses],
    ).dump()


# ─── Business resolvers ─────────────────────────────────


async def businesses(svc: Services, ctx: RequestContext, v: dict):
    pagination = PaginationInput.model_validate(v.get("pagination") or {})
    page = await svc.businesses.list_page(pagination.take, pagination.cursor)
    return BusinessConnection(
        nodes=[BusinessRead.model_validate(n) for n in page.nodes],
        next_cursor=page.next_cursor,
        total_count=page.total_count,
    ).dump()


async def business(svc: Services, ctx: RequestContext, v: dict):
    return _business(await svc.businesses.get(_id(v)))


async def my_businesses(svc: Services, ctx: RequestContext, v: dict):
    return [_business(b) for b in await svc.businesses.list_mine(ctx)]


async def create_business(svc: Services, ctx: RequestContext, v: dict):
    data = CreateBusinessInput.model_validate(v.get("input") or {})
    created = await svc.businesses.create(
        ctx,
        name=data.name,
        description=data.description,
        contact_info=data.contact_info,
        links=data.links,
        photos=data.photos,
    )
    return _business(created)


async def update_business(svc: Services, ctx: RequestContext, v: dict):
    data = UpdateBusinessInput.model_validate(v.get("input") or {})
    updated = await svc.businesses.update(
        ctx, data.id, data.model_dump(exclude_unset=True, exclude={"id"})
    )
    return _business(updated)


async def remove_business(svc: Services, ctx: RequestContext, v: dict):
    return await svc.businesses.remove(ctx, _id(v))


async def admin_remove_business(svc: Services, ctx: RequestContext, v: dict):
    return await svc.businesses.admin_remove(ctx, _id(v))


# ─── Account resolvers ──────────────────────────────────


async def users(svc: Services, ctx: RequestContext, v: dict):
    return [await _account(svc, a) for a in await svc.accounts.list_accounts(ctx)]


async def user_profile(svc: Services, ctx: RequestContext, v: dict):
    return await _account(svc, await svc.accounts.profile(ctx))


async def user(svc: Services, ctx: RequestContext, v: dict):
    return await _account(svc, await svc.accounts.get_as_admin(ctx, _id(v)))


async def update_user(svc: Services, ctx: RequestContext, v: dict):
    data = UpdateUserInput.model_validate(v.get("input") or {})
    updated = await svc.accounts.update(
        ctx, data.id, data.model_dump(exclude_unset=True, exclude={"id"})
    )
    return await _account(svc, updated)


async def delete_user(svc: Services, ctx: RequestContext, v: dict):
    return await svc.accounts.remove(ctx, _id(v))


async def delete_my_account(svc: Services, ctx: RequestContext, v: dict):
    return await svc.accounts.remove_self(ctx)


OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        Operation("businesses", OPEN, businesses),
        Operation("business", OPEN, business),
        Operation("myBusinesses", AUTHENTICATED, my_businesses),
        Operation("createBusiness", AUTHENTICATED, create_business),
        Operation("updateBusiness", OWNER_OR_ADMIN, update_business),
        Operation("removeBusiness", OWNER_OR_ADMIN, remove_business),
        Operation("adminRemoveBusiness", ADMIN_ONLY, admin_remove_business),
        Operation("users", ADMIN_ONLY, users),
        Operation("userProfile", AUTHENTICATED, user_profile),
        Operation("user", ADMIN_ONLY, user),
        Operation("updateUser", OWNER_OR_ADMIN, update_user),
        Operation("deleteUser", OWNER_OR_ADMIN, delete_user),
        Operation("deleteMyAccount", AUTHENTICATED, delete_my_account),
    )
}


def _error(operation: Optional[str], message: str, code: str) -> dict:
    error: dict[str, Any] = {"message": message, "extensions": {"code": code}}
    if operation is not None:
        error["path"] = [operation]
    return {"data": None, "errors": [error]}


# ─── Endpoint ───────────────────────────────────────────


async def _read_body(request: Request) -> GatewayRequest:
    """Parse the request body by hand so malformed requests get the envelope too."""
    try:
        payload = await request.json()
    except ValueError:
        raise BadRequestError("Request body must be valid JSON")
    try:
        return GatewayRequest.model_validate(payload)
    except ValidationError as e:
        raise BadRequestError(_validation_message(e))


@router.post("/graphql")
async def execute(
    request: Request,
    propagator: IdentityPropagator = Depends(get_propagator),
    accounts: AccountService = Depends(get_account_service),
    businesses_svc: BusinessService = Depends(get_business_service),
):
    """Run one named operation."""
    try:
        body = await _read_body(request)
    except BadRequestError as e:
        return _error(None, e.message, e.code)

    op = OPERATIONS.get(body.operation)
    if op is None:
        return _error(
            body.operation, f"Unknown operation '{body.operation}'", "BAD_USER_INPUT"
        )

    execution = GatewayExecution(
        request=request, operation=op.name, variables=body.variables
    )
    try:
        ctx = await propagator.from_gateway(execution)
        precheck(op.requirement, ctx.identity)
        data = await op.resolve(
            Services(accounts=accounts, businesses=businesses_svc),
            ctx,
            execution.variables,
        )
    except AppError as e:
        logger.info("gateway.operation_failed", operation=op.name, code=e.code)
        return _error(op.name, e.message, e.code)
    except ValidationError as e:
        return _error(op.name, _validation_message(e), "BAD_USER_INPUT")

    return {"data": {op.name: data}}


def _validation_message(e: ValidationError) -> str:
    first = e.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid input at '{location}': {first['msg']}"
