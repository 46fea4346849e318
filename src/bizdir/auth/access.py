"""Access control evaluator.

Learn: Every operation declares exactly one AccessRequirement and
evaluates it at the top of its handler — no decorators, no metadata
lookups. Three variants cover the whole API:

- Open               → anyone, authenticated or not
- RoleRequirement    → caller's role must be in a set (empty set = open)
- OwnershipOrRole    → caller owns the resource, or holds the override role

Ownership checks need the resource, so they run after the lookup. That
ordering is the contract: a missing resource is always NotFound, and only
an existing one can be Forbidden.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Union

import structlog

from bizdir.auth.identity import Identity, Role
from bizdir.errors import ForbiddenError, UnauthorizedError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Open:
    """No restriction."""

    requires_identity: bool = False


@dataclass(frozen=True)
class Authenticated:
    """Any authenticated caller."""

    requires_identity: bool = True


@dataclass(frozen=True)
class RoleRequirement:
    roles: frozenset[Role] = field(default_factory=frozenset)
    requires_identity: bool = True


@dataclass(frozen=True)
class OwnershipOrRole:
    override_role: Role = Role.ADMIN
    requires_identity: bool = True


AccessRequirement = Union[Open, Authenticated, RoleRequirement, OwnershipOrRole]

OPEN = Open()
AUTHENTICATED = Authenticated()
ADMIN_ONLY = RoleRequirement(frozenset({Role.ADMIN}))
OWNER_OR_ADMIN = OwnershipOrRole(Role.ADMIN)


def require_role(identity: Optional[Identity], allowed_roles) -> bool:
    """True iff no roles are declared, or the identity holds one of them."""
    if not allowed_roles:
        return True
    if identity is None:
        return False
    return identity.role in allowed_roles


def require_ownership_or_role(
    identity: Optional[Identity],
    resource_owner_id: uuid.UUID,
    override_role: Role,
) -> bool:
    """True iff the identity owns the resource or holds override_role."""
    if identity is None:
        return False
    return identity.id == resource_owner_id or identity.role == override_role


def evaluate(
    requirement: AccessRequirement,
    identity: Optional[Identity],
    owner_id: Optional[uuid.UUID] = None,
) -> bool:
    """Single evaluation function over every requirement variant."""
    if isinstance(requirement, Open):
        return True
    if isinstance(requirement, Authenticated):
        return identity is not None
    if isinstance(requirement, RoleRequirement):
        return require_role(identity, requirement.roles)
    if isinstance(requirement, OwnershipOrRole):
        if owner_id is None:
            raise ValueError("OwnershipOrRole needs the resource owner id")
        return require_ownership_or_role(
            identity, owner_id, requirement.override_role
        )
    raise TypeError(f"Unknown access requirement: {requirement!r}")


def enforce(
    requirement: AccessRequirement,
    identity: Optional[Identity],
    owner_id: Optional[uuid.UUID] = None,
    action: str = "perform this action",
) -> None:
    """Evaluate and raise on deny.

    UnauthorizedError when the requirement needs a caller and there is
    none; ForbiddenError (generic message, no reason) otherwise.
    """
    if requirement.requires_identity and identity is None:
        raise UnauthorizedError("Authentication required")
    if not evaluate(requirement, identity, owner_id):
        logger.info(
            "access.denied",
            requirement=type(requirement).__name__,
            user_id=str(identity.id) if identity else None,
            action=action,
        )
        raise ForbiddenError(f"You do not have permission to {action}")


def precheck(requirement: AccessRequirement, identity: Optional[Identity]) -> None:
    """Enforce the part of a requirement that needs no resource.

    Role and authentication checks are fully decided here. For
    OwnershipOrRole only the presence of a caller is checked; the
    ownership half runs after the resource lookup, inside the service.
    """
    if isinstance(requirement, OwnershipOrRole):
        enforce(AUTHENTICATED, identity)
    else:
        enforce(requirement, identity)
