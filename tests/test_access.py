"""Access control evaluator tests.

Learn: These are pure functions over (requirement, identity, owner), so
they are tested directly, without the app. The ownership truth table is
the whole contract of OwnershipOrRole — all four cells are checked.
"""

import uuid

import pytest

from bizdir.auth.access import (
    ADMIN_ONLY,
    AUTHENTICATED,
    OPEN,
    OWNER_OR_ADMIN,
    OwnershipOrRole,
    RoleRequirement,
    enforce,
    evaluate,
    precheck,
    require_ownership_or_role,
    require_role,
)
from bizdir.auth.identity import Identity, Role
from bizdir.errors import ForbiddenError, UnauthorizedError


def _identity(role: Role = Role.USER, id: uuid.UUID | None = None) -> Identity:
    return Identity(
        id=id or uuid.uuid4(),
        username="someone",
        email="someone@example.com",
        role=role,
    )


# ═══════════════════════════════════════════════════════════
# require_role
# ═══════════════════════════════════════════════════════════


def test_empty_role_set_allows_anyone():
    assert require_role(None, frozenset()) is True
    assert require_role(None, None) is True
    assert require_role(_identity(), frozenset()) is True


def test_role_in_set_allowed():
    assert require_role(_identity(Role.ADMIN), {Role.ADMIN}) is True
    assert require_role(_identity(Role.USER), {Role.USER, Role.ADMIN}) is True


def test_role_not_in_set_denied():
    assert require_role(_identity(Role.USER), {Role.ADMIN}) is False


def test_no_identity_denied_when_roles_declared():
    assert require_role(None, {Role.ADMIN}) is False


# ═══════════════════════════════════════════════════════════
# require_ownership_or_role: 2×2 truth table
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "is_owner,role,expected",
    [
        (True, Role.USER, True),
        (True, Role.ADMIN, True),
        (False, Role.ADMIN, True),
        (False, Role.USER, False),
    ],
)
def test_ownership_truth_table(is_owner, role, expected):
    caller = _identity(role)
    owner_id = caller.id if is_owner else uuid.uuid4()
    assert require_ownership_or_role(caller, owner_id, Role.ADMIN) is expected


def test_ownership_without_identity_denied():
    assert require_ownership_or_role(None, uuid.uuid4(), Role.ADMIN) is False


# ═══════════════════════════════════════════════════════════
# evaluate / enforce / precheck
# ═══════════════════════════════════════════════════════════


def test_evaluate_open_and_authenticated():
    assert evaluate(OPEN, None) is True
    assert evaluate(AUTHENTICATED, None) is False
    assert evaluate(AUTHENTICATED, _identity()) is True


def test_evaluate_role_requirement():
    assert evaluate(ADMIN_ONLY, _identity(Role.ADMIN)) is True
    assert evaluate(ADMIN_ONLY, _identity(Role.USER)) is False
    assert evaluate(RoleRequirement(), _identity(Role.USER)) is True


def test_evaluate_ownership_needs_owner_id():
    with pytest.raises(ValueError):
        evaluate(OWNER_OR_ADMIN, _identity())


def test_evaluate_custom_override_role():
    requirement = OwnershipOrRole(override_role=Role.USER)
    assert evaluate(requirement, _identity(Role.USER), owner_id=uuid.uuid4()) is True


def test_enforce_without_identity_is_unauthenticated():
    with pytest.raises(UnauthorizedError):
        enforce(ADMIN_ONLY, None)
    with pytest.raises(UnauthorizedError):
        enforce(OWNER_OR_ADMIN, None, owner_id=uuid.uuid4())


def test_enforce_denied_is_forbidden_with_generic_message():
    with pytest.raises(ForbiddenError) as exc:
        enforce(
            OWNER_OR_ADMIN,
            _identity(Role.USER),
            owner_id=uuid.uuid4(),
            action="update this business",
        )
    assert exc.value.message == "You do not have permission to update this business"
    assert exc.value.status_code == 403


def test_enforce_allows_owner():
    caller = _identity(Role.USER)
    enforce(OWNER_OR_ADMIN, caller, owner_id=caller.id)


def test_enforce_open_never_raises():
    enforce(OPEN, None)


def test_precheck_ownership_only_checks_presence():
    """The ownership half needs the resource, so precheck only wants a caller."""
    precheck(OWNER_OR_ADMIN, _identity(Role.USER))
    with pytest.raises(UnauthorizedError):
        precheck(OWNER_OR_ADMIN, None)


def test_precheck_role_is_decided_up_front():
    with pytest.raises(ForbiddenError):
        precheck(ADMIN_ONLY, _identity(Role.USER))
    precheck(ADMIN_ONLY, _identity(Role.ADMIN))
