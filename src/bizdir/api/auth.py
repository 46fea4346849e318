"""Auth API — registration, login, profile, admin check.

Learn: Routes for the REST side of authentication:
- POST /auth/register → create a USER account, returns a token (201)
- POST /auth/login → username/password → token (201)
- GET /auth/profile → the resolved identity of the caller
- GET /auth/admin → only ADMIN callers get through

Errors are raised as AppError subclasses; the handler registered in
create_app turns them into status codes.
"""

from fastapi import APIRouter, Depends

from bizdir.auth.access import ADMIN_ONLY
from bizdir.auth.dependencies import get_current_identity, require
from bizdir.auth.identity import Identity
from bizdir.api.deps import get_credential_service
from bizdir.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
)
from bizdir.services.auth_service import AuthResult, CredentialService

router = APIRouter(prefix="/auth")


def _auth_response(result: AuthResult) -> AuthResponse:
    account = result.account
    return AuthResponse(
        id=account.id,
        username=account.username,
        email=account.email,
        first_name=account.first_name,
        last_name=account.last_name,
        phone=account.phone,
        reserve_service_description=account.reserve_service_description,
        role=account.role,
        access_token=result.access_token,
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    svc: CredentialService = Depends(get_credential_service),
):
    """Create a new user account (role USER)."""
    result = await svc.register(
        username=body.username,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        reserve_service_description=body.reserve_service_description,
    )
    return _auth_response(result)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse, status_code=201)
async def login(
    body: LoginRequest,
    svc: CredentialService = Depends(get_credential_service),
):
    """Login with username and password → access token."""
    result = await svc.login(body.username, body.password)
    return _auth_response(result)


# ─── Current user ───────────────────────────────────────


@router.get("/profile", response_model=ProfileResponse)
async def profile(identity: Identity = Depends(get_current_identity)):
    """The caller as resolved from their token, re-read from storage."""
    return identity.as_dict()


@router.get(
    "/admin",
    response_model=MessageResponse,
    dependencies=[Depends(require(ADMIN_ONLY))],
)
async def admin_only():
    return {"message": "Admin access granted"}
