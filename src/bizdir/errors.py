"""Application error taxonomy.

Learn: Services raise these instead of HTTPException so the same code
serves both transports. The REST layer maps them to status codes via an
exception handler; the gateway maps them to error payloads carrying
`code`. Nothing in the auth layer retries — every failure is
deterministic for a given input and state.
"""


class AppError(Exception):
    """Base class for errors surfaced to callers."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(AppError):
    """Duplicate identity fields (username/email) on registration."""

    status_code = 409
    code = "CONFLICT"


class UnauthorizedError(AppError):
    """Missing, invalid or expired token, unknown subject, bad credentials."""

    status_code = 401
    code = "UNAUTHENTICATED"


class ForbiddenError(AppError):
    """Role or ownership denial, email collision on profile update."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    """Target resource does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ConfigurationError(Exception):
    """Raised at startup when the process cannot be wired safely."""


class BadRequestError(AppError):
    """Input that is well-formed JSON but unusable (bad cursor, bad page size)."""

    status_code = 400
    code = "BAD_USER_INPUT"
