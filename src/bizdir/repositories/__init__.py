"""Storage access behind repository protocols.

Learn: Services depend on the protocols in repositories.base, never on
AsyncSession directly. The SQLAlchemy implementations live next to them;
tests swap in in-memory implementations through FastAPI's
dependency_overrides.
"""

from bizdir.repositories.accounts import SqlAccountRepository
from bizdir.repositories.base import AccountRepository, BusinessRepository
from bizdir.repositories.businesses import SqlBusinessRepository

__all__ = [
    "AccountRepository",
    "BusinessRepository",
    "SqlAccountRepository",
    "SqlBusinessRepository",
]
