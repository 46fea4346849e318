"""Per-request service wiring.

Learn: Every request builds its own repositories on its own session and
wraps them in services. The only shared pieces come from the Container
(token issuer, password hasher, settings), which is read-only.
"""

from fastapi import Depends

from bizdir.auth.dependencies import get_account_repository, get_container
from bizdir.container import Container
from bizdir.db.engine import get_db
from bizdir.repositories.base import AccountRepository, BusinessRepository
from bizdir.repositories.businesses import SqlBusinessRepository
from bizdir.services.account_service import AccountService
from bizdir.services.auth_service import CredentialService
from bizdir.services.business_service import BusinessService


def get_business_repository(db=Depends(get_db)) -> BusinessRepository:
    return SqlBusinessRepository(db)


def get_credential_service(
    accounts: AccountRepository = Depends(get_account_repository),
    container: Container = Depends(get_container),
) -> CredentialService:
    return CredentialService(accounts, container.tokens, container.passwords)


def get_account_service(
    accounts: AccountRepository = Depends(get_account_repository),
) -> AccountService:
    return AccountService(accounts)


def get_business_service(
    businesses: BusinessRepository = Depends(get_business_repository),
    container: Container = Depends(get_container),
) -> BusinessService:
    return BusinessService(
        businesses, default_take=container.settings.default_page_size
    )
