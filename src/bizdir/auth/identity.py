"""Identity and request-scoped context types.

Learn: The identity is rebuilt from the accounts table on every request —
tokens only carry id + username, never the role. A demoted admin loses
admin rights on their very next request, not when their token expires.

Identity and everything inside it is frozen, profile included, so a
handler can hash it or share it but never edit the caller in place.
"""

import enum
import uuid
from dataclasses import asdict, dataclass, field
from typing import Optional


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Profile:
    """Display fields of the account, copied at resolution time."""

    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    reserve_service_description: str = ""


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as stored right now."""

    id: uuid.UUID
    username: str
    email: str
    role: Role
    profile: Profile = field(default_factory=Profile)

    @classmethod
    def from_account(cls, account) -> "Identity":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            role=Role(account.role),
            profile=Profile(
                first_name=account.first_name,
                last_name=account.last_name,
                phone=account.phone,
                reserve_service_description=account.reserve_service_description,
            ),
        )

    def as_dict(self) -> dict:
        return {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            **asdict(self.profile),
        }


@dataclass(frozen=True)
class RequestContext:
    """Per-request context, populated once by the IdentityPropagator.

    identity is None for unauthenticated requests — that is not an error
    by itself; operations that need a caller enforce it.
    """

    identity: Optional[Identity] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None


ANONYMOUS = RequestContext()
