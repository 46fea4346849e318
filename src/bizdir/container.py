"""Process-wide components, built once at startup.

Learn: Nothing here is mutable after construction. create_app() builds one
Container and parks it on app.state; request dependencies read it from
there. Per-request pieces (sessions, repositories, services) are built
fresh for every request on top of it.

Building the container is also the startup gate: a missing signing secret
raises ConfigurationError here, before the app serves a single route.
"""

from dataclasses import dataclass

from bizdir.auth.jwt import TokenIssuer
from bizdir.auth.password import PasswordHasher
from bizdir.config import Settings


@dataclass(frozen=True)
class Container:
    settings: Settings
    tokens: TokenIssuer
    passwords: PasswordHasher

    @classmethod
    def build(cls, settings: Settings) -> "Container":
        return cls(
            settings=settings,
            tokens=TokenIssuer(
                secret=settings.jwt_secret,
                algorithm=settings.jwt_algorithm,
                expire_minutes=settings.access_token_expire_minutes,
            ),
            passwords=PasswordHasher(rounds=settings.bcrypt_rounds),
        )
