"""bizdir CLI — account administration straight against the database.

Usage:
    bizdir create-admin alice alice@example.com     # prompts for password
    bizdir set-role bob ADMIN                        # promote
    bizdir set-role bob USER                         # demote

There is no API route that grants ADMIN; this is the only way in.
Role changes apply on the account's next request — tokens don't carry
the role, so nobody has to log out.
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager

import click

from bizdir.auth.identity import Role
from bizdir.config import settings
from bizdir.container import Container
from bizdir.errors import ConflictError


def _run(coro):
    """Run an async coroutine from a synchronous Click handler."""
    return asyncio.run(coro)


@asynccontextmanager
async def session_scope():
    """One session per command; the pool is closed when the command ends."""
    from bizdir.db.engine import async_session_factory, dispose_engine

    try:
        async with async_session_factory() as session:
            yield session
    finally:
        await dispose_engine()


async def _with_repository(fn):
    from bizdir.repositories.accounts import SqlAccountRepository

    async with session_scope() as session:
        return await fn(SqlAccountRepository(session))


@click.group()
def cli():
    """bizdir account administration."""


@cli.command("create-admin")
@click.argument("username")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--first-name", default="", help="Profile first name")
@click.option("--last-name", default="", help="Profile last name")
def create_admin(username: str, email: str, password: str, first_name: str, last_name: str):
    """Create an ADMIN account."""
    from bizdir.services.auth_service import CredentialService

    container = Container.build(settings)

    async def _create(accounts):
        svc = CredentialService(accounts, container.tokens, container.passwords)
        result = await svc.register(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=Role.ADMIN,
        )
        return result.account

    try:
        account = _run(_with_repository(_create))
    except ConflictError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Created admin {account.username} ({account.id})", fg="green")


@cli.command("set-role")
@click.argument("username")
@click.argument("role", type=click.Choice([r.value for r in Role]))
def set_role(username: str, role: str):
    """Change an account's role."""

    async def _update(accounts):
        account = await accounts.find_by_username(username)
        if account is None:
            return None
        return await accounts.update(account, {"role": role})

    account = _run(_with_repository(_update))
    if account is None:
        click.secho(f"Error: no account named {username}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"{account.username} is now {account.role}", fg="green")


if __name__ == "__main__":
    cli()
