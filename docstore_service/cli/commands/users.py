"""User and token management commands."""

import sys

import click

from docstore_service.cli.utils import cli_session_factory, coro, error, header, info, success
from docstore_service.core.exceptions import ConflictException
from docstore_service.features.tenants.service import TenantDirectory
from docstore_service.features.users.service import AuthenticationService


@click.group(name="users")
def users() -> None:
    """User and token management commands."""


@users.command(name="list")
@click.argument("tenant_id")
@coro
async def list_users(tenant_id: str) -> None:
    """List the users of a tenant."""
    async with cli_session_factory() as session_factory, session_factory() as session:
        rows = await AuthenticationService(session).list_users(tenant_id)

    header(f"Users of {tenant_id}")
    if not rows:
        info("No users found")
        return

    click.echo(f"{'ID':<38} {'Username':<20} {'Role':<6}")
    click.echo("-" * 66)
    for u in rows:
        click.echo(f"{u.id:<38} {u.username:<20} {u.role:<6}")


@users.command(name="create")
@click.argument("tenant_id")
@click.argument("username")
@click.option(
    "--role",
    type=click.Choice(["admin", "user"]),
    default="user",
    help="User role",
)
@click.option("--token", default=None, help="Predefined token (generated when omitted)")
@coro
async def create_user(tenant_id: str, username: str, role: str, token: str | None) -> None:
    """Create a user in TENANT_ID and print its token."""
    async with cli_session_factory() as session_factory, session_factory() as session:
        if await TenantDirectory(session).get_tenant(tenant_id) is None:
            error(f"Tenant '{tenant_id}' not found")
            sys.exit(1)
        try:
            user = await AuthenticationService(session).create_user(
                tenant_id, username, role, token=token
            )
        except ConflictException as e:
            error(e.detail)
            sys.exit(1)

    success(f"User '{user.username}' created ({user.role})")
    click.echo(f"Token: {user.token}")


@users.command(name="token")
@click.argument("tenant_id")
@click.argument("username")
@click.option(
    "--revoke",
    is_flag=True,
    default=False,
    help="Delete the token instead of issuing a new one",
)
@coro
async def rotate_token(tenant_id: str, username: str, revoke: bool) -> None:
    """Issue a new token for USERNAME, or revoke the current one."""
    async with cli_session_factory() as session_factory, session_factory() as session:
        auth = AuthenticationService(session)
        user = await auth.get_user_by_username(tenant_id, username)
        if user is None:
            error(f"User '{username}' not found in tenant '{tenant_id}'")
            sys.exit(1)

        if revoke:
            await auth.delete_token(tenant_id, user.id)
            success(f"Token of '{username}' revoked")
            return

        token = await auth.regenerate_token(tenant_id, user.id)

    success(f"New token issued for '{username}'")
    click.echo(f"Token: {token}")
