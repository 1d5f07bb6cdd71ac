"""Tenant management commands."""

import json
import sys

import click

from docstore_service.cli.utils import cli_session_factory, coro, error, header, info, success
from docstore_service.core.exceptions import ConflictException
from docstore_service.features.tenants.service import TenantDirectory


@click.group(name="tenants")
def tenants() -> None:
    """Tenant management commands."""


@tenants.command(name="list")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@coro
async def list_tenants(output_format: str) -> None:
    """List all tenants, active or not."""
    async with cli_session_factory() as session_factory, session_factory() as session:
        rows = await TenantDirectory(session).list_tenants()

    if output_format == "json":
        data = [{"id": t.id, "name": t.name, "is_active": t.is_active} for t in rows]
        click.echo(json.dumps(data, indent=2))
        return

    header("Tenants")
    if not rows:
        info("No tenants found")
        return

    click.echo(f"{'ID':<20} {'Name':<30} {'Active':<6}")
    click.echo("-" * 58)
    for t in rows:
        click.echo(f"{t.id:<20} {t.name:<30} {'yes' if t.is_active else 'no':<6}")


@tenants.command(name="add")
@click.argument("tenant_id")
@click.option("--name", default=None, help="Display name (defaults to the id)")
@click.option("--inactive", is_flag=True, default=False, help="Create the tenant deactivated")
@coro
async def add_tenant(tenant_id: str, name: str | None, inactive: bool) -> None:
    """Register a new tenant."""
    async with cli_session_factory() as session_factory, session_factory() as session:
        try:
            await TenantDirectory(session).add_tenant(
                tenant_id, name or tenant_id, is_active=not inactive
            )
        except ConflictException as e:
            error(e.detail)
            sys.exit(1)

    success(f"Tenant '{tenant_id}' created")


@tenants.command(name="deactivate")
@click.argument("tenant_id")
@coro
async def deactivate_tenant(tenant_id: str) -> None:
    """Deactivate a tenant; its users can no longer connect."""
    async with cli_session_factory() as session_factory, session_factory() as session:
        tenant = await TenantDirectory(session).set_active(tenant_id, is_active=False)

    if tenant is None:
        error(f"Tenant '{tenant_id}' not found")
        sys.exit(1)
    success(f"Tenant '{tenant_id}' deactivated")
