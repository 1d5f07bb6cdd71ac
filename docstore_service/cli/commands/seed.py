"""Demo data commands."""

import click

from docstore_service.cli.utils import cli_session_factory, coro, header, info, success
from docstore_service.features.seed import DEMO_USERS, DataSeedService


@click.group(name="seed")
def seed() -> None:
    """Demo data management commands."""


@seed.command(name="demo")
@click.option(
    "--show-tokens/--hide-tokens",
    default=True,
    help="Print the fixed demo tokens after seeding",
)
@coro
async def seed_demo(show_tokens: bool) -> None:
    """Create the demo tenants and accounts if they do not exist.

    \b
    Tenants:
      company_a, company_b    active
      company_c               inactive
    """
    header("Seeding demo data")

    async with cli_session_factory() as session_factory:
        report = await DataSeedService(session_factory).seed()

    if report.created_anything:
        success(
            f"Created {len(report.tenants_created)} tenant(s) "
            f"and {len(report.users_created)} user(s)"
        )
    else:
        info("Demo data already present, nothing to do")

    if show_tokens:
        click.echo()
        click.echo(f"{'Tenant':<12} {'Username':<10} {'Role':<6} Token")
        click.echo("-" * 60)
        for user in DEMO_USERS:
            click.echo(f"{user.tenant_id:<12} {user.username:<10} {user.role:<6} {user.token}")
