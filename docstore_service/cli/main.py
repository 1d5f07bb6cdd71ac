"""Main CLI entry point for docstore-service management commands."""

import click

from docstore_service import __version__
from docstore_service.cli.commands import seed, server, tenants, users
from docstore_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="docstore")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Docstore CLI - management commands for the tenant event service.

    \b
    Command Groups:
      seed       Demo data
      tenants    Tenant directory
      users      Users and tokens
      server     Run the service

    \b
    Quick Start:
      docstore seed demo                       # Create demo tenants and tokens
      docstore users create company_a carol    # Add a user, print its token
      docstore server run --reload             # Start on APP_HOST:APP_PORT
    """
    ctx.ensure_object(dict)


cli.add_command(seed.seed)
cli.add_command(tenants.tenants)
cli.add_command(users.users)
cli.add_command(server.server)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
