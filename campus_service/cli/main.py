"""Main CLI entry point for campus-service management commands."""

import click

from campus_service.cli.commands import database, server, threshold
from campus_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="campus-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Campus Service CLI - management commands for the tag backend.

    \b
    Command Groups:
      serve      Run the API server
      db         Schema creation and migrations
      threshold  Inspect or change the archived threshold

    \b
    Quick Start:
      campus-service db upgrade         # Apply migrations
      campus-service threshold set 15   # Archive tags above 15 upvotes
      campus-service serve              # Start the API
    """
    setup_logging()
    ctx.ensure_object(dict)


cli.add_command(server.serve)
cli.add_command(database.db)
cli.add_command(threshold.threshold)


def main() -> None:
    """Entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
