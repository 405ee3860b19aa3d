"""Database management commands.

Example:bash
    # Create missing tables (development databases)
    campus-service db init

    # Apply all pending migrations
    campus-service db upgrade

    # Show the applied revision
    campus-service db current
"""

import sys

import click

from campus_service.cli.utils import coro, error, info, success
from campus_service.core.settings import get_db_settings


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Create any missing tables directly from the models."""
    from campus_service.core.database import Base
    from campus_service.infra.database import create_schema, dispose_engine, get_engine

    settings = get_db_settings()
    info(f"Initializing database ({'sqlite' if settings.is_sqlite else settings.host})...")

    try:
        await create_schema(get_engine())
        success(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")
    except Exception as e:
        error(f"Failed to initialize database: {e}")
        sys.exit(1)
    finally:
        await dispose_engine()


@db.command()
@click.option(
    "--revision",
    default="head",
    help="Target revision (default: head)",
)
@click.option(
    "--sql/--no-sql",
    default=False,
    help="Output SQL without executing",
)
@coro
async def upgrade(revision: str, sql: bool) -> None:
    """Apply database migrations."""
    from campus_service.infra.database.alembic import get_alembic_commands

    info(f"Upgrading database to: {revision}")

    try:
        output = await get_alembic_commands().upgrade(revision, sql=sql)
        if output:
            click.echo(output)
        if not sql:
            success("Database upgraded successfully!")
    except Exception as e:
        error(f"Failed to upgrade database: {e}")
        sys.exit(1)


@db.command()
@click.option("--verbose", "-v", is_flag=True, help="Show revision details")
@coro
async def current(verbose: bool) -> None:
    """Show the revision the database is at."""
    from campus_service.infra.database.alembic import get_alembic_commands

    try:
        output = await get_alembic_commands().current(verbose=verbose)
        click.echo(output or "No revision applied")
    except Exception as e:
        error(f"Failed to read current revision: {e}")
        sys.exit(1)
