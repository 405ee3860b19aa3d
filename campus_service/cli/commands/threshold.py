"""Archived threshold commands.

Example:bash
    campus-service threshold show
    campus-service threshold set 15
"""

import sys

import click
from sqlalchemy.exc import SQLAlchemyError

from campus_service.cli.utils import coro, error, info, success
from campus_service.core.settings import get_tag_settings
from campus_service.features.tags.threshold import ArchivedThresholdProvider
from campus_service.infra.database import dispose_engine, get_session_factory


def _provider() -> ArchivedThresholdProvider:
    return ArchivedThresholdProvider(
        get_session_factory(),
        default=get_tag_settings().default_archived_threshold,
    )


@click.group(name="threshold")
def threshold() -> None:
    """Inspect or change the archived threshold."""


@threshold.command()
@coro
async def show() -> None:
    """Print the stored threshold (or the default when none is stored)."""
    try:
        value = await _provider().refresh()
        click.echo(value)
    except SQLAlchemyError as e:
        error(f"Failed to read threshold: {e}")
        sys.exit(1)
    finally:
        await dispose_engine()


@threshold.command(name="set")
@click.argument("value", type=click.IntRange(min=0))
@coro
async def set_threshold(value: int) -> None:
    """Store a new threshold.

    Running instances pick it up within TAGS_THRESHOLD_REFRESH_SECONDS.
    """
    try:
        await _provider().set(value)
        success(f"Archived threshold set to {value}")
        info(f"Running instances apply it within {get_tag_settings().threshold_refresh_seconds}s")
    except SQLAlchemyError as e:
        error(f"Failed to store threshold: {e}")
        sys.exit(1)
    finally:
        await dispose_engine()
