"""Programmatic Alembic command interface with async support.

Used by the CLI instead of subprocess calls. Alembic itself is synchronous,
so every command runs in a worker thread.

Example:
    from campus_service.infra.database.alembic import get_alembic_commands

    commands = get_alembic_commands()
    output = await commands.upgrade("head")
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import io
import logging
from pathlib import Path

from alembic.config import Config

from alembic import command
from campus_service.core.settings import get_db_settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class AlembicCommandConfig:
    """Configuration for Alembic commands.

    Attributes:
        url: Async SQLAlchemy URL of the target database.
        script_location: Path to the alembic scripts directory.
        ini_path: Path to alembic.ini.
    """

    url: str
    script_location: str = str(PROJECT_ROOT / "alembic")
    ini_path: Path = PROJECT_ROOT / "alembic.ini"

    def get_alembic_config(self, output_buffer: io.StringIO | None = None) -> Config:
        if not self.ini_path.exists():
            raise FileNotFoundError(f"alembic.ini not found at {self.ini_path}")

        config = Config(str(self.ini_path), stdout=output_buffer or io.StringIO())
        config.set_main_option("script_location", self.script_location)
        config.set_main_option("sqlalchemy.url", self.url)
        config.attributes["url_from_caller"] = True
        config.attributes["skip_logging_config"] = True
        return config


class AlembicCommands:
    """Run Alembic commands without blocking the event loop."""

    def __init__(self, config: AlembicCommandConfig) -> None:
        self.config = config

    async def upgrade(self, revision: str = "head", *, sql: bool = False) -> str:
        """Upgrade database to ``revision``; returns the captured output."""
        logger.info("Upgrading database", extra={"revision": revision})
        output = io.StringIO()
        alembic_config = self.config.get_alembic_config(output)

        def _run() -> None:
            command.upgrade(alembic_config, revision, sql=sql)

        await asyncio.to_thread(_run)
        logger.info("Upgrade completed", extra={"revision": revision})
        return output.getvalue()

    async def current(self, *, verbose: bool = False) -> str:
        output = io.StringIO()
        alembic_config = self.config.get_alembic_config(output)

        def _run() -> None:
            command.current(alembic_config, verbose=verbose)

        await asyncio.to_thread(_run)
        return output.getvalue()


def get_alembic_commands() -> AlembicCommands:
    """AlembicCommands for the database configured in DB_ settings."""
    return AlembicCommands(AlembicCommandConfig(url=get_db_settings().get_sqlalchemy_url()))
