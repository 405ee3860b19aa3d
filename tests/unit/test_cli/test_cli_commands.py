"""Tests for the campus-service management CLI.

Testing approach:
- Uses Click's CliRunner for command invocation
- Runs against a temporary SQLite database through the process-wide engine
- Mocks alembic for the migration command
"""

from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner
import pytest

from campus_service.cli.main import cli

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def temp_database(tmp_path, monkeypatch):
    """Point the process-wide engine at a fresh SQLite file."""
    from campus_service.core.settings import clear_all_caches

    monkeypatch.setenv("DB_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    clear_all_caches()
    return tmp_path / "cli.db"


# =============================================================================
# Tests
# =============================================================================


@pytest.mark.unit
class TestCliGroup:
    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "campus-service" in result.output

    def test_help_lists_command_groups(self, cli_runner):
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("serve", "db", "threshold"):
            assert command in result.output


@pytest.mark.unit
class TestDatabaseCommands:
    def test_init_creates_tables(self, cli_runner, temp_database):
        result = cli_runner.invoke(cli, ["db", "init"])

        assert result.exit_code == 0, result.output
        assert "tags" in result.output
        assert "tag_upvotes" in result.output
        assert temp_database.exists()

    def test_upgrade_runs_alembic(self, cli_runner):
        commands = MagicMock()
        commands.upgrade = AsyncMock(return_value=None)

        with patch("campus_service.infra.database.alembic.get_alembic_commands", return_value=commands):
            result = cli_runner.invoke(cli, ["db", "upgrade", "--revision", "head"])

        assert result.exit_code == 0, result.output
        commands.upgrade.assert_awaited_once_with("head", sql=False)
        assert "upgraded" in result.output

    def test_upgrade_failure_exits_non_zero(self, cli_runner):
        commands = MagicMock()
        commands.upgrade = AsyncMock(side_effect=RuntimeError("no database"))

        with patch("campus_service.infra.database.alembic.get_alembic_commands", return_value=commands):
            result = cli_runner.invoke(cli, ["db", "upgrade"])

        assert result.exit_code == 1
        assert "no database" in result.output

    def test_current_prints_revision(self, cli_runner):
        commands = MagicMock()
        commands.current = AsyncMock(return_value="8e3b6f0a2c17 (head)\n")

        with patch("campus_service.infra.database.alembic.get_alembic_commands", return_value=commands):
            result = cli_runner.invoke(cli, ["db", "current", "-v"])

        assert result.exit_code == 0, result.output
        commands.current.assert_awaited_once_with(verbose=True)
        assert "8e3b6f0a2c17" in result.output


@pytest.mark.unit
class TestThresholdCommands:
    def test_set_then_show(self, cli_runner, temp_database):
        assert cli_runner.invoke(cli, ["db", "init"]).exit_code == 0

        set_result = cli_runner.invoke(cli, ["threshold", "set", "7"])
        show_result = cli_runner.invoke(cli, ["threshold", "show"])

        assert set_result.exit_code == 0, set_result.output
        assert "7" in set_result.output
        assert show_result.exit_code == 0, show_result.output
        assert show_result.output.strip().splitlines()[-1] == "7"

    def test_show_default_before_any_set(self, cli_runner, temp_database):
        cli_runner.invoke(cli, ["db", "init"])

        result = cli_runner.invoke(cli, ["threshold", "show"])

        assert result.exit_code == 0
        assert result.output.strip().splitlines()[-1] == "2"

    def test_negative_value_is_rejected(self, cli_runner):
        result = cli_runner.invoke(cli, ["threshold", "set", "-3"])

        assert result.exit_code == 2

    def test_missing_schema_fails(self, cli_runner, temp_database):
        result = cli_runner.invoke(cli, ["threshold", "show"])

        assert result.exit_code == 1
        assert "Failed to read threshold" in result.output
