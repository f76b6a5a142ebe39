"""Tests for the book-api command line interface."""

from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from book_api.cli import app
from book_api.core.errors import MigrationError
from book_api.core.services import DbSessionService, MigrationRunner, UserManagementService
from book_api.runtime.config.config_data import ConfigData, DatabaseConfig
from book_api.runtime.context import get_config, with_context

runner = CliRunner()


@pytest.fixture
def cli_database(tmp_path: Path) -> Generator[DatabaseConfig]:
    """Point the CLI at a throwaway SQLite file."""
    override = ConfigData(database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'cli.sqlite'}"))
    with with_context(override):
        yield get_config().database


def _service(db_config: DatabaseConfig) -> DbSessionService:
    return DbSessionService(db_config, "test")


class TestDbCommands:
    def test_migrate(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["db", "migrate"])

        assert result.exit_code == 0, result.output
        assert "0001_create_users" in result.output
        assert "0002_create_books" in result.output

        service = _service(cli_database)
        try:
            assert MigrationRunner(service.engine).pending() == []
        finally:
            service.dispose()

    def test_migrate_twice(self, cli_database: DatabaseConfig):
        runner.invoke(app, ["db", "migrate"])
        result = runner.invoke(app, ["db", "migrate"])

        assert result.exit_code == 0
        assert "up to date" in result.output

    def test_status(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["db", "status"])

        assert result.exit_code == 0
        assert "create_users" in result.output
        assert "pending" in result.output

    def test_revert(self, cli_database: DatabaseConfig):
        runner.invoke(app, ["db", "migrate"])

        result = runner.invoke(app, ["db", "revert"])

        assert result.exit_code == 0
        assert "0002_create_books" in result.output
        service = _service(cli_database)
        try:
            assert [m.version for m in MigrationRunner(service.engine).pending()] == [2]
        finally:
            service.dispose()

    def test_revert_all(self, cli_database: DatabaseConfig):
        runner.invoke(app, ["db", "migrate"])

        result = runner.invoke(app, ["db", "revert", "--all"])

        assert result.exit_code == 0
        assert "0001_create_users" in result.output
        assert "0002_create_books" in result.output

    def test_revert_nothing(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["db", "revert"])

        assert result.exit_code == 0
        assert "Nothing to revert" in result.output


class TestUserCommands:
    def test_add_user(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["users", "add", "alice", "--password", "wonderland"])

        assert result.exit_code == 0, result.output
        assert "Created user 'alice'" in result.output

        service = _service(cli_database)
        try:
            with service.session_scope() as session:
                users = UserManagementService(session)
                assert users.authenticate("alice", "wonderland") is not None
        finally:
            service.dispose()

    def test_add_user_prompts_for_password(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["users", "add", "bob"], input="hunter2\nhunter2\n")

        assert result.exit_code == 0, result.output
        assert "Created user 'bob'" in result.output

    def test_add_duplicate_user(self, cli_database: DatabaseConfig):
        runner.invoke(app, ["users", "add", "alice", "--password", "one"])

        result = runner.invoke(app, ["users", "add", "alice", "--password", "two"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_list_users(self, cli_database: DatabaseConfig):
        runner.invoke(app, ["users", "add", "alice", "--password", "one"])
        runner.invoke(app, ["users", "add", "bob", "--password", "two"])

        result = runner.invoke(app, ["users", "list"])

        assert result.exit_code == 0
        assert "alice" in result.output
        assert "bob" in result.output
        assert "Found 2 users" in result.output

    def test_list_no_users(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["users", "list"])

        assert result.exit_code == 0
        assert "No users found" in result.output

    def test_set_password(self, cli_database: DatabaseConfig):
        runner.invoke(app, ["users", "add", "alice", "--password", "old"])

        result = runner.invoke(app, ["users", "set-password", "alice", "--password", "new"])

        assert result.exit_code == 0, result.output
        service = _service(cli_database)
        try:
            with service.session_scope() as session:
                users = UserManagementService(session)
                assert users.authenticate("alice", "new") is not None
                assert users.authenticate("alice", "old") is None
        finally:
            service.dispose()

    def test_set_password_unknown_user(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["users", "set-password", "ghost", "--password", "x"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_remove_user(self, cli_database: DatabaseConfig):
        runner.invoke(app, ["users", "add", "alice", "--password", "one"])

        result = runner.invoke(app, ["users", "remove", "alice", "--yes"])

        assert result.exit_code == 0
        assert "Removed user 'alice'" in result.output
        assert "No users found" in runner.invoke(app, ["users", "list"]).output

    def test_remove_unknown_user(self, cli_database: DatabaseConfig):
        result = runner.invoke(app, ["users", "remove", "ghost", "--yes"])

        assert result.exit_code == 1


    @pytest.mark.parametrize(
        "args",
        [
            ["users", "add", "alice", "--password", "one"],
            ["users", "list"],
            ["users", "set-password", "alice", "--password", "two"],
            ["users", "remove", "alice", "--yes"],
        ],
    )
    def test_migration_failure_is_reported(
        self, cli_database: DatabaseConfig, monkeypatch: pytest.MonkeyPatch, args: list[str]
    ):
        def failing_apply_all(self):
            raise MigrationError(2, "create_books", RuntimeError("disk full"))

        disposed = []
        original_dispose = DbSessionService.dispose

        def tracking_dispose(self):
            disposed.append(self)
            original_dispose(self)

        monkeypatch.setattr(MigrationRunner, "apply_all", failing_apply_all)
        monkeypatch.setattr(DbSessionService, "dispose", tracking_dispose)

        result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Migration 0002_create_books failed" in result.output
        assert len(disposed) == 1


class TestServeCommand:
    def test_serve_uses_configured_address(self, monkeypatch: pytest.MonkeyPatch):
        import uvicorn

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

        result = runner.invoke(app, ["serve", "--port", "9001"])

        assert result.exit_code == 0, result.output
        target, kwargs = calls[0]
        assert target == "book_api.api.http.app:app"
        assert kwargs["port"] == 9001
        assert kwargs["host"] == get_config().app.host
