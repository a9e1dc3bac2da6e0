#!/usr/bin/env python3
"""
Integration tests for the entrel CLI.

Tests init, entity and relation commands against a temporary database.
"""
import pytest
from click.testing import CliRunner
from sqlalchemy import create_engine, text

from entrel.core.paths import ALEMBIC_DIR
from entrel.database.cli import cli


pytestmark = pytest.mark.integration


class TestDatabaseCLI:
    """Test CLI commands with a temporary database."""

    @pytest.fixture
    def runner(self):
        """Create Click test runner."""
        return CliRunner()

    @pytest.fixture
    def test_dirs(self, tmp_path):
        """Create temporary directories for testing."""
        dirs = {
            "db_path": tmp_path / "test.db",
            "log_dir": tmp_path / "logs",
        }
        dirs["log_dir"].mkdir()
        return dirs

    def invoke_cli(self, runner, test_dirs, args, **kwargs):
        """Helper to invoke CLI with test configuration."""
        base_args = [
            "--db-path", str(test_dirs["db_path"]),
            "--alembic-dir", str(ALEMBIC_DIR),
            "--log-dir", str(test_dirs["log_dir"]),
        ]
        return runner.invoke(cli, base_args + args, **kwargs)

    def add_entity(self, runner, test_dirs, name):
        result = self.invoke_cli(runner, test_dirs, ["entity", "add", name])
        assert result.exit_code == 0, result.output
        return int(result.output.split("[")[1].split("]")[0])

    def add_host_rows(self, test_dirs, table, parent_column, parent_id, ids):
        engine = create_engine(f"sqlite:///{test_dirs['db_path']}")
        with engine.begin() as conn:
            conn.execute(
                text(
                    f"CREATE TABLE IF NOT EXISTS {table} "
                    f"(id INTEGER PRIMARY KEY, {parent_column} INTEGER NOT NULL)"
                )
            )
            for host_id in ids:
                conn.execute(
                    text(f"INSERT INTO {table} (id, {parent_column}) VALUES (:id, :p)"),
                    {"id": host_id, "p": parent_id},
                )
        engine.dispose()

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "relation" in result.output

    def test_init_command(self, runner, test_dirs):
        result = self.invoke_cli(runner, test_dirs, ["init"])

        assert result.exit_code == 0
        assert "Database ready" in result.output
        assert test_dirs["db_path"].exists()

    def test_migration_status(self, runner, test_dirs):
        self.invoke_cli(runner, test_dirs, ["init"])

        result = self.invoke_cli(runner, test_dirs, ["migration", "status"])

        assert result.exit_code == 0
        assert "up_to_date" in result.output

    def test_entity_add_list_show(self, runner, test_dirs):
        building = self.add_entity(runner, test_dirs, "Main Building")
        result = self.invoke_cli(
            runner,
            test_dirs,
            ["entity", "add", "Room 1", "--parent-id", str(building), "--city", "Vienna"],
        )
        assert result.exit_code == 0

        listed = self.invoke_cli(runner, test_dirs, ["entity", "list"])
        assert "Main Building" in listed.output
        assert "Room 1" not in listed.output

        shown = self.invoke_cli(runner, test_dirs, ["entity", "show", "2"])
        assert shown.exit_code == 0
        assert "Parent: [1] Main Building" in shown.output
        assert "Vienna" in shown.output

    def test_entity_add_unknown_parent(self, runner, test_dirs):
        result = self.invoke_cli(
            runner, test_dirs, ["entity", "add", "Room", "--parent-id", "99"]
        )
        assert result.exit_code == 1
        assert "ValidationError" in result.output

    def test_entity_show_missing(self, runner, test_dirs):
        result = self.invoke_cli(runner, test_dirs, ["entity", "show", "99"])
        assert result.exit_code == 1

    def test_entity_find(self, runner, test_dirs):
        self.add_entity(runner, test_dirs, "Main Hall")

        found = self.invoke_cli(runner, test_dirs, ["entity", "find", "--name", "main hall"])
        assert "Main Hall" in found.output

        missing = self.invoke_cli(runner, test_dirs, ["entity", "find"])
        assert missing.exit_code != 0

    def test_relation_set_show_clear(self, runner, test_dirs):
        room = self.add_entity(runner, test_dirs, "Room 5")

        result = self.invoke_cli(
            runner, test_dirs, ["relation", "set", "mod_booking", "option", "42", str(room)]
        )
        assert result.exit_code == 0
        assert "Attached entity" in result.output

        shown = self.invoke_cli(runner, test_dirs, ["relation", "show", "mod_booking", "option", "42"])
        assert f"Entity: [{room}] Room 5" in shown.output

        cleared = self.invoke_cli(runner, test_dirs, ["relation", "clear", "mod_booking", "option", "42"])
        assert "Cleared" in cleared.output

        shown = self.invoke_cli(runner, test_dirs, ["relation", "show", "mod_booking", "option", "42"])
        assert "No entity attached" in shown.output

    def test_relation_set_sentinel_clears(self, runner, test_dirs):
        room = self.add_entity(runner, test_dirs, "Room 5")
        self.invoke_cli(runner, test_dirs, ["relation", "set", "mod_booking", "option", "42", str(room)])

        result = self.invoke_cli(
            runner, test_dirs, ["relation", "set", "mod_booking", "option", "42", "--", "-1"]
        )

        assert result.exit_code == 0
        assert "Cleared" in result.output

    def test_relation_set_unknown_area(self, runner, test_dirs):
        result = self.invoke_cli(runner, test_dirs, ["relation", "set", "mod_quiz", "attempt", "1", "5"])
        assert result.exit_code == 1
        assert "InvalidArgumentError" in result.output

    def test_relation_set_invalid_entity_id(self, runner, test_dirs):
        result = self.invoke_cli(
            runner, test_dirs, ["relation", "set", "mod_booking", "option", "42", "room"]
        )
        assert result.exit_code == 1
        assert "ValidationError" in result.output

    def test_relation_purge(self, runner, test_dirs):
        room = self.add_entity(runner, test_dirs, "Room 5")
        self.add_host_rows(test_dirs, "booking_options", "bookingid", 1, [10, 11])
        for option_id in ("10", "11"):
            self.invoke_cli(runner, test_dirs, ["relation", "set", "mod_booking", "option", option_id, str(room)])

        result = self.invoke_cli(runner, test_dirs, ["relation", "purge", "1"])

        assert result.exit_code == 0
        assert "Removed 2 relation(s)" in result.output

    def test_relation_outliers(self, runner, test_dirs):
        room_a = self.add_entity(runner, test_dirs, "Room A")
        room_b = self.add_entity(runner, test_dirs, "Room B")
        self.add_host_rows(test_dirs, "booking_optiondates", "optionid", 42, [100, 101])
        self.invoke_cli(runner, test_dirs, ["relation", "set", "mod_booking", "optiondate", "100", str(room_a)])
        self.invoke_cli(runner, test_dirs, ["relation", "set", "mod_booking", "optiondate", "101", str(room_b)])

        result = self.invoke_cli(runner, test_dirs, ["relation", "outliers", "42"])

        assert result.exit_code == 0
        assert "different entities" in result.output

    def test_areas_file(self, runner, test_dirs, tmp_path):
        areas = tmp_path / "areas.yaml"
        areas.write_text(
            "areas:\n"
            "  - {component: mod_event, area: session, table: event_sessions, parent_column: eventid}\n",
            encoding="utf-8",
        )
        room = self.add_entity(runner, test_dirs, "Room 5")

        result = runner.invoke(
            cli,
            [
                "--db-path", str(test_dirs["db_path"]),
                "--alembic-dir", str(ALEMBIC_DIR),
                "--log-dir", str(test_dirs["log_dir"]),
                "--areas-file", str(areas),
                "relation", "set", "mod_event", "session", "3", str(room),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Attached entity" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
