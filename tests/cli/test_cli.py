"""
Tests for the mclaren-api CLI.

Tests the routes listing and the init-db command against a file database.
"""

import json

from click.testing import CliRunner

from mclaren_api.cli.main import cli


class TestRoutesCommand:
    """Test the routes command."""

    def test_routes_pretty(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["routes"])

        assert result.exit_code == 0
        assert "mclaren_api.api.v0_9 -> v0.9" in result.output
        assert "/api/v0.9/drivers/{driver_id}/car/{car_id}" in result.output
        assert "/api/v0.9/grand-prixes/upcoming" in result.output

    def test_routes_json(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["routes", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["versions"] == {"mclaren_api.api.v0_9": "0.9"}

        listed = {(tuple(r["methods"]), r["path"]) for r in data["routes"]}
        assert (("GET",), "/api/v0.9/cars") in listed
        assert (("POST",), "/api/v0.9/cars") in listed
        assert (("DELETE",), "/api/v0.9/cars/{car_id}") in listed
        assert all(r["version"] == "v0.9" for r in data["routes"])

    def test_invalid_format(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["routes", "--format", "yaml"])
        assert result.exit_code != 0


class TestInitDbCommand:
    """Test the init-db command."""

    def test_init_db_with_seed(self, tmp_path):
        runner = CliRunner()
        env = {"SQLITE_CONNECTION": f"sqlite:///{tmp_path / 'cli.db'}", "LOG_LEVEL": "WARNING"}

        result = runner.invoke(cli, ["init-db", "--seed", "-e", "Development"], env=env)

        assert result.exit_code == 0, result.output
        assert "Schema ready" in result.output
        assert "grand_prixes: 3 row(s) seeded" in result.output
        assert "cars: 1 row(s) seeded" in result.output
        assert "drivers: 2 row(s) seeded" in result.output
        assert (tmp_path / "cli.db").exists()

    def test_init_db_seed_is_idempotent(self, tmp_path):
        runner = CliRunner()
        env = {"SQLITE_CONNECTION": f"sqlite:///{tmp_path / 'cli.db'}", "LOG_LEVEL": "WARNING"}

        runner.invoke(cli, ["init-db", "--seed", "-e", "Development"], env=env)
        result = runner.invoke(cli, ["init-db", "--seed", "-e", "Development"], env=env)

        assert result.exit_code == 0, result.output
        assert "drivers: 0 row(s) seeded" in result.output

    def test_init_db_reset(self, tmp_path):
        runner = CliRunner()
        env = {"SQLITE_CONNECTION": f"sqlite:///{tmp_path / 'cli.db'}", "LOG_LEVEL": "WARNING"}

        runner.invoke(cli, ["init-db", "--seed", "-e", "Development"], env=env)
        result = runner.invoke(cli, ["init-db", "--seed", "--reset", "-e", "Development"], env=env)

        assert result.exit_code == 0, result.output
        assert "drivers: 2 row(s) seeded" in result.output

    def test_production_requires_cloud_connection(self):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["init-db", "-e", "Production"], env={"AZURE_SQL_CONNECTION": ""}
        )

        assert result.exit_code != 0
        assert "AZURE_SQL_CONNECTION" in result.output
