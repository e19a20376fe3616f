import pytest
from typer.testing import CliRunner

from stockroom.cli import main as cli
from stockroom.core.database import build_tortoise_config

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_database(tmp_path, monkeypatch):
    """Points the CLI at a throwaway SQLite file."""
    monkeypatch.setattr(cli, "TORTOISE_ORM_CONFIG", build_tortoise_config(f"sqlite://{tmp_path / 'cli.sqlite3'}"))


def create_user(email="ops@example.com", role="manager"):
    return runner.invoke(
        cli.app,
        [
            "users", "create", "--email", email, "--first-name", "Olive", "--last-name", "Ops",
            "--password", "password123", "--role", role,
        ],
    )


def test_create_user():
    result = create_user()
    assert result.exit_code == 0, result.output
    assert "created successfully" in result.output

    result = create_user()
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_create_user_rejects_unknown_role():
    result = create_user(role="superuser")
    assert result.exit_code == 1
    assert "Invalid user details" in result.output


def test_set_role_and_disable():
    create_user(role="user")

    result = runner.invoke(cli.app, ["users", "set-role", "ops@example.com", "admin"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(cli.app, ["users", "set-role", "ops@example.com", "admin"])
    assert "already has role" in result.output

    result = runner.invoke(cli.app, ["users", "disable", "ops@example.com"])
    assert result.exit_code == 0
    result = runner.invoke(cli.app, ["users", "disable", "ops@example.com"])
    assert "already inactive" in result.output


def test_unknown_user():
    result = runner.invoke(cli.app, ["users", "disable", "nobody@example.com"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_export_report_csv():
    result = runner.invoke(cli.app, ["reports", "export", "location-utilization", "--param", "include_empty=true"])
    assert result.exit_code == 0, result.output
    assert result.output == "Location ID,Location Name,Location Type,Total Items,Total Quantity\n"


def test_export_report_json(tmp_path):
    target = tmp_path / "expiry.json"
    result = runner.invoke(
        cli.app, ["reports", "export", "expiry", "--format", "json", "-p", "days_until_expiry=7", "-o", str(target)]
    )
    assert result.exit_code == 0, result.output
    assert '"days_until_expiry": 7' in target.read_text()


def test_export_rejects_bad_parameters():
    result = runner.invoke(cli.app, ["reports", "export", "consumption-trends", "-p", "group_by=year"])
    assert result.exit_code == 1
    assert "Invalid report parameters" in result.output

    result = runner.invoke(cli.app, ["reports", "export", "sales"])
    assert result.exit_code != 0
