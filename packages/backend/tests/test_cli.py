"""CLI commands against a throwaway SQLite file."""

import pytest
from click.testing import CliRunner

from bizdir.cli.main import cli


@pytest.fixture()
def db_url(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    result = CliRunner().invoke(cli, ["init-db", "--database-url", url])
    assert result.exit_code == 0, result.output
    return url


def invoke(*args):
    return CliRunner().invoke(cli, list(args))


def test_create_and_list_admin(db_url):
    result = invoke("create-admin", "Boss@Example.com", "--password", "hunter22", "--database-url", db_url)
    assert result.exit_code == 0, result.output
    assert "Created admin boss@example.com" in result.output

    result = invoke("create-admin", "boss@example.com", "--password", "hunter33", "--database-url", db_url)
    assert "Updated admin" in result.output

    result = invoke("list-admins", "--database-url", db_url)
    assert "boss@example.com" in result.output
    assert "Administrator" in result.output


def test_create_admin_short_password(db_url):
    result = invoke("create-admin", "a@example.com", "--password", "123", "--database-url", db_url)
    assert result.exit_code == 1


def test_set_role(db_url):
    invoke("create-admin", "ed@example.com", "--password", "hunter22", "--database-url", db_url)
    result = invoke("set-role", "ed@example.com", "editor", "--database-url", db_url)
    assert result.exit_code == 0
    assert "Editor" in result.output

    result = invoke("set-role", "nobody@example.com", "editor", "--database-url", db_url)
    assert result.exit_code == 1


def test_agent_commands(db_url):
    result = invoke(
        "create-agent", "--name", "Rahul", "--email", "rahul@example.com",
        "--phone", "+919876543210", "--code", "ag001", "--password", "password123",
        "--database-url", db_url,
    )
    assert result.exit_code == 0, result.output
    assert "AG001" in result.output

    result = invoke("verify-agent", "+919876543210", "--password", "password123", "--database-url", db_url)
    assert result.exit_code == 0
    assert "PASSED" in result.output

    result = invoke("reset-agent-password", "rahul@example.com", "--password", "newpass1", "--database-url", db_url)
    assert result.exit_code == 0

    result = invoke("verify-agent", "rahul@example.com", "--password", "password123", "--database-url", db_url)
    assert result.exit_code == 1
    assert "FAILED" in result.output


def test_create_agent_duplicate(db_url):
    args = [
        "create-agent", "--name", "Rahul", "--email", "rahul@example.com",
        "--phone", "+919876543210", "--code", "AG001", "--password", "password123",
        "--database-url", db_url,
    ]
    assert invoke(*args).exit_code == 0
    result = invoke(*args)
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_recalculate_earnings_empty(db_url):
    result = invoke("recalculate-earnings", "--database-url", db_url)
    assert result.exit_code == 0
    assert "No agents found." in result.output


def test_serve_runs_uvicorn(monkeypatch):
    import uvicorn

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    result = invoke("serve", "--port", "9001")
    assert result.exit_code == 0, result.output
    assert calls == [("bizdir.main:app", {"host": "0.0.0.0", "port": 9001, "reload": False})]
