import pytest
from typer.testing import CliRunner

from raugupatis.cli.main import app
from raugupatis.config import get_settings

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("RAUGUPATIS_DATABASE_URL", f"sqlite+aiosqlite:///{(tmp_path / 'cli.db').as_posix()}")
    monkeypatch.setenv("RAUGUPATIS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("RAUGUPATIS_UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("RAUGUPATIS_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_migrate_reports_version(cli_env):
    first = runner.invoke(app, ["migrate"])
    assert first.exit_code == 0, first.output
    assert "Applied: 001, 002, 003, 004, 005, 006, 007" in first.output
    assert "Schema version: 007" in first.output

    second = runner.invoke(app, ["migrate"])
    assert second.exit_code == 0
    assert "Applied" not in second.output


def test_create_admin(cli_env):
    result = runner.invoke(app, ["create-admin", "root@example.com", "--password", "securepass123"])
    assert result.exit_code == 0, result.output
    assert "Created admin root@example.com" in result.output

    again = runner.invoke(app, ["create-admin", "root@example.com", "--password", "securepass123"])
    assert again.exit_code == 1


def test_create_admin_rejects_weak_password(cli_env):
    result = runner.invoke(app, ["create-admin", "root@example.com", "--password", "short"])
    assert result.exit_code == 1


def test_purge_sessions(cli_env):
    runner.invoke(app, ["migrate"])
    result = runner.invoke(app, ["purge-sessions"])
    assert result.exit_code == 0
    assert "Removed 0 expired session(s)" in result.output
