import uuid

import pytest

import app.core.config as config
import app.cqrs.commands.tickets as tickets_commands
from rifas_cli import admin


def test_env_file_does_not_override_environment(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text('# local\nDB_HOST=db.local\nDB_NAME="rifas"\nBROKEN LINE\n')
    env = {"DB_HOST": "already-set"}

    admin._load_env_file(env, env_file)

    assert env == {"DB_HOST": "already-set", "DB_NAME": "rifas"}


def test_missing_env_file_is_ignored(tmp_path):
    env = {}
    admin._load_env_file(env, tmp_path / "missing.env")
    assert env == {}


def test_init_tickets_command(monkeypatch, tmp_path, capsys):
    raffle_id = uuid.uuid4()
    calls = []

    def fake_initialize(value):
        calls.append(value)
        return {"raffle_id": str(value), "created": 100, "deleted": 3, "message": "Initialized"}

    monkeypatch.setattr(config, "db_configured", lambda: True)
    monkeypatch.setattr(tickets_commands, "initialize_tickets", fake_initialize)

    code = admin.main(["--env-file", str(tmp_path / "none.env"), "init-tickets", str(raffle_id)])

    assert code == 0
    assert calls == [raffle_id]
    assert "created=100 deleted=3" in capsys.readouterr().out


def test_commands_require_database(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "db_configured", lambda: False)

    with pytest.raises(RuntimeError, match="DB_HOST"):
        admin.main(["--env-file", str(tmp_path / "none.env"), "migrate"])
