import os

from restobook.core import config
from restobook.core.config import Settings, load_env


def test_load_env_does_not_override(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("# comment\nSERVER_PORT=9100\nDB_NAME = reservas\nbroken line\n", encoding="utf-8")
    monkeypatch.setenv("SERVER_PORT", "8500")
    monkeypatch.delenv("DB_NAME", raising=False)

    load_env(str(env_file))

    assert os.environ["SERVER_PORT"] == "8500"
    assert os.environ["DB_NAME"] == "reservas"


def test_from_env(monkeypatch):
    monkeypatch.setattr(config, "load_env", lambda *args, **kwargs: None)
    monkeypatch.setenv("STORE_BACKEND", "Postgres")
    monkeypatch.setenv("STORE_MAX_VALUE_SIZE", "4096")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.delenv("SERVER_PORT", raising=False)
    monkeypatch.delenv("STORE_MAX_KEY_SIZE", raising=False)

    settings = Settings.from_env()

    assert settings.store_backend == "postgres"
    assert settings.store_max_value_size == 4096
    assert settings.store_max_key_size == 44
    assert settings.server_port == 8000
    assert settings.log_level == "DEBUG"
