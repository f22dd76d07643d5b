import pytest
from pydantic import ValidationError

from friendsystem.config import DatabaseSettings


def test_defaults(monkeypatch):
    for name in ('DATABASE_URL', 'DB_POOL_SIZE', 'FRIENDSYSTEM_MAX_ATTEMPTS', 'FRIENDSYSTEM_CREATE_SCHEMA'):
        monkeypatch.delenv(name, raising=False)

    settings = DatabaseSettings()

    assert settings.url.startswith('postgresql+asyncpg://')
    assert settings.pool_size == 10
    assert settings.max_attempts == 3
    assert settings.create_schema is False
    assert not settings.is_sqlite

def test_environment(monkeypatch):
    monkeypatch.setenv('DATABASE_URL', 'postgresql://u:p@db:5432/friends')
    monkeypatch.setenv('DB_POOL_TIMEOUT', '2.5')
    monkeypatch.setenv('FRIENDSYSTEM_MAX_ATTEMPTS', '5')
    monkeypatch.setenv('FRIENDSYSTEM_CREATE_SCHEMA', 'true')

    settings = DatabaseSettings()

    assert settings.url == 'postgresql+asyncpg://u:p@db:5432/friends'
    assert settings.pool_timeout == 2.5
    assert settings.max_attempts == 5
    assert settings.create_schema is True

def test_explicit_url_is_normalized():
    assert DatabaseSettings(url='postgresql://db/friends').url == 'postgresql+asyncpg://db/friends'
    assert DatabaseSettings(url='sqlite+aiosqlite:///friends.db').is_sqlite

def test_max_attempts_validated():
    with pytest.raises(ValidationError):
        DatabaseSettings(max_attempts=0)
