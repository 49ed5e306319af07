"""Settings tests — env loading and the production secret guard."""

import pytest

from tasktrack.config import DEFAULT_JWT_SECRET, Settings


def test_defaults_in_development():
    s = Settings(_env_file=None)
    assert s.environment == "development"
    assert s.token_expire_days == 7
    assert s.bcrypt_rounds == 12
    assert s.port == 5001
    assert s.uses_default_secret


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("TASKTRACK_PORT", "8123")
    monkeypatch.setenv("TASKTRACK_JWT_SECRET", "from-env")
    monkeypatch.setenv("TASKTRACK_CORS_ORIGINS", '["https://app.example.com"]')
    s = Settings(_env_file=None)
    assert s.port == 8123
    assert s.jwt_secret == "from-env"
    assert s.cors_origins == ["https://app.example.com"]
    assert not s.uses_default_secret


def test_production_rejects_default_secret():
    with pytest.raises(ValueError, match="TASKTRACK_JWT_SECRET"):
        Settings(_env_file=None, environment="production", jwt_secret=DEFAULT_JWT_SECRET)


def test_production_accepts_real_secret():
    s = Settings(_env_file=None, environment="production", jwt_secret="a-real-secret-" + "x" * 32)
    assert s.environment == "production"


def test_production_rejects_short_secret():
    with pytest.raises(ValueError, match="at least 32 bytes"):
        Settings(_env_file=None, environment="production", jwt_secret="too-short")


def test_development_allows_short_secret():
    assert Settings(_env_file=None, jwt_secret="dev").jwt_secret == "dev"


def test_empty_secret_rejected_everywhere():
    with pytest.raises(ValueError):
        Settings(_env_file=None, jwt_secret="")


def test_bcrypt_rounds_bounds():
    with pytest.raises(ValueError):
        Settings(_env_file=None, bcrypt_rounds=3)
