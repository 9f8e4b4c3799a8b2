# backend/tests/unit/test_settings.py

import pytest
from pydantic import ValidationError

from intake_bot.config import settings as settings_module
from intake_bot.config.settings import Settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No bot token in the environment and no .env file in the working directory."""
    for name in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_DELIVERY_MODE", "TELEGRAM_WEBHOOK_URL",
                 "POLLING_TIMEOUT", "SUBMISSIONS_DIR", "ENVIRONMENT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults(clean_env):
    settings = Settings(telegram_bot_token=" 123:abc ", _env_file=None)
    assert settings.telegram_bot_token == "123:abc"
    assert settings.telegram_delivery_mode == "polling"
    assert settings.submissions_dir == "заявки"
    assert settings.log_level == "INFO"


def test_missing_token_is_rejected(clean_env):
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_blank_token_is_rejected(clean_env):
    with pytest.raises(ValidationError):
        Settings(telegram_bot_token="   ", _env_file=None)


def test_token_read_from_environment(clean_env, monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "999:xyz")
    assert Settings(_env_file=None).telegram_bot_token == "999:xyz"


def test_webhook_mode_requires_url(clean_env):
    with pytest.raises(ValidationError):
        Settings(telegram_bot_token="1:a", telegram_delivery_mode="webhook", _env_file=None)

    settings = Settings(
        telegram_bot_token="1:a",
        telegram_delivery_mode="WEBHOOK",
        telegram_webhook_url="https://bot.example.com/api/v1/webhooks/telegram",
        _env_file=None,
    )
    assert settings.telegram_delivery_mode == "webhook"


@pytest.mark.parametrize("overrides", [
    {"telegram_delivery_mode": "carrier-pigeon"},
    {"polling_timeout": 0},
    {"log_level": "verbose"},
])
def test_invalid_values(clean_env, overrides):
    with pytest.raises(ValidationError):
        Settings(telegram_bot_token="1:a", _env_file=None, **overrides)


def test_load_settings_exits_without_token(clean_env):
    with pytest.raises(SystemExit) as exc_info:
        settings_module.load_settings()
    assert exc_info.value.code == 1
