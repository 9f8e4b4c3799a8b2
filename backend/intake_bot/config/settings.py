# /intake_bot/config/settings.py

import sys
from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

DELIVERY_MODES = ("polling", "webhook")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Settings(BaseSettings):
    # Telegram
    telegram_bot_token: str
    telegram_api_url: str = "https://api.telegram.org"
    telegram_delivery_mode: str = "polling"
    telegram_webhook_url: str | None = None
    telegram_webhook_secret: str | None = None
    polling_timeout: int = 60

    # Storage
    submissions_dir: str = "заявки"

    # Deployment
    environment: str = "production"
    log_level: str = "INFO"
    api_version: str = "v1"

    # ---------------- Validators ---------------- #

    @field_validator("telegram_bot_token")
    @classmethod
    def token_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("TELEGRAM_BOT_TOKEN must not be empty")
        return v.strip()

    @field_validator("telegram_delivery_mode")
    @classmethod
    def delivery_mode_must_be_known(cls, v: str) -> str:
        mode = v.strip().lower()
        if mode not in DELIVERY_MODES:
            raise ValueError(f"TELEGRAM_DELIVERY_MODE must be one of {', '.join(DELIVERY_MODES)}")
        return mode

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("polling_timeout")
    @classmethod
    def polling_timeout_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("POLLING_TIMEOUT must be a positive number of seconds")
        return v

    @model_validator(mode="after")
    def webhook_mode_requires_url(self):
        if self.telegram_delivery_mode == "webhook" and not self.telegram_webhook_url:
            raise ValueError("TELEGRAM_WEBHOOK_URL is required when TELEGRAM_DELIVERY_MODE=webhook")
        return self

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def load_settings() -> Settings:
    """Builds the settings object, terminating the process on invalid configuration."""
    try:
        return Settings()
    except ValidationError as e:
        print(f"--- [ERROR] Environment validation failed: {e}")
        print("--- Create a .env file with TELEGRAM_BOT_TOKEN=<your token>")
        sys.exit(1)


settings = load_settings()
