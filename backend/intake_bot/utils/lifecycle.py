# /intake_bot/utils/lifecycle.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from intake_bot.config.settings import settings
from intake_bot.services.dialog_engine import DialogEngine
from intake_bot.services.state_store import StateStore
from intake_bot.services.submission_constants import OPERATOR_CHAT_ID
from intake_bot.services.submission_service import (
    CompositeSubmissionSink,
    FileSubmissionSink,
    OperatorNotifier,
)
from intake_bot.services.telegram_service import TelegramService
from intake_bot.utils.logging import setup_logging
from intake_bot.workers.update_poller import UpdatePoller

# This file manages the application's lifespan: it wires the dialog engine to
# its collaborators on startup and drains pending work on shutdown.

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_TIMEOUT = 10.0


def build_engine(telegram: TelegramService) -> DialogEngine:
    """Wires the dialog engine with an in-memory store and the file + operator sink."""
    sink = CompositeSubmissionSink(
        FileSubmissionSink(settings.submissions_dir),
        OperatorNotifier(telegram, OPERATOR_CHAT_ID)
    )
    return DialogEngine(StateStore(), telegram, sink)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    setup_logging()

    logger.info("Application starting up...")

    telegram = TelegramService(settings.telegram_bot_token, settings.telegram_api_url)
    engine = build_engine(telegram)
    app.state.telegram = telegram
    app.state.dialog_engine = engine

    me = await telegram.get_me()
    if me:
        logger.info(f"Bot @{me.get('username')} is running and waiting for requests...")
    else:
        logger.warning("Could not verify the bot token with getMe; continuing.")

    poller = None
    if settings.telegram_delivery_mode == "webhook":
        await telegram.set_webhook(settings.telegram_webhook_url, settings.telegram_webhook_secret)
        logger.info("Telegram webhook registered.")
    else:
        await telegram.delete_webhook()
        poller = UpdatePoller(telegram, engine, timeout=settings.polling_timeout)
        await poller.start()

    logger.info(f"Application startup complete ({settings.telegram_delivery_mode} mode).")

    yield  # Application is now running

    logger.info("Application shutting down...")

    if poller:
        await poller.stop()
    await engine.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)
    await telegram.close()
