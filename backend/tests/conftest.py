import os
import pytest
from datetime import datetime, timezone
from dotenv import load_dotenv
from unittest.mock import AsyncMock

# Load environment variables FIRST, before any intake_bot imports, so the
# settings object finds the bot token when it is built at import time.
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env.test"))
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-token")

from intake_bot.services.dialog_engine import DialogEngine  # noqa: E402
from intake_bot.services.state_store import StateStore  # noqa: E402

FIXED_NOW = datetime(2026, 3, 14, 9, 30, 5, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fake_transport():
    """Transport double: every send succeeds and returns a message id."""
    transport = AsyncMock()
    transport.send_message = AsyncMock(return_value=1)
    return transport


@pytest.fixture
def fake_sink():
    sink = AsyncMock()
    sink.persist = AsyncMock(return_value=None)
    sink.notify_operator = AsyncMock(return_value=None)
    return sink


@pytest.fixture
def store():
    return StateStore()


@pytest.fixture
def engine(store, fake_transport, fake_sink):
    return DialogEngine(store, fake_transport, fake_sink, clock=lambda: FIXED_NOW)


@pytest.fixture
def test_client(mocker):
    """
    App client with the Telegram transport stubbed out.
    Entering the client runs the lifespan, so the dialog engine is wired up,
    but no update poller is started and no request leaves the process.
    """
    from fastapi.testclient import TestClient
    from intake_bot.main import app

    mocker.patch("intake_bot.utils.lifecycle.setup_logging")
    mocker.patch("intake_bot.services.telegram_service.TelegramService.call",
                 new_callable=AsyncMock, return_value={"ok": True, "result": {}})
    mocker.patch("intake_bot.workers.update_poller.UpdatePoller.start", new_callable=AsyncMock)
    mocker.patch("intake_bot.workers.update_poller.UpdatePoller.stop", new_callable=AsyncMock)

    with TestClient(app) as client:
        yield client
