# /intake_bot/routes/webhooks.py

import asyncio
import hmac
import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from intake_bot.config.settings import settings
from intake_bot.services.telegram_service import parse_update

# This file defines the webhook endpoint that receives updates from Telegram
# when the bot runs in webhook mode. Handling is scheduled in the background so
# Telegram gets its 200 immediately. Request timing is recorded by the
# performance middleware in main.py.

router = APIRouter(
    tags=["Webhooks"]
)

log = structlog.get_logger(__name__)

_background_tasks = set()


def verify_telegram_secret(request: Request) -> None:
    expected = settings.telegram_webhook_secret
    if not expected:
        return
    received = request.headers.get("x-telegram-bot-api-secret-token", "")
    if not hmac.compare_digest(received, expected):
        log.warning("Telegram webhook secret mismatch.")
        raise HTTPException(status_code=403, detail="Forbidden")


@router.post("/telegram")
async def handle_telegram_webhook(request: Request):
    """Receives one Telegram update and schedules it for the dialog engine."""
    verify_telegram_secret(request)

    try:
        update = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")

    if not isinstance(update, dict):
        log.warning("Telegram update is not a JSON object", body_type=type(update).__name__)
        raise HTTPException(status_code=400, detail="Update must be a JSON object")

    message = parse_update(update)
    if message is None:
        log.debug("Ignoring non-message update", update_id=update.get("update_id"))
        return JSONResponse({"status": "ignored"})

    engine = request.app.state.dialog_engine
    task = asyncio.create_task(engine.handle_message(message))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    log.info("Telegram update scheduled", update_id=update.get("update_id"), chat_id=message.chat_id)
    return JSONResponse({"status": "ok"})
