# /intake_bot/services/telegram_service.py

import httpx
import logging
import tenacity
from typing import Any, Dict, List, Optional

from intake_bot.models.conversation import InboundMessage, InputAffordance
from intake_bot.utils.metrics import telegram_requests_counter

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4096


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Splits text into chunks of at most `limit` characters, breaking at line
    boundaries. A single line longer than the limit is cut into pieces.
    """
    if len(text) <= limit:
        return [text]

    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


def build_reply_markup(affordance: Optional[InputAffordance]) -> Optional[Dict[str, Any]]:
    """Translates an input affordance into a Telegram reply_markup object."""
    if affordance is None:
        return None
    if affordance.remove:
        return {"remove_keyboard": True}
    return {
        "keyboard": [[{"text": label} for label in row] for row in affordance.options],
        "resize_keyboard": True,
    }


def parse_update(update: Dict[str, Any]) -> Optional[InboundMessage]:
    """
    Extracts chat identity and text from a Telegram update.
    Updates without a message (edits, callbacks, channel posts) are ignored.
    """
    message = update.get("message")
    if not message:
        return None
    chat = message.get("chat") or {}
    chat_id = chat.get("id")
    if chat_id is None:
        return None
    return InboundMessage(chat_id=chat_id, text=message.get("text") or "")


class TelegramService:
    def __init__(self, bot_token: str, api_url: str = "https://api.telegram.org", http_client: Optional[httpx.AsyncClient] = None):
        self.base_url = f"{api_url.rstrip('/')}/bot{bot_token}"
        # Long polling holds requests open, so the read timeout is raised per call
        self.http_client = http_client or httpx.AsyncClient(timeout=15.0)

    @tenacity.retry(
        retry=tenacity.retry_if_exception_type((httpx.RequestError, httpx.TimeoutException)),
        stop=tenacity.stop_after_attempt(3),
        wait=tenacity.wait_exponential(multiplier=2, min=1, max=10),
        before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    async def resilient_api_call(self, func, *args, **kwargs):
        return await func(*args, **kwargs)

    async def call(self, method: str, payload: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Calls a Bot API method and returns its decoded JSON body.
        Network errors are retried, then raised; API errors are returned as-is
        ({"ok": false, ...}) for the caller to interpret.
        """
        url = f"{self.base_url}/{method}"
        kwargs: Dict[str, Any] = {"json": payload or {}}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = await self.resilient_api_call(self.http_client.post, url, **kwargs)
        try:
            data = response.json()
        except ValueError:
            data = {"ok": False, "error_code": response.status_code, "description": response.text}
        telegram_requests_counter.labels(method=method, status="ok" if data.get("ok") else "error").inc()
        return data

    async def send_message(
        self,
        chat_id: int,
        text: str,
        affordance: Optional[InputAffordance] = None,
        parse_mode: Optional[str] = "Markdown"
    ) -> Optional[int]:
        """
        Sends a text message with an optional reply keyboard.

        Text over the Telegram limit is sent as several messages split at line
        boundaries; the keyboard is attached to the last one only.
        Returns the id of the last message, or None when any part failed.
        """
        chunks = split_message(text)
        reply_markup = build_reply_markup(affordance)
        if len(chunks) > 1:
            logger.info(f"Message to {chat_id} split into {len(chunks)} parts")

        message_id = None
        for position, chunk in enumerate(chunks, start=1):
            payload: Dict[str, Any] = {"chat_id": chat_id, "text": chunk}
            if parse_mode:
                payload["parse_mode"] = parse_mode
            if reply_markup and position == len(chunks):
                payload["reply_markup"] = reply_markup

            message_id = await self._send_payload(chat_id, payload)
            if message_id is None:
                return None
        return message_id

    async def _send_payload(self, chat_id: int, payload: Dict[str, Any]) -> Optional[int]:
        try:
            data = await self.call("sendMessage", payload)
            if not data.get("ok") and "parse_mode" in payload and "can't parse entities" in str(data.get("description", "")):
                # User answers echoed into Markdown can break entity parsing
                logger.warning(f"Markdown rejected for chat {chat_id}, resending as plain text")
                payload = {k: v for k, v in payload.items() if k != "parse_mode"}
                data = await self.call("sendMessage", payload)

            if data.get("ok"):
                message_id = (data.get("result") or {}).get("message_id")
                logger.info(f"Telegram message sent to {chat_id}, message_id: {message_id}")
                return message_id

            logger.error(f"telegram_send_failed to {chat_id}: {data.get('error_code')} - {data.get('description')}")
            return None
        except Exception as e:
            logger.error(f"telegram_send_error to {chat_id}: {e}", exc_info=True)
            return None

    async def get_updates(self, offset: Optional[int] = None, timeout: int = 60) -> List[Dict[str, Any]]:
        """Long-polls for new updates; raises on network or API failure."""
        payload: Dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        data = await self.call("getUpdates", payload, timeout=timeout + 10)
        if not data.get("ok"):
            raise RuntimeError(f"getUpdates failed: {data.get('error_code')} - {data.get('description')}")
        return data.get("result", [])

    async def get_me(self) -> Optional[Dict[str, Any]]:
        try:
            data = await self.call("getMe")
            return data.get("result") if data.get("ok") else None
        except Exception as e:
            logger.error(f"telegram_get_me_error: {e}")
            return None

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> bool:
        payload: Dict[str, Any] = {"url": url, "allowed_updates": ["message"]}
        if secret_token:
            payload["secret_token"] = secret_token
        data = await self.call("setWebhook", payload)
        if not data.get("ok"):
            logger.error(f"telegram_set_webhook_failed: {data.get('description')}")
        return bool(data.get("ok"))

    async def delete_webhook(self) -> bool:
        data = await self.call("deleteWebhook", {"drop_pending_updates": False})
        return bool(data.get("ok"))

    async def close(self):
        await self.http_client.aclose()
