# /intake_bot/workers/update_poller.py

import asyncio
import logging
from typing import Optional, Set

from intake_bot.services.dialog_engine import DialogEngine
from intake_bot.services.telegram_service import TelegramService, parse_update

# This worker long-polls the Telegram Bot API for new updates and dispatches
# each message as its own task to the dialog engine.

logger = logging.getLogger(__name__)


class UpdatePoller:
    def __init__(self, telegram: TelegramService, engine: DialogEngine, timeout: int = 60, error_delay: float = 5.0):
        self.telegram = telegram
        self.engine = engine
        self.timeout = timeout
        self.error_delay = error_delay
        self.offset: Optional[int] = None
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self._handlers: Set[asyncio.Task] = set()

    async def start(self):
        self.running = True
        self._task = asyncio.create_task(self._poll())
        logger.info("Telegram update poller started.")

    async def stop(self):
        self.running = False
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        if self._handlers:
            await asyncio.gather(*self._handlers, return_exceptions=True)
        logger.info("Telegram update poller stopped.")

    async def _poll(self):
        while self.running:
            try:
                updates = await self.telegram.get_updates(offset=self.offset, timeout=self.timeout)
                self.dispatch(updates)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if self.running:
                    logger.error(f"Telegram polling error: {e}")
                    await asyncio.sleep(self.error_delay)

    def dispatch(self, updates) -> int:
        """Schedules one handler task per message update and advances the offset."""
        dispatched = 0
        for update in updates:
            update_id = update.get("update_id")
            if update_id is not None:
                self.offset = max(self.offset or 0, update_id + 1)

            message = parse_update(update)
            if message is None:
                logger.debug(f"Ignoring non-message update {update_id}")
                continue

            task = asyncio.create_task(self._handle(message))
            self._handlers.add(task)
            task.add_done_callback(self._handlers.discard)
            dispatched += 1
        return dispatched

    async def _handle(self, message):
        try:
            await self.engine.handle_message(message)
        except Exception as e:
            logger.error(f"Error handling message from chat {message.chat_id}: {e}", exc_info=True)
