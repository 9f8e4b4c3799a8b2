# /intake_bot/services/state_store.py

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from intake_bot.models.conversation import ConversationState

# This service owns the in-memory conversation states, keyed by chat identity,
# together with the per-chat locks that serialise read-decide-write sequences.
# Nothing here is persisted: a process restart drops every in-flight dialog.

logger = logging.getLogger(__name__)


class _ChatLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class StateStore:
    def __init__(self):
        self._states: Dict[int, ConversationState] = {}
        self._locks: Dict[int, _ChatLock] = {}
        logger.info("StateStore initialized.")

    def get(self, chat_id: int) -> Optional[ConversationState]:
        return self._states.get(chat_id)

    def put(self, chat_id: int, state: ConversationState) -> None:
        """Stores the state for a chat, replacing any previous one."""
        self._states[chat_id] = state

    def remove(self, chat_id: int) -> None:
        self._states.pop(chat_id, None)

    def __len__(self) -> int:
        return len(self._states)

    @asynccontextmanager
    async def lock(self, chat_id: int) -> AsyncIterator[None]:
        """
        Exclusive section for one chat identity.

        Messages of the same chat queue up behind each other; different chats
        get different locks and never wait on one another. A lock is dropped
        once nobody holds or waits for it.
        """
        entry = self._locks.get(chat_id)
        if entry is None:
            entry = self._locks[chat_id] = _ChatLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[chat_id]

    @property
    def lock_count(self) -> int:
        return len(self._locks)
