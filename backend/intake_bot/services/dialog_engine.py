# /intake_bot/services/dialog_engine.py

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from intake_bot.models.conversation import InboundMessage, SubmissionRecord
from intake_bot.services.state_store import StateStore
from intake_bot.services.submission_service import MessageSender, SubmissionError, SubmissionSink
from intake_bot.utils.metrics import active_conversations_gauge, message_counter, submission_counter
from intake_bot.workflows.engine import EngineResult, apply_message

# This service runs the dialog for every inbound message: it serialises
# messages per chat, applies the pure transition engine, keeps the state store
# in sync, sends the replies and hands completed records to the submission sink.

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DialogEngine:
    def __init__(
        self,
        store: StateStore,
        transport: MessageSender,
        sink: SubmissionSink,
        clock: Callable[[], datetime] = _utcnow
    ):
        self.store = store
        self.transport = transport
        self.sink = sink
        self.clock = clock
        self._submissions: Set[asyncio.Task] = set()

    async def handle_message(self, message: InboundMessage) -> EngineResult:
        """
        Processes one inbound message for its chat.

        The read-decide-write sequence and the replies run inside the chat's
        exclusive section, so two rapid messages from one chat are applied in
        arrival order. A completed record is handed to the sink only after the
        chat's state has been cleared, and independently of reply delivery.
        """
        chat_id = message.chat_id
        logger.info(f"[{chat_id}] {message.text}")

        async with self.store.lock(chat_id):
            state = self.store.get(chat_id)
            result = apply_message(state, chat_id, message.text, self.clock())

            if result["state"] is None:
                self.store.remove(chat_id)
            else:
                self.store.put(chat_id, result["state"])

            new_state = result["state"]
            logger.info(
                f"Chat {chat_id}: transition '{result['transition']}'"
                + (f" -> {new_state.flow.value} step {new_state.step}" if new_state else "")
            )
            message_counter.labels(transition=result["transition"]).inc()
            active_conversations_gauge.set(len(self.store))

            if result["record"] is not None:
                self._schedule_submission(result["record"])

            for reply in result["replies"]:
                await self.transport.send_message(
                    reply.chat_id,
                    reply.text,
                    affordance=reply.affordance,
                    parse_mode=reply.parse_mode
                )

        return result

    def _schedule_submission(self, record: SubmissionRecord) -> None:
        task = asyncio.create_task(self.submit(record))
        self._submissions.add(task)
        task.add_done_callback(self._submissions.discard)

    async def submit(self, record: SubmissionRecord) -> None:
        """Persists the record and notifies the operator; failures are logged, never raised."""
        for stage, operation in (("persist", self.sink.persist), ("notify", self.sink.notify_operator)):
            try:
                await operation(record)
                submission_counter.labels(stage=stage, status="success").inc()
            except SubmissionError as e:
                submission_counter.labels(stage=stage, status="error").inc()
                logger.error(f"Submission {stage} failed for chat {record.chat_id}: {e}", exc_info=True)
            except Exception as e:
                submission_counter.labels(stage=stage, status="error").inc()
                logger.error(f"Unexpected error during submission {stage} for chat {record.chat_id}: {e}", exc_info=True)

    @property
    def pending_submissions(self) -> int:
        return len(self._submissions)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Waits for scheduled submissions to finish."""
        if not self._submissions:
            return
        pending = list(self._submissions)
        logger.info(f"Waiting for {len(pending)} pending submission(s)...")
        await asyncio.wait(pending, timeout=timeout)
