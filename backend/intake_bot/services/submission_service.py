# /intake_bot/services/submission_service.py

import asyncio
import logging
import os
from typing import Protocol

from intake_bot.config import strings
from intake_bot.models.conversation import SubmissionRecord
from intake_bot.services.submission_constants import NotificationFormat, RecordFormat
from intake_bot.workflows.definitions import get_flow

# This service externalizes completed requests: every record is written to a
# flat text file and forwarded to the operator chat. Failures are raised as
# SubmissionError subclasses for the caller to log.

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Base class for failures while externalizing a completed record."""


class PersistenceError(SubmissionError):
    pass


class NotificationError(SubmissionError):
    pass


class SubmissionSink(Protocol):
    async def persist(self, record: SubmissionRecord) -> None: ...

    async def notify_operator(self, record: SubmissionRecord) -> None: ...


class MessageSender(Protocol):
    async def send_message(self, chat_id: int, text: str, affordance=None, parse_mode=None): ...


def render_record(record: SubmissionRecord) -> str:
    """Plain-text body of a persisted request, fields in flow-step order."""
    flow = get_flow(record.flow)
    lines = [
        RecordFormat.HEADER,
        f"Тип: {record.flow.value}",
        f"ChatID: {record.chat_id}",
        f"Время: {record.submitted_at.strftime(RecordFormat.TIMESTAMP)}",
        "",
    ]
    for step, value in record.ordered_items(flow.steps):
        lines.append(f"{step.field_key}: {value}")
    lines.append("")
    lines.append(RecordFormat.FOOTER)
    return "\n".join(lines) + "\n"


def record_filename(record: SubmissionRecord) -> str:
    return RecordFormat.FILENAME.format(
        flow=record.flow.value,
        chat_id=record.chat_id,
        timestamp=record.submitted_at.strftime(RecordFormat.FILENAME_TIMESTAMP)
    )


def render_notification(record: SubmissionRecord) -> str:
    """Markdown message for the operator chat."""
    flow = get_flow(record.flow)
    lines = [
        f"🚨 *{flow.notification_title}*",
        "",
        strings.OPERATOR_TIME_LINE.format(time=record.submitted_at.strftime(NotificationFormat.TIMESTAMP)),
        strings.OPERATOR_CHAT_LINE.format(chat_id=record.chat_id),
        "",
    ]
    for step, value in record.ordered_items(flow.steps):
        lines.append(f"*{step.notification_label}:* {value}")
    return "\n".join(lines)


class FileSubmissionSink:
    """Writes one UTF-8 text file per completed request."""

    def __init__(self, directory: str):
        self.directory = directory

    def _write(self, path: str, content: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)

    async def persist(self, record: SubmissionRecord) -> str:
        path = os.path.join(self.directory, record_filename(record))
        try:
            await asyncio.to_thread(self._write, path, render_record(record))
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e
        logger.info(f"Request saved to file: {path}")
        return path


class OperatorNotifier:
    """Forwards completed requests to the operator chat through the transport."""

    def __init__(self, transport: MessageSender, operator_chat_id: int):
        self.transport = transport
        self.operator_chat_id = operator_chat_id

    async def notify_operator(self, record: SubmissionRecord) -> None:
        message_id = await self.transport.send_message(
            self.operator_chat_id,
            render_notification(record),
            parse_mode="Markdown"
        )
        if message_id is None:
            raise NotificationError(f"Operator notification for chat {record.chat_id} was not delivered")
        logger.info(f"Operator notified about {record.flow.value} request from chat {record.chat_id}")


class CompositeSubmissionSink:
    """Persists to file and notifies the operator."""

    def __init__(self, persister: FileSubmissionSink, notifier: OperatorNotifier):
        self.persister = persister
        self.notifier = notifier

    async def persist(self, record: SubmissionRecord) -> None:
        await self.persister.persist(record)

    async def notify_operator(self, record: SubmissionRecord) -> None:
        await self.notifier.notify_operator(record)
