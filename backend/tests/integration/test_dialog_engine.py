# backend/tests/integration/test_dialog_engine.py
import asyncio
from unittest.mock import AsyncMock

import pytest

from intake_bot.config import strings
from intake_bot.models.conversation import InboundMessage
from intake_bot.models.flow import FlowVariant
from intake_bot.services.submission_service import (
    CompositeSubmissionSink,
    FileSubmissionSink,
    OperatorNotifier,
    PersistenceError,
)
from intake_bot.services.dialog_engine import DialogEngine

CHAT_ID = 555

MODEL3D_DIALOG = [
    "/start",
    strings.MODEL3D_BUTTON,
    "Декоративная решетка",
    "300x400x500 мм, 3 конфигурации",
    "designer@studio.ru",
    "Готово",
]


async def _feed(engine, texts, chat_id=CHAT_ID):
    results = []
    for text in texts:
        results.append(await engine.handle_message(InboundMessage(chat_id=chat_id, text=text)))
    return results


def _sent_texts(transport, chat_id=CHAT_ID):
    return [c.args[1] for c in transport.send_message.call_args_list if c.args[0] == chat_id]


@pytest.mark.asyncio
async def test_full_dialog_submits_once(engine, store, fake_transport, fake_sink):
    await _feed(engine, MODEL3D_DIALOG)
    await engine.drain()

    assert store.get(CHAT_ID) is None
    fake_sink.persist.assert_awaited_once()
    fake_sink.notify_operator.assert_awaited_once()

    record = fake_sink.persist.call_args.args[0]
    assert record.flow is FlowVariant.MODEL3D
    assert record.fields == {
        "element_name": "Декоративная решетка",
        "requirements": "300x400x500 мм, 3 конфигурации",
        "contacts": "designer@studio.ru",
    }

    texts = _sent_texts(fake_transport)
    assert texts[0] == strings.WELCOME_MESSAGE
    assert texts[1] == strings.MODEL3D_STEP_1
    assert "designer@studio.ru" in texts[4]
    assert texts[5].startswith(strings.COMPLETION_HEADER)


@pytest.mark.asyncio
async def test_replies_carry_keyboard_and_parse_mode(engine, fake_transport):
    await _feed(engine, ["/start"])
    kwargs = fake_transport.send_message.call_args.kwargs
    assert kwargs["parse_mode"] == "Markdown"
    assert kwargs["affordance"].options[0] == [strings.WATER_BUTTON]


@pytest.mark.asyncio
async def test_blank_input_keeps_step(engine, store, fake_transport):
    await _feed(engine, [strings.WATER_BUTTON, "ХВС", "школа", "   "])

    assert store.get(CHAT_ID).step == 3
    assert _sent_texts(fake_transport)[-2:] == [strings.BLANK_INPUT_WARNING, strings.WATER_STEP_3]


@pytest.mark.asyncio
async def test_restart_mid_flow_discards_answers(engine, store, fake_sink):
    await _feed(engine, [strings.WATER_BUTTON, "ХВС", "/restart"])
    await engine.drain()

    assert store.get(CHAT_ID) is None
    fake_sink.persist.assert_not_awaited()


@pytest.mark.asyncio
async def test_distinct_chats_are_independent(engine, store, fake_sink):
    dialog_a = [strings.WATER_BUTTON, "ХВС"]
    dialog_b = [strings.MODEL3D_BUTTON, "Клапан", "габариты"]

    await asyncio.gather(_feed(engine, dialog_a, chat_id=1), _feed(engine, dialog_b, chat_id=2))

    assert store.get(1).flow is FlowVariant.WATER
    assert store.get(1).fields == {"system_type": "ХВС"}
    assert store.get(2).flow is FlowVariant.MODEL3D
    assert store.get(2).step == 3
    assert len(store) == 2


@pytest.mark.asyncio
async def test_same_chat_messages_apply_in_order(store, fake_sink, fixed_now):
    """Slow reply delivery must not let a second message overtake the first."""
    sent = []

    async def slow_send(chat_id, text, affordance=None, parse_mode=None):
        await asyncio.sleep(0.01)
        sent.append(text)
        return 1

    transport = AsyncMock()
    transport.send_message = AsyncMock(side_effect=slow_send)
    engine = DialogEngine(store, transport, fake_sink, clock=lambda: fixed_now)

    await engine.handle_message(InboundMessage(chat_id=CHAT_ID, text=strings.WATER_BUTTON))
    await asyncio.gather(
        engine.handle_message(InboundMessage(chat_id=CHAT_ID, text="ХВС")),
        engine.handle_message(InboundMessage(chat_id=CHAT_ID, text="школа")),
    )

    assert store.get(CHAT_ID).fields == {"system_type": "ХВС", "object_type": "школа"}
    assert sent[-2:] == [strings.WATER_STEP_2, strings.WATER_STEP_3]
    assert store.lock_count == 0


@pytest.mark.asyncio
async def test_sink_failures_never_reach_the_user(engine, store, fake_transport, fake_sink):
    fake_sink.persist.side_effect = PersistenceError("disk full")
    fake_sink.notify_operator.side_effect = RuntimeError("telegram down")

    results = await _feed(engine, MODEL3D_DIALOG)
    await engine.drain()

    assert results[-1]["transition"] == "complete"
    assert store.get(CHAT_ID) is None
    assert _sent_texts(fake_transport)[-1].startswith(strings.COMPLETION_HEADER)
    # Notification is still attempted after a failed write
    fake_sink.notify_operator.assert_awaited_once()
    assert engine.pending_submissions == 0


@pytest.mark.asyncio
async def test_send_failure_does_not_skip_submission(engine, fake_transport, fake_sink):
    await _feed(engine, MODEL3D_DIALOG[:-1])
    fake_transport.send_message.side_effect = RuntimeError("network down")

    with pytest.raises(RuntimeError):
        await engine.handle_message(InboundMessage(chat_id=CHAT_ID, text="Готово"))
    await engine.drain()

    fake_sink.persist.assert_awaited_once()


@pytest.mark.asyncio
async def test_real_sinks_write_file_and_notify_operator(tmp_path, store, fake_transport, fixed_now):
    sink = CompositeSubmissionSink(
        FileSubmissionSink(str(tmp_path)),
        OperatorNotifier(fake_transport, operator_chat_id=999)
    )
    engine = DialogEngine(store, fake_transport, sink, clock=lambda: fixed_now)

    await _feed(engine, MODEL3D_DIALOG)
    await engine.drain()

    [written] = list(tmp_path.iterdir())
    assert written.name == "заявка_model3d_555_2026-03-14_09-30-05.txt"
    content = written.read_text(encoding="utf-8")
    assert "element_name: Декоративная решетка\n" in content

    operator_texts = _sent_texts(fake_transport, chat_id=999)
    assert len(operator_texts) == 1
    assert "НОВАЯ ЗАЯВКА НА 3D МОДЕЛЬ" in operator_texts[0]
