# /intake_bot/workflows/engine.py

"""
Pure dialog transition engine.

Given the current ConversationState of a chat (or None) and one inbound
text, this module decides:
- the next state (None when the conversation ends or never started)
- the outbound messages to send, in order
- the SubmissionRecord to hand to the sink, when a flow completes

Rules are applied in a fixed priority order:
1. Restart tokens reset any state and show the welcome menu
2. Flow selection starts a fresh state, discarding any pending one
3. Without a state, anything else shows the welcome menu
4. Non-terminal steps store non-blank text and advance by one
5. The terminal step only accepts the acknowledgement token

All functions are:
- Pure (the input state is never mutated, a new state is returned)
- Deterministic (the clock is passed in)
- No message sending
- No store access
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, TypedDict

from intake_bot.config import strings
from intake_bot.models.conversation import (
    ConversationState,
    InputAffordance,
    OutboundMessage,
    SubmissionRecord,
)
from intake_bot.models.flow import FlowVariant, Step
from intake_bot.workflows.definitions import WORKFLOWS, get_flow, step_at
from intake_bot.workflows.intents import InputKind, classify

logger = logging.getLogger(__name__)

REQUEST_NUMBER_FORMAT = "%Y-%m-%d_%H-%M-%S"


class EngineResult(TypedDict):
    """Result of applying one inbound message."""
    state: Optional[ConversationState]
    replies: List[OutboundMessage]
    record: Optional[SubmissionRecord]
    transition: str


def welcome_keyboard() -> InputAffordance:
    labels = [flow.selection_label for flow in WORKFLOWS.values()]
    return InputAffordance.choices(*labels, strings.RESTART_BUTTON)


def confirmation_keyboard() -> InputAffordance:
    return InputAffordance.choices(strings.ACKNOWLEDGE_BUTTON, strings.RESTART_BUTTON)


def step_message(chat_id: int, step: Step, fields: Dict[str, str]) -> OutboundMessage:
    """The message shown when a step is entered."""
    affordance = confirmation_keyboard() if step.terminal else None
    return OutboundMessage(chat_id=chat_id, text=step.render(fields), affordance=affordance)


def render_summary(record: SubmissionRecord) -> str:
    """Completion message echoing every answer in flow-step order."""
    flow = get_flow(record.flow)
    lines = [strings.COMPLETION_HEADER, "", flow.specialist_note, "", strings.COMPLETION_FIELDS_HEADER]
    for step, value in record.ordered_items(flow.steps):
        lines.append(f"• {step.label}: {value}")
    lines.append("")
    lines.append(strings.COMPLETION_REQUEST_NUMBER.format(
        number=record.submitted_at.strftime(REQUEST_NUMBER_FORMAT)
    ))
    return "\n".join(lines)


def _result(
    state: Optional[ConversationState],
    replies: List[OutboundMessage],
    transition: str,
    record: Optional[SubmissionRecord] = None,
) -> EngineResult:
    return {
        "state": state,
        "replies": replies,
        "record": record,
        "transition": transition
    }


def _welcome(chat_id: int, transition: str) -> EngineResult:
    reply = OutboundMessage(chat_id=chat_id, text=strings.WELCOME_MESSAGE, affordance=welcome_keyboard())
    return _result(None, [reply], transition)


def start_flow(chat_id: int, variant: FlowVariant, now: datetime) -> EngineResult:
    """Fresh state at step 1; the welcome keyboard is removed."""
    state = ConversationState(chat_id=chat_id, flow=variant, step=1, fields={}, started_at=now, updated_at=now)
    first = step_at(variant, 1)
    reply = OutboundMessage(chat_id=chat_id, text=first.render({}), affordance=InputAffordance.clear())
    return _result(state, [reply], "select_flow")


def _answer(state: ConversationState, step: Step, text: str, now: datetime) -> EngineResult:
    fields = {**state.fields, step.field_key: text}
    next_step = step_at(state.flow, state.step + 1)
    if next_step is None:
        logger.error(f"Flow '{state.flow.value}' has no step after {state.step}; discarding state for chat {state.chat_id}")
        return _welcome(state.chat_id, "invalid_step")

    new_state = state.model_copy(update={"step": next_step.index, "fields": fields, "updated_at": now})
    return _result(new_state, [step_message(state.chat_id, next_step, fields)], "answer")


def _complete(state: ConversationState, now: datetime) -> EngineResult:
    flow = get_flow(state.flow)
    ordered = {step.field_key: state.fields.get(step.field_key, "") for step in flow.steps if step.field_key}
    record = SubmissionRecord(flow=state.flow, chat_id=state.chat_id, submitted_at=now, fields=ordered)
    reply = OutboundMessage(chat_id=state.chat_id, text=render_summary(record), affordance=InputAffordance.clear())
    return _result(None, [reply], "complete", record)


def apply_message(
    state: Optional[ConversationState],
    chat_id: int,
    text: Optional[str],
    now: datetime,
) -> EngineResult:
    """
    Apply one inbound message to a chat's state.

    Args:
        state: The chat's current state, or None when it has none
        chat_id: Chat identity the message came from
        text: Raw inbound text (None for messages without text)
        now: Timestamp used for state bookkeeping and the submission record

    Returns:
        EngineResult with the next state, the replies and an optional record
    """
    intent = classify(text)

    if intent.kind is InputKind.RESTART:
        return _welcome(chat_id, "restart")

    if intent.kind is InputKind.SELECT_FLOW:
        return start_flow(chat_id, intent.flow, now)

    if state is None:
        return _welcome(chat_id, "welcome")

    step = step_at(state.flow, state.step)
    if step is None:
        logger.error(f"Chat {chat_id} is at unknown step {state.step} of flow '{state.flow.value}'; discarding state")
        return _welcome(chat_id, "invalid_step")

    if step.terminal:
        if intent.kind is InputKind.ACKNOWLEDGE:
            return _complete(state, now)
        reply = OutboundMessage(
            chat_id=chat_id,
            text=strings.CONFIRMATION_REQUIRED,
            affordance=confirmation_keyboard(),
            parse_mode=None
        )
        return _result(state, [reply], "confirm_retry")

    if intent.kind is InputKind.BLANK:
        warning = OutboundMessage(chat_id=chat_id, text=strings.BLANK_INPUT_WARNING, parse_mode=None)
        return _result(state, [warning, step_message(chat_id, step, state.fields)], "blank_retry")

    # Answers are stored raw, as typed by the user
    return _answer(state, step, text, now)
