# /intake_bot/workflows/intents.py

"""
Resolution of raw inbound text into the control tokens the dialog understands.

Every message is classified exactly once, in a fixed priority order:
restart, flow selection, acknowledgement, blank, free text. The order is what
makes a restart phrase win over any other reading of the same text.
"""

from enum import Enum
from typing import NamedTuple, Optional

from intake_bot.config import strings
from intake_bot.models.flow import FlowVariant
from intake_bot.workflows.definitions import WORKFLOWS


class InputKind(str, Enum):
    RESTART = "restart"
    SELECT_FLOW = "select_flow"
    ACKNOWLEDGE = "acknowledge"
    BLANK = "blank"
    TEXT = "text"


class Intent(NamedTuple):
    kind: InputKind
    flow: Optional[FlowVariant] = None


def _is_restart(text: str) -> bool:
    if text == strings.RESTART_BUTTON:
        return True
    # Commands may arrive as "/start@SomeBot" in group chats
    command = text.split("@", 1)[0] if text.startswith("/") else text
    return command in strings.RESTART_COMMANDS


def _selected_flow(text: str) -> Optional[FlowVariant]:
    for variant, flow in WORKFLOWS.items():
        if text == flow.selection_label or flow.matches_selection(text):
            return variant
    return None


def classify(text: Optional[str]) -> Intent:
    """Classify inbound text; None (e.g. a photo without caption) counts as blank."""
    stripped = (text or "").strip()

    if _is_restart(stripped):
        return Intent(InputKind.RESTART)

    variant = _selected_flow(stripped)
    if variant is not None:
        return Intent(InputKind.SELECT_FLOW, variant)

    if stripped == strings.ACKNOWLEDGE_BUTTON:
        return Intent(InputKind.ACKNOWLEDGE)

    if not stripped:
        return Intent(InputKind.BLANK)

    return Intent(InputKind.TEXT)
