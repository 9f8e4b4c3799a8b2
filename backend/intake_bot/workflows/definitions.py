# /intake_bot/workflows/definitions.py

"""
Flow definitions for the intake dialog.

This module defines both flows as pure data (no logic beyond lookups).
Each flow specifies its ordered steps; each step defines:
- prompt: the text shown when the step is entered
- field_key: where the answer is stored (None for the terminal step)
- label / operator_label: how the answer is titled in summaries
- terminal: whether the step expects the acknowledgement token

The tables are checked by validator.validate_flow at import, so a broken
definition fails loudly at startup instead of mid-conversation.
"""

from typing import Dict, Optional, Tuple

from intake_bot.config import strings
from intake_bot.models.flow import FlowDefinition, FlowVariant, Step
from intake_bot.workflows.validator import validate_flow


WORKFLOWS: Dict[FlowVariant, FlowDefinition] = {
    FlowVariant.WATER: FlowDefinition(
        variant=FlowVariant.WATER,
        selection_label=strings.WATER_BUTTON,
        selection_pattern=r"(1️⃣\s*)?консультация\s+по\s+водоснабжению",
        notification_title=strings.WATER_NOTIFICATION_TITLE,
        specialist_note=strings.WATER_SPECIALIST_NOTE,
        steps=(
            Step(index=1, prompt=strings.WATER_STEP_1, field_key="system_type",
                 label="🏗️ Система"),
            Step(index=2, prompt=strings.WATER_STEP_2, field_key="object_type",
                 label="🏢 Объект"),
            Step(index=3, prompt=strings.WATER_STEP_3, field_key="object_details",
                 label="📍 Детали", operator_label="📍 Детали объекта"),
            Step(index=4, prompt=strings.WATER_STEP_4, field_key="additional_info",
                 label="📋 Доп. информация"),
            Step(index=5, prompt=strings.WATER_STEP_5, field_key="contacts",
                 label="📞 Контакты"),
            Step(index=6, prompt=strings.WATER_STEP_6, terminal=True),  # Terminal step
        ),
    ),

    FlowVariant.MODEL3D: FlowDefinition(
        variant=FlowVariant.MODEL3D,
        selection_label=strings.MODEL3D_BUTTON,
        selection_pattern=r"(2️⃣\s*)?разработка\s+3d\s+модели",
        notification_title=strings.MODEL3D_NOTIFICATION_TITLE,
        specialist_note=strings.MODEL3D_SPECIALIST_NOTE,
        steps=(
            Step(index=1, prompt=strings.MODEL3D_STEP_1, field_key="element_name",
                 label="🔧 Название элемента"),
            Step(index=2, prompt=strings.MODEL3D_STEP_2, field_key="requirements",
                 label="📏 Требования"),
            Step(index=3, prompt=strings.MODEL3D_STEP_3, field_key="contacts",
                 label="📞 Контакты"),
            Step(index=4, prompt=strings.MODEL3D_STEP_4, terminal=True),  # Terminal step
        ),
    ),
}

for _flow in WORKFLOWS.values():
    _result = validate_flow(_flow)
    if not _result["is_valid"]:
        raise RuntimeError(f"Invalid flow definition '{_flow.variant.value}': {_result['message']}")


def get_flow(variant: FlowVariant) -> FlowDefinition:
    return WORKFLOWS[variant]


def step_at(variant: FlowVariant, index: int) -> Optional[Step]:
    """Returns the step at a 1-based index, or None when the index is out of range."""
    steps = WORKFLOWS[variant].steps
    if 1 <= index <= len(steps):
        return steps[index - 1]
    return None


def step_count(variant: FlowVariant) -> int:
    return len(WORKFLOWS[variant].steps)


def is_terminal(variant: FlowVariant, index: int) -> bool:
    step = step_at(variant, index)
    return step is not None and step.terminal


def field_keys(variant: FlowVariant) -> Tuple[str, ...]:
    """Field keys of the non-terminal steps, in step order."""
    return tuple(step.field_key for step in WORKFLOWS[variant].steps if step.field_key)
