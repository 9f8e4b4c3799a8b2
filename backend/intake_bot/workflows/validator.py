# /intake_bot/workflows/validator.py

"""
Pure validation functions for flow definitions.

This module provides deterministic, side-effect-free checks of a
FlowDefinition's structure:
- step indices are contiguous starting at 1
- exactly one step is terminal, and it is the last one
- every non-terminal step has a unique field key, the terminal step has none
- the terminal prompt only references fields collected before it

All functions are:
- Pure (no side effects)
- Deterministic (same input = same output)
- No logging
- No state mutation
"""

from string import Formatter
from typing import Optional, TypedDict

from intake_bot.models.flow import FlowDefinition


class ValidationResult(TypedDict):
    """Result of a validation check."""
    is_valid: bool
    error_code: Optional[str]
    message: Optional[str]


def _valid() -> ValidationResult:
    return {
        "is_valid": True,
        "error_code": None,
        "message": None
    }


def _invalid(error_code: str, message: str) -> ValidationResult:
    return {
        "is_valid": False,
        "error_code": error_code,
        "message": message
    }


def validate_step_indices(flow: FlowDefinition) -> ValidationResult:
    """
    Validate that step indices run 1..N without gaps or duplicates.

    Args:
        flow: The flow definition to check

    Returns:
        ValidationResult with is_valid=True if indices are contiguous from 1
    """
    if not flow.steps:
        return _invalid("EMPTY_FLOW", f"Flow '{flow.variant.value}' has no steps")

    indices = [step.index for step in flow.steps]
    expected = list(range(1, len(flow.steps) + 1))
    if indices != expected:
        return _invalid(
            "NON_CONTIGUOUS_STEPS",
            f"Flow '{flow.variant.value}' step indices {indices} are not contiguous from 1"
        )

    return _valid()


def validate_terminal_step(flow: FlowDefinition) -> ValidationResult:
    """
    Validate that exactly one step is terminal and that it is the last step.

    Args:
        flow: The flow definition to check

    Returns:
        ValidationResult with is_valid=True if the terminal step is unique and last
    """
    terminal = [step.index for step in flow.steps if step.terminal]
    if len(terminal) != 1:
        return _invalid(
            "TERMINAL_COUNT",
            f"Flow '{flow.variant.value}' must have exactly one terminal step, found {len(terminal)}"
        )

    if not flow.steps[-1].terminal:
        return _invalid(
            "TERMINAL_NOT_LAST",
            f"Flow '{flow.variant.value}' terminal step {terminal[0]} is not the last step"
        )

    return _valid()


def validate_field_keys(flow: FlowDefinition) -> ValidationResult:
    """
    Validate field keys: unique on non-terminal steps, absent on the terminal step.

    Args:
        flow: The flow definition to check

    Returns:
        ValidationResult with is_valid=True if every answer has its own key
    """
    seen = set()
    for step in flow.steps:
        if step.terminal:
            if step.field_key is not None:
                return _invalid(
                    "TERMINAL_FIELD_KEY",
                    f"Terminal step {step.index} of flow '{flow.variant.value}' must not store an answer"
                )
            continue

        if not step.field_key:
            return _invalid(
                "MISSING_FIELD_KEY",
                f"Step {step.index} of flow '{flow.variant.value}' has no field key"
            )
        if step.field_key in seen:
            return _invalid(
                "DUPLICATE_FIELD_KEY",
                f"Field key '{step.field_key}' is used twice in flow '{flow.variant.value}'"
            )
        seen.add(step.field_key)

    return _valid()


def validate_prompt_placeholders(flow: FlowDefinition) -> ValidationResult:
    """
    Validate that the terminal prompt only references fields collected before it.

    Args:
        flow: The flow definition to check

    Returns:
        ValidationResult with is_valid=True if every placeholder can be rendered
    """
    collected = {step.field_key for step in flow.steps if step.field_key}
    for step in flow.steps:
        if not step.terminal:
            continue
        names = {name for _, name, _, _ in Formatter().parse(step.prompt) if name}
        unknown = sorted(names - collected)
        if unknown:
            return _invalid(
                "UNKNOWN_PLACEHOLDER",
                f"Terminal prompt of flow '{flow.variant.value}' references unknown fields: {', '.join(unknown)}"
            )

    return _valid()


def validate_flow(flow: FlowDefinition) -> ValidationResult:
    """Run every structural check, returning the first failure."""
    for check in (
        validate_step_indices,
        validate_terminal_step,
        validate_field_keys,
        validate_prompt_placeholders,
    ):
        result = check(flow)
        if not result["is_valid"]:
            return result
    return _valid()
