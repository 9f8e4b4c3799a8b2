# /intake_bot/models/conversation.py

from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from intake_bot.models.flow import FlowVariant, Step


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InboundMessage(BaseModel):
    """The only two things the dialog needs from an inbound transport update."""
    chat_id: int
    text: str = ""

    model_config = ConfigDict(frozen=True)


class InputAffordance(BaseModel):
    """Quick-reply keyboard attached to an outbound message, or a request to remove it."""
    options: List[List[str]] = Field(default_factory=list, description="Rows of button labels")
    remove: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def choices(cls, *labels: str) -> "InputAffordance":
        """One button per row, in the given order."""
        return cls(options=[[label] for label in labels])

    @classmethod
    def clear(cls) -> "InputAffordance":
        return cls(remove=True)


class OutboundMessage(BaseModel):
    chat_id: int
    text: str
    affordance: Optional[InputAffordance] = None
    parse_mode: Optional[str] = "Markdown"

    model_config = ConfigDict(frozen=True)


class ConversationState(BaseModel):
    """
    Progress of one chat through a flow.

    Instances are treated as values: transitions build a new state with
    model_copy() instead of mutating the stored one.
    """
    chat_id: int = Field(..., description="Transport-supplied chat identity")
    flow: FlowVariant = Field(..., description="Which flow definition applies")
    step: int = Field(default=1, ge=1, description="Index of the step awaiting an answer")
    fields: Dict[str, str] = Field(default_factory=dict, description="Answers keyed by field key")
    started_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class SubmissionRecord(BaseModel):
    """Finalized answers of one completed flow, handed to the submission sink."""
    flow: FlowVariant
    chat_id: int
    submitted_at: datetime = Field(default_factory=utcnow)
    fields: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def ordered_items(self, steps: Tuple[Step, ...]) -> Iterator[Tuple[Step, str]]:
        """Yields (step, answer) pairs in flow-step order, skipping the terminal step."""
        for step in steps:
            if step.field_key is None:
                continue
            yield step, self.fields.get(step.field_key, "")
