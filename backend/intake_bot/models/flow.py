# /intake_bot/models/flow.py

import re
from enum import Enum
from typing import Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class FlowVariant(str, Enum):
    """The two intake flows a chat can select."""
    WATER = "water"
    MODEL3D = "model3d"


class Step(BaseModel):
    """
    One question position within a flow.

    The terminal step carries no field key: it expects the acknowledgement
    token instead of free text.
    """
    index: int = Field(..., ge=1, description="1-based position within the flow")
    prompt: str = Field(..., description="Markdown prompt shown when the step is entered")
    field_key: Optional[str] = Field(default=None, description="Key the answer is stored under")
    label: Optional[str] = Field(default=None, description="Field label in the completion summary")
    operator_label: Optional[str] = Field(default=None, description="Field label in the operator notification")
    terminal: bool = Field(default=False, description="Whether this is the confirmation step")

    model_config = ConfigDict(frozen=True)

    def render(self, fields: Dict[str, str]) -> str:
        """Renders the prompt, substituting already collected answers."""
        if not self.terminal:
            return self.prompt
        return self.prompt.format(**fields)

    @property
    def notification_label(self) -> str:
        return self.operator_label or self.label or self.field_key or ""


class FlowDefinition(BaseModel):
    """Static, immutable description of one flow."""
    variant: FlowVariant
    selection_label: str = Field(..., description="Button label on the welcome keyboard")
    selection_pattern: str = Field(..., description="Full-match regex recognising the selection")
    notification_title: str
    specialist_note: str
    steps: Tuple[Step, ...]

    model_config = ConfigDict(frozen=True)

    def matches_selection(self, text: str) -> bool:
        return re.fullmatch(self.selection_pattern, text.strip(), flags=re.IGNORECASE) is not None
