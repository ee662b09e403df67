"""
Automation domain model.

An AutomationFlow is a user-defined trigger -> response rule together with the
metadata used to generate its reply. The same shape is used by the client-side
store and by the AUTOMATION_FLOWS list the webhook reads, so the wire form uses
the camelCase keys both of them persist.

Status lifecycle:
    draft -> ready              (generation succeeded)
    ready -> sending -> ready   (test send succeeded)
    sending -> error            (test send failed)
    error -> sending            (user re-triggers the send)
    sending -> sending          (re-send after an interrupted send)
    any -> draft                (regeneration started)
    any -> error                (generation failed or client-side validation)
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Tone(str, enum.Enum):
    """Voice the generated reply should take"""
    FRIENDLY = "friendly"
    PROFESSIONAL = "professional"
    CONCISE = "concise"
    EMPATHETIC = "empathetic"


class FlowStatus(str, enum.Enum):
    DRAFT = "draft"
    READY = "ready"
    SENDING = "sending"
    ERROR = "error"


ALLOWED_TRANSITIONS = {
    FlowStatus.DRAFT: {FlowStatus.DRAFT, FlowStatus.READY, FlowStatus.ERROR},
    FlowStatus.READY: {FlowStatus.DRAFT, FlowStatus.SENDING, FlowStatus.ERROR},
    FlowStatus.SENDING: {FlowStatus.DRAFT, FlowStatus.SENDING, FlowStatus.READY, FlowStatus.ERROR},
    FlowStatus.ERROR: {FlowStatus.DRAFT, FlowStatus.SENDING, FlowStatus.ERROR},
}


class InvalidTransitionError(Exception):
    """Raised when a flow is moved to a status its current status cannot reach"""
    def __init__(self, flow_id: str, current: FlowStatus, target: FlowStatus):
        self.flow_id = flow_id
        self.current = current
        self.target = target
        self.message = (
            f"Automation {flow_id} cannot move from '{current.value}' to '{target.value}'"
        )
        super().__init__(self.message)


def _new_flow_id() -> str:
    return str(uuid.uuid4())


class AutomationFlow(BaseModel):
    """A single automation flow (camelCase on the wire, snake_case in Python)"""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_flow_id)
    name: str = ""
    trigger_phrase: str = Field(..., alias="triggerPhrase")
    ai_tone: Tone = Field(Tone.FRIENDLY, alias="aiTone")
    goal: str = ""
    context: Optional[str] = None
    message_preview: str = Field("", alias="messagePreview")
    status: FlowStatus = FlowStatus.DRAFT
    error: Optional[str] = None
    test_phone: Optional[str] = Field(None, alias="testPhone")
    last_generated_at: Optional[datetime] = Field(None, alias="lastGeneratedAt")

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON form, omitting unset optionals"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    # Lifecycle

    def _transition(self, target: FlowStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.id, self.status, target)
        self.status = target

    def start_regeneration(self) -> None:
        self._transition(FlowStatus.DRAFT)
        self.error = None
        self.message_preview = ""

    def mark_generated(self, message: str, generated_at: Optional[datetime] = None) -> None:
        self._transition(FlowStatus.READY)
        self.message_preview = message
        self.last_generated_at = generated_at or datetime.now(timezone.utc)
        self.error = None

    def start_sending(self) -> None:
        self._transition(FlowStatus.SENDING)
        self.error = None

    def mark_sent(self) -> None:
        if self.status != FlowStatus.SENDING:
            raise InvalidTransitionError(self.id, self.status, FlowStatus.READY)
        self._transition(FlowStatus.READY)
        self.error = None

    def mark_failed(self, error: str) -> None:
        self._transition(FlowStatus.ERROR)
        self.error = error


@dataclass
class GenerationRequest:
    """Input for generating a reply for an automation"""
    name: str
    trigger_phrase: str
    goal: str
    tone: Tone = Tone.FRIENDLY
    context: Optional[str] = None

    def missing_fields(self) -> List[str]:
        required = {
            "name": self.name,
            "triggerPhrase": self.trigger_phrase,
            "goal": self.goal,
        }
        return [key for key, value in required.items() if not (value or "").strip()]

    def to_payload(self) -> Dict[str, Any]:
        """JSON body accepted by POST /api/generate"""
        return {
            "name": self.name,
            "triggerPhrase": self.trigger_phrase,
            "aiTone": self.tone.value,
            "goal": self.goal,
            "context": self.context or "",
        }

    @classmethod
    def from_flow(cls, flow: AutomationFlow) -> "GenerationRequest":
        return cls(
            name=flow.name,
            trigger_phrase=flow.trigger_phrase,
            goal=flow.goal,
            tone=flow.ai_tone,
            context=flow.context,
        )
