"""
Auto-reply rules for inbound WhatsApp messages.

Automations are loaded from the AUTOMATION_FLOWS setting (a JSON array of
flows) on every webhook call and evaluated in list order. The first flow whose
trigger phrase appears in the message wins.

Configured entries are read leniently: only ``triggerPhrase`` has to be a
string. Other fields that do not fit the automation model are reported in the
log but do not disable the entry.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, TypeVar

from pydantic import ValidationError

from app.domain.automation import AutomationFlow

logger = logging.getLogger(__name__)

FALLBACK_REPLY_TEMPLATE = (
    "Thanks for reaching out! A specialist will respond shortly. "
    "(No automation matched for {sender})."
)


class Triggered(Protocol):
    trigger_phrase: str


T = TypeVar("T", bound=Triggered)


@dataclass
class ConfiguredAutomation:
    """One AUTOMATION_FLOWS entry as configured (raw keeps the original JSON object)"""
    trigger_phrase: str
    message_preview: Optional[str] = None
    id: Optional[Any] = None
    name: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return str(self.name or self.id or self.trigger_phrase)

    @classmethod
    def from_entry(cls, entry: Dict[str, Any]) -> "ConfiguredAutomation":
        preview = entry.get("messagePreview")
        name = entry.get("name")
        return cls(
            trigger_phrase=entry["triggerPhrase"],
            message_preview=preview if isinstance(preview, str) else None,
            id=entry.get("id"),
            name=name if isinstance(name, str) else None,
            raw=entry,
        )


def find_matching_flow(message_text: str, flows: Sequence[T]) -> Optional[T]:
    """
    Find the first flow whose trigger phrase is contained in the message.

    Matching is a case-insensitive substring test with no other normalization.
    An empty trigger phrase matches every message.

    Args:
        message_text: The inbound message text
        flows: Automation flows in priority (list) order

    Returns:
        The first matching flow, or None
    """
    text = message_text.lower()
    for flow in flows:
        if flow.trigger_phrase.lower() in text:
            return flow
    return None


def _warn_on_nonconforming_fields(index: int, entry: Dict[str, Any]) -> None:
    try:
        AutomationFlow.model_validate(entry)
    except ValidationError as e:
        fields = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
        logger.warning(
            f"⚠️ Automation #{index} has fields that do not fit an automation "
            f"({', '.join(fields)}), matching on triggerPhrase only"
        )


def load_automation_flows(raw: Optional[str]) -> List[ConfiguredAutomation]:
    """
    Parse a JSON array of automation flows.

    Malformed JSON or a non-array document yields an empty list. Entries that
    are not objects or have no string triggerPhrase are skipped individually.
    """
    if not raw or not raw.strip():
        return []

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"❌ Failed to parse AUTOMATION_FLOWS: {e}")
        return []

    if not isinstance(data, list):
        logger.error("❌ AUTOMATION_FLOWS must be a JSON array, ignoring configured automations")
        return []

    flows: List[ConfiguredAutomation] = []
    seen_ids = set()
    for index, entry in enumerate(data):
        if not isinstance(entry, dict) or not isinstance(entry.get("triggerPhrase"), str):
            logger.warning(f"⚠️ Skipping automation #{index}: no string triggerPhrase")
            continue

        _warn_on_nonconforming_fields(index, entry)
        flow = ConfiguredAutomation.from_entry(entry)

        if isinstance(flow.id, (str, int)):
            if flow.id in seen_ids:
                logger.warning(f"⚠️ Duplicate automation id '{flow.id}' in AUTOMATION_FLOWS")
            seen_ids.add(flow.id)
        flows.append(flow)

    return flows


class AutomationRegistry:
    """Read-only view over the configured automation flows"""

    def __init__(self, flows: Sequence[ConfiguredAutomation]):
        self.flows = list(flows)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "AutomationRegistry":
        return cls(load_automation_flows(raw))

    def __len__(self) -> int:
        return len(self.flows)

    def configured_entries(self) -> List[Dict[str, Any]]:
        """The entries exactly as configured, in list order"""
        return [flow.raw for flow in self.flows]

    def find_matching_flow(self, message_text: str) -> Optional[ConfiguredAutomation]:
        flow = find_matching_flow(message_text, self.flows)
        if flow:
            logger.info(f"🎯 Automation matched: '{flow.label}'")
        return flow
