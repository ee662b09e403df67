"""
Client-side automation store.

Holds the user's automation flows in memory and mirrors every change to
storage as a JSON array under a fixed key. Listeners subscribed to the store
receive the new list after each mutation.

Reads hand out copies; the only way to change a flow is through the store.
"""

import json
import logging
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from app.domain.automation import AutomationFlow
from app.infrastructure.json_storage import JsonFileStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "automation-flows"

Listener = Callable[[List[AutomationFlow]], None]


class DuplicateAutomationError(ValueError):
    """Raised when adding a flow whose id is already in the store"""


class AutomationStore:
    """Read/write/subscribe access to the persisted automation list"""

    def __init__(self, storage: JsonFileStorage, key: str = STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._flows: List[AutomationFlow] = []
        self._listeners: List[Listener] = []

    # Reads

    def load(self) -> List[AutomationFlow]:
        """
        Load flows from storage, replacing the in-memory list.

        Malformed stored JSON is logged and treated as an empty list.
        """
        raw = self._storage.get_item(self._key)
        self._flows = self._parse(raw) if raw else []
        logger.info(f"✅ Loaded {len(self._flows)} automations from storage")
        return self.list()

    def list(self) -> List[AutomationFlow]:
        return [flow.model_copy(deep=True) for flow in self._flows]

    def get(self, flow_id: str) -> Optional[AutomationFlow]:
        for flow in self._flows:
            if flow.id == flow_id:
                return flow.model_copy(deep=True)
        return None

    # Writes

    def add(self, flow: AutomationFlow) -> AutomationFlow:
        """Prepend a new flow (newest first)"""
        if any(existing.id == flow.id for existing in self._flows):
            raise DuplicateAutomationError(f"Automation {flow.id} already exists")
        self._commit([flow.model_copy(deep=True), *self._flows])
        return flow

    def save(self, flow: AutomationFlow) -> Optional[AutomationFlow]:
        """
        Replace the stored flow with the same id.

        Returns None (and changes nothing) if the flow was deleted meanwhile.
        """
        if not any(existing.id == flow.id for existing in self._flows):
            logger.info(f"Automation {flow.id} no longer exists, dropping update")
            return None
        self._commit([
            flow.model_copy(deep=True) if existing.id == flow.id else existing
            for existing in self._flows
        ])
        return flow

    def update(self, flow_id: str, **changes: Any) -> Optional[AutomationFlow]:
        """Apply field changes (snake_case names) to a flow"""
        flow = self.get(flow_id)
        if flow is None:
            return None
        updated = AutomationFlow.model_validate({**flow.model_dump(), **changes})
        return self.save(updated)

    def remove(self, flow_id: str) -> bool:
        remaining = [flow for flow in self._flows if flow.id != flow_id]
        if len(remaining) == len(self._flows):
            return False
        self._commit(remaining)
        return True

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Internals

    def _commit(self, flows: List[AutomationFlow]) -> None:
        self._flows = flows
        self._storage.set_item(
            self._key,
            json.dumps([flow.to_wire() for flow in self._flows], ensure_ascii=False)
        )
        snapshot = self.list()
        for listener in list(self._listeners):
            listener(snapshot)

    def _parse(self, raw: str) -> List[AutomationFlow]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Failed to parse stored automations: {e}")
            return []

        if not isinstance(data, list):
            logger.error("❌ Stored automations are not a JSON array, starting empty")
            return []

        flows: List[AutomationFlow] = []
        seen_ids = set()
        for entry in data:
            try:
                flow = AutomationFlow.model_validate(entry)
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping stored automation: {e.error_count()} invalid field(s)")
                continue
            if flow.id in seen_ids:
                logger.warning(f"⚠️ Dropping duplicate stored automation '{flow.id}'")
                continue
            seen_ids.add(flow.id)
            flows.append(flow)
        return flows
