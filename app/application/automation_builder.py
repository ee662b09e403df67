"""
Automation builder - client-side use cases for managing automation flows.

Orchestrates the automation store and the studio API:
- create: generate a reply and add a ready flow
- regenerate: replace a flow's reply
- send_test: send a flow's reply to its test number
- update / delete: user edits

A failure in regenerate or send_test is recorded on that flow only (status
'error' plus an error message); other flows are never touched.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from app.clients.studio_client import StudioAPIClient, StudioAPIError
from app.domain.automation import (
    AutomationFlow,
    FlowStatus,
    GenerationRequest,
    InvalidTransitionError,
    Tone,
)
from app.infrastructure.automation_store import AutomationStore

logger = logging.getLogger(__name__)

MISSING_TEST_PHONE_ERROR = "Add a WhatsApp number before sending."
EDITABLE_FIELDS = {"name", "message_preview", "test_phone", "goal", "context", "ai_tone"}


class AutomationBuilderError(Exception):
    """Raised when a builder action fails without a flow to attach the error to"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class AutomationNotFoundError(AutomationBuilderError):
    """Raised when an action targets an automation that does not exist"""
    def __init__(self, flow_id: str):
        self.flow_id = flow_id
        super().__init__(f"Automation {flow_id} not found")


@dataclass
class AutomationSummary:
    total: int
    ready: int
    drafts: int


class AutomationBuilder:
    """Client-side automation workflows backed by a store and the studio API"""

    def __init__(self, store: AutomationStore, api: Optional[StudioAPIClient] = None):
        self.store = store
        self.api = api

    def _require(self, flow_id: str) -> AutomationFlow:
        flow = self.store.get(flow_id)
        if flow is None:
            raise AutomationNotFoundError(flow_id)
        return flow

    async def create(
        self,
        name: str,
        trigger_phrase: str,
        goal: str,
        tone: Tone = Tone.FRIENDLY,
        context: Optional[str] = None
    ) -> AutomationFlow:
        """
        Generate a reply and add a new ready automation.

        Raises:
            AutomationBuilderError: If required fields are missing or generation fails.
                No automation is created in that case.
        """
        request = GenerationRequest(
            name=name,
            trigger_phrase=trigger_phrase,
            goal=goal,
            tone=tone,
            context=context,
        )
        if request.missing_fields():
            raise AutomationBuilderError("Name, trigger phrase and goal are required.")

        try:
            message = await self.api.generate(request)
        except StudioAPIError as e:
            logger.error(f"❌ Generation failed for new automation '{name}': {e.message}")
            raise AutomationBuilderError(e.message) from e

        flow = AutomationFlow(
            name=name,
            trigger_phrase=trigger_phrase,
            ai_tone=tone,
            goal=goal,
            context=context or None,
            message_preview=message,
            last_generated_at=datetime.now(timezone.utc),
            status=FlowStatus.READY,
        )
        self.store.add(flow)
        logger.info(f"✅ Created automation {flow.id} ('{name}')")
        return flow

    async def regenerate(self, flow_id: str) -> AutomationFlow:
        """Regenerate a flow's reply; on failure the flow ends in 'error'"""
        flow = self._require(flow_id)
        flow.start_regeneration()
        self.store.save(flow)

        try:
            message = await self.api.generate(GenerationRequest.from_flow(flow))
        except StudioAPIError as e:
            logger.error(f"❌ Regeneration failed for automation {flow_id}: {e.message}")
            flow.mark_failed(e.message or "AI regeneration failed. Try again.")
            self.store.save(flow)
            return flow

        flow.mark_generated(message)
        self.store.save(flow)
        logger.info(f"✅ Regenerated automation {flow_id}")
        return flow

    async def send_test(self, flow_id: str) -> AutomationFlow:
        """Send a flow's reply to its test number; on failure the flow ends in 'error'"""
        flow = self._require(flow_id)

        if not flow.test_phone:
            flow.mark_failed(MISSING_TEST_PHONE_ERROR)
            self.store.save(flow)
            return flow

        try:
            flow.start_sending()
        except InvalidTransitionError as e:
            raise AutomationBuilderError(f"{e.message}. Regenerate the reply before sending.") from e
        self.store.save(flow)

        try:
            sid = await self.api.send(flow.test_phone, flow.message_preview)
        except StudioAPIError as e:
            logger.error(f"❌ Test send failed for automation {flow_id}: {e.message}")
            flow.mark_failed(e.message or "WhatsApp dispatch failed. Check Twilio credentials.")
            self.store.save(flow)
            return flow

        flow.mark_sent()
        self.store.save(flow)
        logger.info(f"✅ Test message {sid} sent for automation {flow_id}")
        return flow

    def update(self, flow_id: str, **changes: Any) -> AutomationFlow:
        """Edit user-editable fields (reply text, test number, ...)"""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise AutomationBuilderError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        self._require(flow_id)
        updated = self.store.update(flow_id, **changes)
        if updated is None:
            raise AutomationNotFoundError(flow_id)
        return updated

    def delete(self, flow_id: str) -> None:
        if not self.store.remove(flow_id):
            raise AutomationNotFoundError(flow_id)
        logger.info(f"🗑️ Deleted automation {flow_id}")

    def summary(self) -> AutomationSummary:
        flows = self.store.list()
        return AutomationSummary(
            total=len(flows),
            ready=sum(1 for flow in flows if flow.status == FlowStatus.READY),
            drafts=sum(1 for flow in flows if flow.status == FlowStatus.DRAFT),
        )
