"""
Tests for the automation flow model and its status lifecycle
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from app.domain.automation import (
    AutomationFlow,
    FlowStatus,
    GenerationRequest,
    InvalidTransitionError,
    Tone,
)


@pytest.fixture
def ready_flow():
    return AutomationFlow(
        id="flow-1",
        name="Pricing",
        trigger_phrase="pricing",
        goal="Book a demo",
        message_preview="Plans start at $29.",
        status=FlowStatus.READY,
    )


class TestAutomationFlowModel:

    def test_defaults(self):
        flow = AutomationFlow(trigger_phrase="hi")

        assert flow.id
        assert flow.ai_tone == Tone.FRIENDLY
        assert flow.status == FlowStatus.DRAFT
        assert flow.message_preview == ""
        assert flow.error is None

    def test_ids_are_unique(self):
        assert AutomationFlow(trigger_phrase="a").id != AutomationFlow(trigger_phrase="a").id

    def test_trigger_phrase_is_required(self):
        with pytest.raises(ValidationError):
            AutomationFlow.model_validate({"id": "x"})

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValidationError):
            AutomationFlow.model_validate({"triggerPhrase": "hi", "status": "archived"})

    def test_wire_form_uses_camel_case_and_omits_unset(self, ready_flow):
        ready_flow.last_generated_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        wire = ready_flow.to_wire()

        assert wire["triggerPhrase"] == "pricing"
        assert wire["messagePreview"] == "Plans start at $29."
        assert wire["aiTone"] == "friendly"
        assert wire["status"] == "ready"
        assert wire["lastGeneratedAt"].startswith("2024-05-01T12:00:00")
        assert "testPhone" not in wire
        assert "error" not in wire

    def test_wire_form_parses_back(self, ready_flow):
        assert AutomationFlow.model_validate(ready_flow.to_wire()) == ready_flow


class TestLifecycle:

    def test_generation_moves_draft_to_ready(self):
        flow = AutomationFlow(trigger_phrase="hi")

        flow.mark_generated("Hello!")

        assert flow.status == FlowStatus.READY
        assert flow.message_preview == "Hello!"
        assert flow.last_generated_at is not None

    def test_regeneration_clears_error_and_preview(self, ready_flow):
        ready_flow.mark_failed("boom")

        ready_flow.start_regeneration()

        assert ready_flow.status == FlowStatus.DRAFT
        assert ready_flow.error is None
        assert ready_flow.message_preview == ""

    def test_send_round_trip(self, ready_flow):
        ready_flow.start_sending()
        assert ready_flow.status == FlowStatus.SENDING

        ready_flow.mark_sent()
        assert ready_flow.status == FlowStatus.READY

    def test_interrupted_send_can_be_restarted(self, ready_flow):
        ready_flow.start_sending()

        ready_flow.start_sending()

        assert ready_flow.status == FlowStatus.SENDING

    def test_failed_send_can_be_retried(self, ready_flow):
        ready_flow.start_sending()
        ready_flow.mark_failed("Twilio said no")
        assert ready_flow.status == FlowStatus.ERROR
        assert ready_flow.error == "Twilio said no"

        ready_flow.start_sending()
        assert ready_flow.status == FlowStatus.SENDING
        assert ready_flow.error is None

    def test_draft_cannot_be_sent(self):
        flow = AutomationFlow(trigger_phrase="hi")

        with pytest.raises(InvalidTransitionError) as exc_info:
            flow.start_sending()

        assert exc_info.value.current == FlowStatus.DRAFT
        assert exc_info.value.target == FlowStatus.SENDING

    def test_mark_sent_requires_sending(self, ready_flow):
        with pytest.raises(InvalidTransitionError):
            ready_flow.mark_sent()

    def test_error_flow_cannot_become_ready_without_regeneration(self, ready_flow):
        ready_flow.mark_failed("boom")

        with pytest.raises(InvalidTransitionError):
            ready_flow.mark_generated("new text")


class TestGenerationRequest:

    def test_missing_fields_treats_whitespace_as_missing(self):
        request = GenerationRequest(name=" ", trigger_phrase="pricing", goal="")

        assert request.missing_fields() == ["name", "goal"]

    def test_payload_is_camel_case(self):
        request = GenerationRequest(name="N", trigger_phrase="t", goal="g", tone=Tone.CONCISE)

        assert request.to_payload() == {
            "name": "N",
            "triggerPhrase": "t",
            "aiTone": "concise",
            "goal": "g",
            "context": "",
        }

    def test_from_flow(self, ready_flow):
        request = GenerationRequest.from_flow(ready_flow)

        assert request.name == "Pricing"
        assert request.trigger_phrase == "pricing"
        assert request.tone == Tone.FRIENDLY
