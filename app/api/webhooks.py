"""Twilio WhatsApp webhook endpoints"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from app.api.deps import get_activity_feed, get_settings
from app.clients.twilio_client import mask_address
from app.config import Settings
from app.rules.automation_rules import FALLBACK_REPLY_TEMPLATE, AutomationRegistry
from app.rules.reply_envelope import TWIML_MEDIA_TYPE, build_reply_envelope
from app.services.activity_feed import ActivityFeed

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook")
async def handle_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    feed: ActivityFeed = Depends(get_activity_feed)
):
    """
    Inbound WhatsApp message webhook.

    Twilio POSTs a form-encoded body with 'Body' and 'From'. The configured
    automations are parsed fresh on every call and the first flow whose trigger
    phrase appears in the message provides the reply. Unmatched messages, and
    matches whose entry has no messagePreview, get the fallback reply.

    Always responds 200 with a TwiML document so Twilio never retries.
    """
    form = await request.form()
    incoming_message = str(form.get("Body") or "")
    from_number = str(form.get("From") or "unknown")

    # Log only metadata, never message content
    logger.info(
        f"📨 Webhook received - from: {mask_address(from_number)}, length: {len(incoming_message)}"
    )
    registry = AutomationRegistry.from_json(settings.automation_flows)
    matched = registry.find_matching_flow(incoming_message)

    if matched is not None and matched.message_preview is not None:
        reply_text = matched.message_preview
        feed.record("webhook", f"Automation '{matched.label}' replied to {mask_address(from_number)}.")
    else:
        reply_text = FALLBACK_REPLY_TEMPLATE.format(sender=from_number)
        if matched is not None:
            logger.warning(f"⚠️ Automation '{matched.label}' has no messagePreview, sending fallback reply")
        else:
            logger.info(f"No automation matched ({len(registry)} configured), sending fallback reply")
        feed.record("webhook", f"No automation reply for {mask_address(from_number)}.")

    return Response(
        content=build_reply_envelope(reply_text),
        status_code=200,
        media_type=TWIML_MEDIA_TYPE
    )


@router.get("/webhook")
async def list_webhook_automations(settings: Settings = Depends(get_settings)):
    """Return the automations the webhook currently matches against, as configured"""
    registry = AutomationRegistry.from_json(settings.automation_flows)
    return {"automations": registry.configured_entries()}
