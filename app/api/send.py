"""WhatsApp test-send endpoint"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.api.deps import get_activity_feed, get_settings, get_whatsapp_client
from app.clients.twilio_client import WhatsAppAPIError, WhatsAppClient, mask_address
from app.config import Settings
from app.services.activity_feed import ActivityFeed

logger = logging.getLogger(__name__)

router = APIRouter()


class SendPayload(BaseModel):
    """Request body for POST /api/send"""
    to: str = ""
    message: str = ""


@router.post("/send")
async def send_test_message(
    payload: SendPayload,
    settings: Settings = Depends(get_settings),
    client: Optional[WhatsAppClient] = Depends(get_whatsapp_client),
    feed: ActivityFeed = Depends(get_activity_feed)
):
    """
    Send a one-off WhatsApp message through Twilio.

    The destination is prefixed with 'whatsapp:' when it is not already.

    Returns:
        200 {"sid": str}
        400 {"error": str} when the destination or message is missing
        500 {"error": str} when Twilio is not configured or the send fails
    """
    if not settings.twilio_configured:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": (
                    "Twilio credentials are not configured. Set TWILIO_ACCOUNT_SID, "
                    "TWILIO_AUTH_TOKEN, and TWILIO_WHATSAPP_FROM."
                )
            }
        )

    if client is None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Twilio client failed to initialize."}
        )

    if not payload.to.strip() or not payload.message.strip():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing destination number or message body."}
        )

    logger.info(f"Send request - to: {mask_address(payload.to)}, length: {len(payload.message)}")

    try:
        sid = await client.send_message(payload.to, payload.message)
    except WhatsAppAPIError as e:
        logger.error(f"❌ WhatsApp send failed: {e.message}")
        feed.record("send", f"Test message to {mask_address(payload.to)} failed.")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to send WhatsApp message via Twilio."}
        )

    feed.record("send", f"Test message sent to {mask_address(payload.to)}.")
    return {"sid": sid}
