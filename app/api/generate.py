"""AI reply generation endpoint"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import get_activity_feed, get_reply_generator, get_settings
from app.clients.openai_client import GenerationError, ReplyGenerator
from app.config import Settings
from app.domain.automation import GenerationRequest, Tone
from app.services.activity_feed import ActivityFeed

logger = logging.getLogger(__name__)

router = APIRouter()


class GeneratePayload(BaseModel):
    """Request body for POST /api/generate (camelCase like the stored flows)"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    trigger_phrase: str = Field("", alias="triggerPhrase")
    ai_tone: Optional[Tone] = Field(None, alias="aiTone")
    goal: str = ""
    context: Optional[str] = None

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(
            name=self.name,
            trigger_phrase=self.trigger_phrase,
            goal=self.goal,
            tone=self.ai_tone or Tone.FRIENDLY,
            context=self.context,
        )


@router.post("/generate")
async def generate_reply(
    payload: GeneratePayload,
    settings: Settings = Depends(get_settings),
    generator: Optional[ReplyGenerator] = Depends(get_reply_generator),
    feed: ActivityFeed = Depends(get_activity_feed)
):
    """
    Generate a WhatsApp reply for an automation.

    Returns:
        200 {"message": str}
        400 {"error": str} when name, triggerPhrase or goal is missing
        500 {"error": str} when OpenAI is not configured or the call fails
    """
    if not settings.openai_configured:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "OPENAI_API_KEY is not configured."}
        )

    if generator is None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "OpenAI client could not be initialized."}
        )

    request = payload.to_request()
    missing = request.missing_fields()
    if missing:
        logger.warning(f"Generation request rejected - missing fields: {', '.join(missing)}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing required fields for AI generation."}
        )

    try:
        message = await generator.generate_reply(request)
    except GenerationError as e:
        logger.error(f"❌ AI generation failed: {e.message}")
        feed.record("generation", f"Generation failed for '{request.name}'.")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to contact OpenAI. Review logs for more details."}
        )

    feed.record("generation", f"Generated reply for '{request.name}' ({request.tone.value}).")
    return {"message": message}
