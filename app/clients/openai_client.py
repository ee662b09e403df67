"""
OpenAI client for generating automation replies.

Wraps the async OpenAI SDK so route handlers only deal with our own
GenerationError instead of provider exceptions.
"""
import logging
from typing import Optional

from openai import AsyncOpenAI

from app.config import Settings
from app.domain.automation import GenerationRequest
from app.services.prompt_builder import build_messages

logger = logging.getLogger(__name__)

EMPTY_COMPLETION_FALLBACK = (
    "Hi there! I'd love to help, but I could not generate a response. Please try again."
)


class GenerationError(Exception):
    """Exception raised when reply generation fails upstream"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ReplyGenerator:
    """
    Generates a single WhatsApp reply for an automation.

    Usage:
        generator = ReplyGenerator.from_settings(settings)
        text = await generator.generate_reply(request)
    """

    def __init__(
        self,
        openai_client: AsyncOpenAI,
        model: str = "gpt-4.1-mini",
        temperature: float = 0.7,
        max_tokens: int = 500,
        logger_instance: logging.Logger = logger
    ):
        self._client = openai_client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = logger_instance

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReplyGenerator":
        """Build a generator from settings (caller checks the API key is set)"""
        return cls(
            openai_client=AsyncOpenAI(api_key=settings.openai_api_key),
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )

    async def generate_reply(self, request: GenerationRequest) -> str:
        """
        Generate the reply text.

        Raises:
            GenerationError: If the OpenAI request fails for any reason
        """
        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=build_messages(request),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except Exception as e:
            self._logger.error(f"❌ OpenAI completion failed for '{request.name}': {e}")
            raise GenerationError(
                "OpenAI completion request failed",
                status_code=getattr(e, "status_code", None)
            ) from e

        content = None
        if completion.choices:
            content = completion.choices[0].message.content

        message = content.strip() if content else ""
        if not message:
            self._logger.warning(f"⚠️ Empty completion for '{request.name}', using fallback reply")
            return EMPTY_COMPLETION_FALLBACK

        self._logger.info(f"✅ Generated reply for '{request.name}' ({len(message)} chars)")
        return message
