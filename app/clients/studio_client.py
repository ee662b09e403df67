"""
HTTP client for the studio API (/api/generate and /api/send).

Used by the client-side automation builder the same way the browser UI calls
the API: one JSON request per action, no retries.
"""
import logging
from typing import Optional

import httpx

from app.domain.automation import GenerationRequest

logger = logging.getLogger(__name__)


class StudioAPIError(Exception):
    """Exception raised when a studio API request fails"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class StudioAPIClient:
    """
    Client for the automation studio API.

    Usage:
        async with httpx.AsyncClient() as http_client:
            api = StudioAPIClient(http_client, "http://localhost:8000")
            message = await api.generate(request)
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, timeout: float = 60.0):
        self._http_client = http_client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def generate(self, request: GenerationRequest) -> str:
        """
        Generate a reply for an automation.

        Raises:
            StudioAPIError: On a non-2xx response or transport failure
        """
        data = await self._post("/api/generate", request.to_payload(), "Failed to generate AI response")
        message = data.get("message")
        if not isinstance(message, str):
            raise StudioAPIError("Generation response did not include a message")
        return message

    async def send(self, to: str, message: str) -> str:
        """
        Send a WhatsApp test message.

        Returns:
            Twilio message SID

        Raises:
            StudioAPIError: On a non-2xx response or transport failure
        """
        data = await self._post(
            "/api/send",
            {"to": to, "message": message},
            "Failed to dispatch WhatsApp message"
        )
        return data.get("sid", "")

    async def _post(self, path: str, payload: dict, default_error: str) -> dict:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http_client.post(url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as e:
            logger.error(f"❌ Request to {path} failed: {e}")
            raise StudioAPIError(default_error) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            error = data.get("error") if isinstance(data, dict) else None
            logger.warning(f"⚠️ {path} returned {response.status_code}: {error or 'no error body'}")
            raise StudioAPIError(error or default_error, status_code=response.status_code)

        return data if isinstance(data, dict) else {}
