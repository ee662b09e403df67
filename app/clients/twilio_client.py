"""
Twilio client for sending WhatsApp test messages.

The Twilio SDK is synchronous, so sends run in a worker thread to keep the
event loop free.
"""
import asyncio
import logging
from typing import Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from app.config import Settings

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


def normalize_whatsapp_address(address: str) -> str:
    """Prefix an address with 'whatsapp:' unless it already has it"""
    if address.startswith(WHATSAPP_PREFIX):
        return address
    return f"{WHATSAPP_PREFIX}{address}"


def mask_address(address: Optional[str]) -> str:
    """Mask the middle digits of a phone address for log output"""
    if not address:
        return "unknown"
    prefix = WHATSAPP_PREFIX if address.startswith(WHATSAPP_PREFIX) else ""
    number = address[len(prefix):]
    if len(number) <= 6:
        return f"{prefix}***"
    return f"{prefix}{number[:4]}***{number[-2:]}"


class WhatsAppAPIError(Exception):
    """Exception raised when a Twilio WhatsApp request fails"""
    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class WhatsAppClient:
    """
    Client for sending WhatsApp messages through Twilio.

    Usage:
        client = WhatsAppClient.from_settings(settings)
        sid = await client.send_message("+14155551234", "Hello!")
    """

    def __init__(
        self,
        rest_client: Client,
        from_number: str,
        logger_instance: logging.Logger = logger
    ):
        self._client = rest_client
        self._from_number = normalize_whatsapp_address(from_number)
        self._logger = logger_instance

    @classmethod
    def from_settings(cls, settings: Settings) -> "WhatsAppClient":
        """Build a client from settings (caller checks credentials are set)"""
        return cls(
            rest_client=Client(settings.twilio_account_sid, settings.twilio_auth_token),
            from_number=settings.twilio_whatsapp_from,
        )

    async def send_message(self, to: str, body: str) -> str:
        """
        Send a WhatsApp message.

        Args:
            to: Destination number, with or without the 'whatsapp:' prefix
            body: Message text

        Returns:
            Twilio message SID

        Raises:
            WhatsAppAPIError: If Twilio rejects the request or is unreachable
        """
        to_address = normalize_whatsapp_address(to)

        try:
            message = await asyncio.to_thread(
                self._client.messages.create,
                from_=self._from_number,
                to=to_address,
                body=body,
            )
        except TwilioRestException as e:
            self._logger.error(
                f"❌ Twilio rejected message to {mask_address(to_address)} - "
                f"status: {e.status}, code: {e.code}"
            )
            raise WhatsAppAPIError(
                f"Twilio API error: {e.msg}",
                status_code=e.status,
                code=e.code
            ) from e
        except Exception as e:
            self._logger.error(f"❌ Failed to reach Twilio for {mask_address(to_address)}: {e}")
            raise WhatsAppAPIError(f"Twilio request failed: {e}") from e

        self._logger.info(f"✅ WhatsApp message {message.sid} sent to {mask_address(to_address)}")
        return message.sid
