"""Provider and API clients"""
from app.clients.openai_client import ReplyGenerator, GenerationError
from app.clients.twilio_client import WhatsAppClient, WhatsAppAPIError, normalize_whatsapp_address
from app.clients.studio_client import StudioAPIClient, StudioAPIError

__all__ = [
    "ReplyGenerator",
    "GenerationError",
    "WhatsAppClient",
    "WhatsAppAPIError",
    "normalize_whatsapp_address",
    "StudioAPIClient",
    "StudioAPIError",
]
