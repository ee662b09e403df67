"""Configuration management using environment variables"""
import logging
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class Settings:
    """
    Application settings.

    Built once at process start and handed to the FastAPI app, which exposes
    it to route handlers through the ``get_settings`` dependency.
    """

    def __init__(self):
        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development")

        # OpenAI (reply generation)
        self.openai_api_key = os.getenv("OPENAI_API_KEY", "").strip()
        self.openai_model = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
        self.openai_temperature = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
        self.openai_max_tokens = int(os.getenv("OPENAI_MAX_TOKENS", "500"))

        # Twilio (WhatsApp test sends)
        self.twilio_account_sid = os.getenv("TWILIO_ACCOUNT_SID", "").strip()
        self.twilio_auth_token = os.getenv("TWILIO_AUTH_TOKEN", "").strip()
        self.twilio_whatsapp_from = os.getenv("TWILIO_WHATSAPP_FROM", "").strip()

        # Raw JSON array of automation flows used by the inbound webhook.
        # Parsed on every webhook call, never cached.
        self.automation_flows = os.getenv("AUTOMATION_FLOWS", "")

        # Server configuration
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8000"))

        # CORS origins (comma-separated list)
        self.cors_origins = os.getenv("CORS_ORIGINS", "")

        # Activity feed heartbeat (seconds, 0 disables)
        self.activity_heartbeat_seconds = float(os.getenv("ACTIVITY_HEARTBEAT_SECONDS", "30"))

        # Client-side studio (CLI) configuration
        self.studio_api_url = os.getenv("STUDIO_API_URL", "http://localhost:8000")
        self.studio_store_path = os.getenv("STUDIO_STORE_PATH", "./automation_studio.json")

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        if self.environment != "production":
            self._warn_missing_credentials()

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def twilio_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_whatsapp_from)

    def _warn_missing_credentials(self) -> None:
        """Warn about missing credentials in development mode."""
        required_credentials = {
            "OPENAI_API_KEY": "Required for /api/generate. Get from: https://platform.openai.com/api-keys",
            "TWILIO_ACCOUNT_SID": "Required for /api/send. Get from the Twilio console.",
            "TWILIO_AUTH_TOKEN": "Required for /api/send. Get from the Twilio console.",
            "TWILIO_WHATSAPP_FROM": "Required for /api/send. Your Twilio sandbox or WhatsApp sender number.",
        }

        missing = [
            f"{key} - {desc}"
            for key, desc in required_credentials.items()
            if not getattr(self, key.lower(), "").strip()
        ]

        if missing:
            logger.warning(
                "⚠️  Missing configuration - the matching endpoints will return 500 until these are set:\n" +
                "\n".join(f"  - {config}" for config in missing) +
                "\n\nCopy .env.example to .env and fill in your credentials."
            )


# Global settings instance
settings = Settings()
