"""
WhatsApp Automation Studio - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from app.api import events, generate, send, webhooks
from app.config import Settings, settings
from app.services.activity_feed import ActivityFeed, periodic_heartbeat_task
from app.version import __version__
import asyncio
import logging
import re


# Custom logging filter to redact sensitive data
class SensitiveDataFilter(logging.Filter):
    """Filter to redact credentials from logs"""

    def filter(self, record):
        if hasattr(record, 'msg'):
            msg = str(record.msg)

            # Redact OpenAI API keys (sk-..., sk-proj-...)
            msg = re.sub(r'\bsk-[A-Za-z0-9_-]{16,}', '[OPENAI_KEY_REDACTED]', msg)

            # Redact Twilio account SIDs
            msg = re.sub(r'\bAC[0-9a-fA-F]{32}\b', '[ACCOUNT_SID_REDACTED]', msg)

            # Redact Twilio auth tokens in key/value representations
            msg = re.sub(
                r"(['\"]?auth_token['\"]?\s*[:=]\s*['\"]?)([0-9a-fA-F]{32})(['\"]?)",
                r"\1[REDACTED]\3",
                msg,
                flags=re.IGNORECASE
            )

            record.msg = msg
        return True

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Add filter to all loggers
for handler in logging.root.handlers:
    handler.addFilter(SensitiveDataFilter())

# Twilio's HTTP client logs full request URLs including the account SID
logging.getLogger('twilio.http_client').addFilter(SensitiveDataFilter())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown"""
    app_settings: Settings = app.state.settings

    # Startup
    logger.info("🚀 Starting WhatsApp Automation Studio")
    logger.info(f"📦 Version: {__version__}")
    logger.info(f"📝 Environment: {app_settings.environment}")
    logger.info(f"🤖 OpenAI configured: {app_settings.openai_configured}")
    logger.info(f"📱 Twilio configured: {app_settings.twilio_configured}")

    heartbeat_task = None
    if app_settings.activity_heartbeat_seconds > 0:
        heartbeat_task = asyncio.create_task(
            periodic_heartbeat_task(app.state.activity_feed, app_settings.activity_heartbeat_seconds)
        )
        logger.info("✅ Activity heartbeat task started")

    logger.info("🔗 Webhook endpoint: /api/webhook")

    yield

    # Shutdown
    logger.info("Shutting down...")

    if heartbeat_task is not None:
        heartbeat_task.cancel()
        try:
            await heartbeat_task
        except asyncio.CancelledError:
            logger.info("✅ Activity heartbeat task cancelled")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application around a settings instance"""
    app_settings = app_settings or settings

    app = FastAPI(
        title="WhatsApp Automation Studio",
        description="AI-generated WhatsApp auto-replies with Twilio test sends and webhook matching",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    app.state.settings = app_settings
    app.state.activity_feed = ActivityFeed()

    # ============================================
    # CORS Middleware Configuration
    # ============================================
    # Set CORS_ORIGINS env var as comma-separated list: "https://example.com,https://www.example.com"
    dev_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    production_origins = [
        origin.strip() for origin in app_settings.cors_origins.split(",") if origin.strip()
    ]
    allowed_origins = dev_origins + production_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies as 400 with the API's error shape"""
        logger.warning(f"Validation error for {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body."}
        )

    app.include_router(generate.router, prefix="/api", tags=["generate"])
    app.include_router(send.router, prefix="/api", tags=["send"])
    app.include_router(webhooks.router, prefix="/api", tags=["webhooks"])
    app.include_router(events.router, prefix="/api", tags=["activity"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "app": "WhatsApp Automation Studio",
            "version": __version__,
            "status": "running",
            "environment": app_settings.environment,
            "webhook_url": "/api/webhook"
        }

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.

        Reports whether each provider is configured; does not call them.
        """
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": app_settings.environment,
            "integrations": {
                "openai": app_settings.openai_configured,
                "twilio": app_settings.twilio_configured
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
