"""
FastAPI dependencies shared by the route modules.

Settings and clients live on ``app.state`` so handlers never read process
configuration directly. Tests swap any of these through
``app.dependency_overrides``.
"""
from typing import Optional

from fastapi import Depends, Request

from app.clients.openai_client import ReplyGenerator
from app.clients.twilio_client import WhatsAppClient
from app.config import Settings
from app.services.activity_feed import ActivityFeed


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_activity_feed(request: Request) -> ActivityFeed:
    return request.app.state.activity_feed


def get_reply_generator(
    request: Request,
    settings: Settings = Depends(get_settings)
) -> Optional[ReplyGenerator]:
    """Return the cached reply generator, or None when OpenAI is not configured"""
    if not settings.openai_configured:
        return None
    generator = getattr(request.app.state, "reply_generator", None)
    if generator is None:
        generator = ReplyGenerator.from_settings(settings)
        request.app.state.reply_generator = generator
    return generator


def get_whatsapp_client(
    request: Request,
    settings: Settings = Depends(get_settings)
) -> Optional[WhatsAppClient]:
    """Return the cached Twilio client, or None when credentials are missing"""
    if not settings.twilio_configured:
        return None
    client = getattr(request.app.state, "whatsapp_client", None)
    if client is None:
        client = WhatsAppClient.from_settings(settings)
        request.app.state.whatsapp_client = client
    return client
