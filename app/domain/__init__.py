"""
Domain layer - Automation flows and their lifecycle rules.

No dependencies on infrastructure or frameworks beyond pydantic models.
"""
from app.domain.automation import (
    AutomationFlow,
    FlowStatus,
    GenerationRequest,
    InvalidTransitionError,
    Tone,
)

__all__ = [
    "AutomationFlow",
    "FlowStatus",
    "GenerationRequest",
    "InvalidTransitionError",
    "Tone",
]
