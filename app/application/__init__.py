"""
Application layer - Client-side automation workflows.

Orchestrates the automation store and the studio API. No direct
dependencies on FastAPI.
"""
from app.application.automation_builder import AutomationBuilder, AutomationBuilderError

__all__ = ["AutomationBuilder", "AutomationBuilderError"]
