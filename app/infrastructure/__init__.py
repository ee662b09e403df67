"""
Infrastructure layer - Persistence for the client-side studio.

This layer contains:
- JSON file storage with localStorage semantics
- The automation store built on top of it
"""
from app.infrastructure.automation_store import AutomationStore, DuplicateAutomationError, STORAGE_KEY
from app.infrastructure.json_storage import JsonFileStorage

__all__ = ["AutomationStore", "DuplicateAutomationError", "JsonFileStorage", "STORAGE_KEY"]
