"""
Tests for WhatsApp Automation Studio

Tests are organized by functionality:
- api/: HTTP endpoint tests (generate, send, webhook, activity)
- test_automation_rules.py: Trigger matching and AUTOMATION_FLOWS parsing
- test_automation_flow.py: Flow model and status lifecycle
- test_automation_store.py / test_automation_builder.py: Client-side studio
"""
