"""
Services package for runtime helpers.
"""
from app.services.activity_feed import ActivityFeed, periodic_heartbeat_task

__all__ = ['ActivityFeed', 'periodic_heartbeat_task']
