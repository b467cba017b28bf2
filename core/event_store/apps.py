"""
TierSeal Core — Event Store App Configuration
===============================================
The durable notification log. Every committed notification can be
appended here as an insert-only, hash-chained row.

This app does NOT:
- Interpret notification meaning
- Hold registry or result state
- Dispatch notifications (that is core.events responsibility)
"""

from django.apps import AppConfig


class EventStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.event_store"
    label = "event_store"
    verbose_name = "TierSeal Notification Log"
