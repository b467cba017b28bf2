"""
TierSeal Event Store Persistence public API.
"""

from core.event_store.persistence.repository import load_notifications
from core.event_store.persistence.service import (
    NotificationLogError,
    persist_notification,
    persist_notifications,
    verify_chain,
)

__all__ = [
    "NotificationLogError",
    "load_notifications",
    "persist_notification",
    "persist_notifications",
    "verify_chain",
]
