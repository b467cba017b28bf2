"""
TierSeal Event Bus — Public API
=================================
The ledger commits. The event bus tells subscribers afterwards.
"""

from core.events.dispatcher import DispatchReport, SubscriberFailure, dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    UnknownSubscriberError,
)
from core.events.notification import Notification
from core.events.registry import Subscription, SubscriberRegistry

__all__ = [
    "dispatch",
    "DispatchReport",
    "SubscriberFailure",
    "Notification",
    "Subscription",
    "SubscriberRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "UnknownSubscriberError",
]
