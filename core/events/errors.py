"""
TierSeal Event Bus — Errors
=============================
Raised while managing subscriptions. Dispatch itself never raises
for a handler failure; see core.events.dispatcher.
"""


class EventBusError(Exception):
    """Base error for subscription management."""


class InvalidEventTypeFormat(EventBusError):
    """Pattern is neither engine.domain.action[.vN] nor <engine>.*"""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"'{event_type}' is not an engine.domain.action event type "
            f"or an <engine>.* pattern."
        )


class DuplicateSubscriberError(EventBusError):
    def __init__(self, pattern: str, handler_name: str):
        self.pattern = pattern
        self.handler_name = handler_name
        super().__init__(f"Handler '{handler_name}' already subscribed to '{pattern}'.")


class UnknownSubscriberError(EventBusError):
    def __init__(self, pattern: str, handler_name: str):
        self.pattern = pattern
        self.handler_name = handler_name
        super().__init__(f"Handler '{handler_name}' is not subscribed to '{pattern}'.")
