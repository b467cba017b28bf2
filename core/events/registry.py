"""
TierSeal Event Bus — Subscriber Registry
==========================================
Decides which handlers hear which committed notifications.

Subscriptions are either exact (`tier_discount.policy.set.v1`) or
engine-wide (`tier_discount.*`), the latter for audit sinks that want
every notification an engine emits. Exact subscribers are called
before engine-wide ones, each group in registration order.

Rules:
- Exact types need at least engine.domain.action segments
- A handler may subscribe to a given pattern only once
- In-memory only, guarded by a lock
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    UnknownSubscriberError,
)

logger = logging.getLogger("tierseal.events")

WILDCARD_SUFFIX = ".*"


@dataclass(frozen=True)
class Subscription:
    pattern: str
    handler: Callable
    subscriber_name: str

    @property
    def handler_name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))


def _segments_ok(segments: list[str], minimum: int) -> bool:
    return len(segments) >= minimum and all(segments)


def validate_pattern(pattern: str) -> str:
    """Return the normalized pattern or raise InvalidEventTypeFormat."""
    if not isinstance(pattern, str) or not pattern.strip():
        raise InvalidEventTypeFormat(pattern if isinstance(pattern, str) else "")
    pattern = pattern.strip()
    if pattern.endswith(WILDCARD_SUFFIX):
        engine = pattern[: -len(WILDCARD_SUFFIX)]
        if not engine or "." in engine:
            raise InvalidEventTypeFormat(pattern)
        return pattern
    if not _segments_ok(pattern.split("."), 3):
        raise InvalidEventTypeFormat(pattern)
    return pattern


class SubscriberRegistry:
    """Exact and engine-wide subscriptions, keyed by pattern."""

    def __init__(self):
        self._by_pattern: dict[str, list[Subscription]] = {}
        self._lock = Lock()

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_name: str,
    ) -> Subscription:
        """
        Subscribe `handler` to an exact event type or to `<engine>.*`.

        Raises:
            InvalidEventTypeFormat:   Pattern is malformed
            DuplicateSubscriberError: Handler already holds this pattern
            EventBusError:            Handler is not callable
        """
        pattern = validate_pattern(event_type)
        if not callable(handler):
            raise EventBusError(f"Handler must be callable, got {type(handler)}.")

        subscription = Subscription(pattern, handler, subscriber_name)
        with self._lock:
            entries = self._by_pattern.setdefault(pattern, [])
            if any(s.handler is handler for s in entries):
                raise DuplicateSubscriberError(pattern, subscription.handler_name)
            entries.append(subscription)

        logger.info(
            f"Subscriber registered: {subscription.handler_name} → {pattern} "
            f"(subscriber: {subscriber_name})"
        )
        return subscription

    def unregister_subscriber(self, event_type: str, handler: Callable) -> None:
        pattern = validate_pattern(event_type)
        with self._lock:
            entries = self._by_pattern.get(pattern, [])
            remaining = [s for s in entries if s.handler is not handler]
            if len(remaining) == len(entries):
                name = getattr(handler, "__qualname__", repr(handler))
                raise UnknownSubscriberError(pattern, name)
            if remaining:
                self._by_pattern[pattern] = remaining
            else:
                del self._by_pattern[pattern]
        logger.info(f"Subscriber removed from {pattern}")

    def get_subscribers(self, event_type: str) -> list[Subscription]:
        """Exact matches first, then the engine-wide pattern. Empty when none."""
        wildcard = event_type.split(".", 1)[0] + WILDCARD_SUFFIX
        with self._lock:
            return (
                list(self._by_pattern.get(event_type, ()))
                + list(self._by_pattern.get(wildcard, ()))
            )

    def has_subscribers(self, event_type: str) -> bool:
        return bool(self.get_subscribers(event_type))

    def subscriber_count(self, event_type: str) -> int:
        return len(self.get_subscribers(event_type))

    def patterns(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._by_pattern)
