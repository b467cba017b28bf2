"""
TierSeal Event Bus — Dispatcher
=================================
Hands a committed notification to every matching subscriber.

The ledger calls this only after a unit of work has committed, so
nothing a subscriber does can undo or alter the mutation. Handlers
run one after another; a failing handler is logged and recorded in
the report, and the remaining handlers still run.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from core.events.registry import SubscriberRegistry

logger = logging.getLogger("tierseal.events")


@dataclass(frozen=True)
class SubscriberFailure:
    subscriber_name: str
    handler_name: str
    error_type: str
    error: str


@dataclass
class DispatchReport:
    event_type: str
    event_id: str
    notified: int = 0
    failures: list[SubscriberFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


def dispatch(notification: Any, registry: SubscriberRegistry) -> DispatchReport:
    """Deliver one notification. Never raises for handler errors."""
    report = DispatchReport(
        event_type=notification.event_type,
        event_id=str(notification.event_id),
    )

    subscriptions = registry.get_subscribers(notification.event_type)
    if not subscriptions:
        logger.debug(f"No subscribers for {report.event_type} ({report.event_id})")
        return report

    for subscription in subscriptions:
        try:
            subscription.handler(notification)
        except Exception as exc:
            report.failures.append(SubscriberFailure(
                subscriber_name=subscription.subscriber_name,
                handler_name=subscription.handler_name,
                error_type=type(exc).__name__,
                error=str(exc),
            ))
            logger.error(
                f"Subscriber {subscription.subscriber_name} failed on "
                f"{report.event_type} ({report.event_id}): {exc}",
                exc_info=True,
            )
        else:
            report.notified += 1

    logger.info(
        f"Dispatched {report.event_type} ({report.event_id}): "
        f"{report.notified} notified, {report.failed} failed"
    )
    return report
