"""
TierSeal Event Store — Persistence Service
============================================
The controlled write paths for the notification log:
    persist_notification(notification)
    persist_notifications(notifications)   (one unit of work, one transaction)

Write flow (NON-NEGOTIABLE):
    1. Idempotency check (event_id not yet stored)
    2. Resolve chain head inside an atomic block (row lock)
    3. Compute event_hash over the envelope + previous hash
    4. Insert

Any failure raises NotificationLogError. The ledger calls the batch form from
inside a unit of work, so a raise aborts the whole operation.

This service does NOT:
- Dispatch to subscribers
- Interpret payload meaning
- Retry on failure
- Swallow errors silently
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from core.event_store.hashing.hasher import GENESIS_HASH, compute_event_hash
from core.event_store.models import NotificationRecord
from core.event_store.persistence.repository import (
    get_chain_head,
    record_exists,
    save_record,
)

logger = logging.getLogger("tierseal.event_store")


class NotificationLogError(Exception):
    """A notification could not be appended to the durable log."""

    def __init__(self, event_id, message: str):
        self.event_id = event_id
        super().__init__(f"Notification {event_id}: {message}")


def _envelope(notification) -> dict:
    return {
        "event_id": str(notification.event_id),
        "event_type": notification.event_type,
        "program_id": notification.program_id,
        "actor_id": notification.actor_id,
        "payload": dict(notification.payload),
    }


def persist_notification(notification) -> NotificationRecord:
    """
    Append one committed notification to the hash-chained log.

    Accepts any object exposing the core.events.Notification fields.
    """
    if record_exists(notification.event_id):
        raise NotificationLogError(notification.event_id, "already persisted.")

    try:
        with transaction.atomic():
            head = get_chain_head(lock=True)
            previous_hash = GENESIS_HASH if head is None else head.event_hash
            sequence = 1 if head is None else head.sequence + 1
            record = save_record({
                "event_id": notification.event_id,
                "sequence": sequence,
                "event_type": notification.event_type,
                "event_version": notification.event_version,
                "program_id": notification.program_id,
                "actor_id": notification.actor_id,
                "payload": dict(notification.payload),
                "created_at": notification.created_at,
                "previous_event_hash": previous_hash,
                "event_hash": compute_event_hash(_envelope(notification), previous_hash),
            })
    except IntegrityError as exc:
        raise NotificationLogError(
            notification.event_id, f"chain append conflict: {exc}"
        ) from exc

    logger.debug(
        f"Notification persisted: {record.event_type} #{record.sequence}"
    )
    return record


def verify_chain() -> bool:
    """Recompute every hash in sequence order. False on the first break."""
    previous_hash = GENESIS_HASH
    for record in NotificationRecord.objects.order_by("sequence").iterator():
        if record.previous_event_hash != previous_hash:
            logger.error(
                f"Notification chain broken at #{record.sequence}: "
                f"previous hash mismatch"
            )
            return False
        expected = compute_event_hash(record.hashed_envelope(), previous_hash)
        if record.event_hash != expected:
            logger.error(
                f"Notification chain broken at #{record.sequence}: "
                f"event hash mismatch"
            )
            return False
        previous_hash = record.event_hash
    return True


def persist_notifications(notifications) -> tuple[NotificationRecord, ...]:
    """
    Append one unit of work's notifications in a single transaction.

    This is the ledger's durable hook: if any notification fails to
    persist, none of the batch is kept.
    """
    with transaction.atomic():
        return tuple(persist_notification(n) for n in notifications)
