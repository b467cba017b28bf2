"""
TierSeal Event Store - Persistence Repository
===============================================
Low-level ORM helpers used by the persistence service.
"""

from __future__ import annotations

from typing import Optional

from core.event_store.models import NotificationRecord


def save_record(record_data: dict) -> NotificationRecord:
    """
    Persist one row via Django ORM.

    The caller (persistence service) owns chaining and transactional guards.
    """
    return NotificationRecord.objects.create(**record_data)


def record_exists(event_id) -> bool:
    return NotificationRecord.objects.filter(event_id=event_id).exists()


def get_chain_head(*, lock: bool = False) -> NotificationRecord | None:
    """Latest row by sequence. lock=True takes a row lock for chain checks."""
    query = NotificationRecord.objects.order_by("-sequence")
    if lock:
        query = query.select_for_update()
    return query.first()


def load_notifications(program_id: Optional[int] = None) -> tuple[dict, ...]:
    """Rows in commit order, optionally restricted to one program."""
    fields = (
        "event_id",
        "sequence",
        "event_type",
        "event_version",
        "program_id",
        "actor_id",
        "payload",
        "created_at",
        "previous_event_hash",
        "event_hash",
    )
    query = NotificationRecord.objects.order_by("sequence")
    if program_id is not None:
        query = query.filter(program_id=program_id)
    return tuple(dict(row) for row in query.values(*fields))
