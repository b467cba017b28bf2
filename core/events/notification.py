"""
TierSeal Event Bus — Notification Envelope
============================================
A Notification is the observable record of one committed mutation.
It carries identifiers and opaque handles only, never cleartext.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Notification:
    """
    Fields:
        event_type: Namespaced type, engine.domain.action.vN
                    (e.g. 'tier_discount.policy.set.v1').
        payload:    JSON-serializable body.
        actor_id:   Principal whose call produced the notification.
        created_at: Timestamp from the injected clock.
        program_id: Program the notification concerns, if any.
        event_id:   Unique identifier.
    """

    event_type: str
    payload: Dict[str, Any]
    actor_id: str
    created_at: datetime
    program_id: Optional[int] = None
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if not self.event_type or not isinstance(self.event_type, str):
            raise ValueError("event_type must be a non-empty string.")
        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")

    @property
    def event_version(self) -> int:
        """Trailing '.vN' segment of event_type, 1 when absent."""
        last = self.event_type.rsplit(".", 1)[-1]
        if last.startswith("v") and last[1:].isdigit():
            return int(last[1:])
        return 1

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "event_version": self.event_version,
            "program_id": self.program_id,
            "actor_id": self.actor_id,
            "payload": dict(self.payload),
            "created_at": self.created_at.isoformat(),
        }
