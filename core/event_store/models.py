"""
TierSeal Event Store — Notification Log Model
===============================================
One row per committed notification.

RULES (NON-NEGOTIABLE):
- No deletes, no updates after persistence
- Every row has exactly one actor
- Hash-chain integrity via previous_event_hash → event_hash
- Payload holds identifiers and opaque handles only

This file contains NO business logic.
"""

import uuid

from django.db import models


class NotificationRecord(models.Model):
    """Insert-only persisted notification."""

    # ── Identity & Classification ─────────────────────────────
    event_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique notification identifier. Enforces idempotency.",
    )

    sequence = models.PositiveBigIntegerField(
        unique=True,
        help_text="Commit order, starting at 1.",
    )

    event_type = models.CharField(
        max_length=255,
        help_text="Namespaced type, e.g. tier_discount.policy.set.v1.",
    )

    event_version = models.PositiveSmallIntegerField()

    # ── Scope & Actor ─────────────────────────────────────────
    program_id = models.BigIntegerField(
        null=True,
        blank=True,
        help_text="Program the notification concerns. Null for ownership changes.",
    )

    actor_id = models.CharField(max_length=255)

    # ── Payload ───────────────────────────────────────────────
    payload = models.JSONField()

    # ── Temporal ──────────────────────────────────────────────
    created_at = models.DateTimeField(
        help_text="Timestamp from the engine clock.",
    )

    received_at = models.DateTimeField(auto_now_add=True)

    # ── Integrity (Hash-Chain) ────────────────────────────────
    previous_event_hash = models.CharField(max_length=64, unique=True)

    event_hash = models.CharField(max_length=64)

    class Meta:
        db_table = "tierseal_notification_log"
        ordering = ["sequence"]
        indexes = [
            models.Index(fields=["program_id", "sequence"], name="idx_ntf_program_seq"),
            models.Index(fields=["event_type"], name="idx_ntf_type"),
        ]

    # ── Immutability guards ───────────────────────────────────

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PermissionError(
                "Notification records are immutable. "
                "Cannot update a persisted notification."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Notification records are never deleted.")

    def hashed_envelope(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "program_id": self.program_id,
            "actor_id": self.actor_id,
            "payload": self.payload,
        }

    def __str__(self):
        return f"[{self.event_type}] #{self.sequence} {self.event_id}"
