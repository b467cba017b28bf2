"""
TierSeal Ledger — Atomic Units of Work
========================================
The ledger totally orders mutating calls and commits each one as a
single unit. It is the only place state is rolled back; engine code
never undoes its own writes.

Unit-of-work flow (NON-NEGOTIABLE):
    1. Acquire the ledger lock (serializes every unit)
    2. Snapshot every enlisted participant
    3. Run the operation body; it records notifications
    4. Hand the whole batch of notifications to the durable hook (if configured)
    5. On ANY failure in 3–4 → restore every snapshot, re-raise
    6. Append notifications to the in-memory log
    7. Release the lock, then dispatch to subscribers (AFTER commit only)

A unit opened while another is active on the same thread joins the
outer unit; only the outermost unit commits or rolls back.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Protocol, Tuple

from core.events.dispatcher import dispatch
from core.events.notification import Notification
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("tierseal.ledger")


class Transactional(Protocol):
    """State holder that can be captured and restored by the ledger."""

    def snapshot(self) -> Any:
        ...  # pragma: no cover

    def restore(self, state: Any) -> None:
        ...  # pragma: no cover


class UnitOfWork:
    """Collects the notifications produced by one atomic operation."""

    def __init__(self) -> None:
        self._notifications: List[Notification] = []

    def record(self, notification: Notification) -> None:
        self._notifications.append(notification)

    @property
    def notifications(self) -> Tuple[Notification, ...]:
        return tuple(self._notifications)


class Ledger:
    """
    Serializing, all-or-nothing commit coordinator.

    Args:
        subscriber_registry:   Receives committed notifications.
        persist_notifications: Durable hook called once inside the unit with
                               its notifications, in record order. It must
                               store all of them or none; raising aborts
                               the unit.
    """

    def __init__(
        self,
        *,
        subscriber_registry: Optional[SubscriberRegistry] = None,
        persist_notifications: Optional[
            Callable[[Tuple[Notification, ...]], Any]
        ] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._participants: List[Tuple[str, Transactional]] = []
        self._active: Optional[UnitOfWork] = None
        self._log: List[Notification] = []
        self._subscribers = subscriber_registry
        self._persist = persist_notifications

    def enlist(self, name: str, participant: Transactional) -> None:
        """Register a state holder to be snapshotted by every unit."""
        with self._lock:
            if any(existing == name for existing, _ in self._participants):
                raise ValueError(f"Participant '{name}' is already enlisted.")
            self._participants.append((name, participant))
        logger.debug(f"Ledger participant enlisted: {name}")

    @property
    def participant_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self._participants)

    @property
    def in_unit(self) -> bool:
        return self._active is not None

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        with self._lock:
            if self._active is not None:
                yield self._active
                return

            snapshots = [
                (name, participant, participant.snapshot())
                for name, participant in self._participants
            ]
            unit = UnitOfWork()
            self._active = unit
            try:
                yield unit
                if self._persist is not None and unit.notifications:
                    self._persist(unit.notifications)
            except BaseException as exc:
                for name, participant, state in reversed(snapshots):
                    participant.restore(state)
                logger.info(
                    f"Unit of work rolled back: {type(exc).__name__}: {exc}"
                )
                raise
            finally:
                self._active = None

            self._log.extend(unit.notifications)
            logger.debug(
                f"Unit of work committed with "
                f"{len(unit.notifications)} notification(s)"
            )

        if self._subscribers is not None:
            for notification in unit.notifications:
                dispatch(notification, self._subscribers)

    def notifications(self, event_type: Optional[str] = None) -> Tuple[Notification, ...]:
        """Committed notifications in commit order, optionally filtered by type."""
        with self._lock:
            if event_type is None:
                return tuple(self._log)
            return tuple(n for n in self._log if n.event_type == event_type)
