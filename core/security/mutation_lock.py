"""
TierSeal Core Security — Mutation Lock
========================================
Re-entry guard for state-mutating entry points.

Usage:
    with lock.guard("submit"):
        # a nested guard() on the same lock raises ReentrancyError

The flag is released on every exit path, success or failure, so an
unexpected exception can never leave the lock held.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.errors import ReentrancyError

logger = logging.getLogger("tierseal.security")


class _Scope:
    def __init__(self, lock: "MutationLock", operation: str) -> None:
        self._lock = lock
        self._operation = operation

    def __enter__(self):
        self._lock._acquire(self._operation)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._lock._release()
        return False


class MutationLock:
    """Scoped non-reentrant flag, one per service instance."""

    def __init__(self) -> None:
        self._holder: Optional[str] = None

    @property
    def locked(self) -> bool:
        return self._holder is not None

    @property
    def holder(self) -> Optional[str]:
        return self._holder

    def guard(self, operation: str) -> _Scope:
        return _Scope(self, operation)

    def _acquire(self, operation: str) -> None:
        if self._holder is not None:
            logger.warning(
                f"Reentrant call to '{operation}' while '{self._holder}' is in flight"
            )
            raise ReentrancyError(
                f"Reentrant call to '{operation}' during '{self._holder}'.",
                reason=RejectionReason(
                    code=ReasonCode.REENTRANT_CALL,
                    message=(
                        f"Reentrant call to '{operation}' "
                        f"during '{self._holder}'."
                    ),
                    policy_name="mutation_lock",
                ),
            )
        self._holder = operation

    def _release(self) -> None:
        self._holder = None
