"""
TierSeal Core Security — Ownership Guard
==========================================
Single privileged principal ("admin"). Every policy-mutating
operation checks the caller against the current admin.

The guard holds mutable state and is enlisted in the ledger, so a
transfer inside an aborted unit of work is rolled back with it.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason

logger = logging.getLogger("tierseal.security")


def principal_is_valid(principal) -> bool:
    return isinstance(principal, str) and bool(principal.strip())


class OwnershipGuard:
    """Current admin identity and the admin-only check."""

    def __init__(self, initial_admin: str, registry_principal: Optional[str] = None) -> None:
        if not principal_is_valid(initial_admin):
            raise ValueError("initial_admin must be a non-empty string.")
        if initial_admin == registry_principal:
            raise ValueError("initial_admin must differ from the registry principal.")
        self._admin = initial_admin
        self._registry_principal = registry_principal

    @property
    def admin(self) -> str:
        return self._admin

    def check_admin(self, caller: str) -> Optional[RejectionReason]:
        """Return a rejection unless caller is the current admin."""
        if caller != self._admin:
            return RejectionReason(
                code=ReasonCode.NOT_ADMIN,
                message=f"Caller '{caller}' is not the admin.",
                policy_name="admin_only_policy",
            )
        return None

    def check_new_admin(self, new_admin) -> Optional[RejectionReason]:
        """The admin role never goes to an empty identity or to the registry itself."""
        if not principal_is_valid(new_admin):
            return RejectionReason(
                code=ReasonCode.INVALID_PRINCIPAL,
                message="New admin must be a non-empty identity.",
                policy_name="new_admin_required_policy",
            )
        if new_admin == self._registry_principal:
            return RejectionReason(
                code=ReasonCode.INVALID_PRINCIPAL,
                message="The registry principal cannot hold the admin role.",
                policy_name="new_admin_not_registry_policy",
            )
        return None

    def transfer(self, new_admin: str) -> str:
        """Replace the admin. Caller checks happen before this. Returns the previous admin."""
        previous, self._admin = self._admin, new_admin
        logger.info(f"Ownership transferred: {previous} → {new_admin}")
        return previous

    # ── Ledger participation ──────────────────────────────────

    def snapshot(self) -> str:
        return self._admin

    def restore(self, state: str) -> None:
        self._admin = state
