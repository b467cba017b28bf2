"""
TierSeal Command Layer — Rejection Model
==========================================
Structured rejection reasons for denied operations.

A rejection is NOT a notification. It is an explanation structure
attached to the error that aborts the unit of work.

Every rejection must be:
- Deterministic (same input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (reason_code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for operation rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'PROGRAM_NOT_FOUND').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        """Serialize for logs and audit tooling."""
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Authorization ─────────────────────────────────────────
    NOT_ADMIN = "NOT_ADMIN"

    # ── Arguments ─────────────────────────────────────────────
    INVALID_PROGRAM_ID = "INVALID_PROGRAM_ID"
    EMPTY_PROOF = "EMPTY_PROOF"
    INVALID_PRINCIPAL = "INVALID_PRINCIPAL"
    INVALID_TIER_COUNT = "INVALID_TIER_COUNT"
    INVALID_CIPHERTEXT = "INVALID_CIPHERTEXT"

    # ── Lookup ────────────────────────────────────────────────
    PROGRAM_NOT_FOUND = "PROGRAM_NOT_FOUND"

    # ── Crypto provider ───────────────────────────────────────
    INVALID_PROOF = "INVALID_PROOF"

    # ── Execution ─────────────────────────────────────────────
    REENTRANT_CALL = "REENTRANT_CALL"
