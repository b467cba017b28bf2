"""
TierSeal Core — Error Taxonomy
================================
Every precondition violation maps to exactly one error kind so
callers and tests can assert on cause.

All errors are terminal for the triggering operation: the unit of
work aborts and the ledger restores every enlisted participant.
No error is retried inside the core.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


class TierSealError(Exception):
    """Base error for all TierSeal operations."""

    default_code = "TIERSEAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        reason: Optional[RejectionReason] = None,
        policy_name: str = "core",
    ):
        if reason is None:
            reason = RejectionReason(
                code=self.default_code,
                message=message,
                policy_name=policy_name,
            )
        self.reason = reason
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.reason.code


class AuthorizationError(TierSealError):
    """Caller is not the required admin or principal."""

    default_code = ReasonCode.NOT_ADMIN


class InvalidArgument(TierSealError, ValueError):
    """Zero identifier, empty proof, null principal."""

    default_code = "INVALID_ARGUMENT"


class NotFound(TierSealError, LookupError):
    """Program absent when required."""

    default_code = ReasonCode.PROGRAM_NOT_FOUND


class InvalidProof(TierSealError):
    """Crypto provider rejected a ciphertext import."""

    default_code = ReasonCode.INVALID_PROOF


class ReentrancyError(TierSealError):
    """A mutating entry point was re-entered during its own execution."""

    default_code = ReasonCode.REENTRANT_CALL


# ══════════════════════════════════════════════════════════════
# REJECTION → ERROR MAPPING
# ══════════════════════════════════════════════════════════════

_ERROR_FOR_CODE = {
    ReasonCode.NOT_ADMIN: AuthorizationError,
    ReasonCode.INVALID_PROGRAM_ID: InvalidArgument,
    ReasonCode.EMPTY_PROOF: InvalidArgument,
    ReasonCode.INVALID_PRINCIPAL: InvalidArgument,
    ReasonCode.INVALID_TIER_COUNT: InvalidArgument,
    ReasonCode.INVALID_CIPHERTEXT: InvalidArgument,
    ReasonCode.PROGRAM_NOT_FOUND: NotFound,
    ReasonCode.INVALID_PROOF: InvalidProof,
    ReasonCode.REENTRANT_CALL: ReentrancyError,
}


def error_for_rejection(reason: RejectionReason) -> TierSealError:
    """Build the error instance that carries a policy rejection."""
    error_cls = _ERROR_FOR_CODE.get(reason.code, TierSealError)
    return error_cls(reason.message, reason=reason)


def raise_for_rejection(reason: Optional[RejectionReason]) -> None:
    """Raise the mapped error when a policy returned a rejection."""
    if reason is not None:
        raise error_for_rejection(reason)
