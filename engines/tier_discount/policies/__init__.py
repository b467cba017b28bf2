"""
TierSeal Tier Discount Engine — Policies
==========================================
Precondition guards. Each returns None to allow or a
RejectionReason to deny; the service raises the mapped error.
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


def program_id_must_be_nonzero_policy(command) -> Optional[RejectionReason]:
    """Program identifiers are positive integers; zero is never a program."""
    if command.program_id <= 0:
        return RejectionReason(
            code=ReasonCode.INVALID_PROGRAM_ID,
            message=f"program_id must be a positive integer, got {command.program_id}.",
            policy_name="program_id_must_be_nonzero_policy",
        )
    return None


def proof_required_policy(command) -> Optional[RejectionReason]:
    """Every encrypted input must come with a non-empty proof."""
    if not command.proof:
        return RejectionReason(
            code=ReasonCode.EMPTY_PROOF,
            message="Input proof must be non-empty.",
            policy_name="proof_required_policy",
        )
    return None


def program_must_exist_policy(
    program_id: int,
    program_lookup=None,
) -> Optional[RejectionReason]:
    """The program must be configured at the time of the call."""
    if program_lookup is None:
        return None
    if not program_lookup(program_id):
        return RejectionReason(
            code=ReasonCode.PROGRAM_NOT_FOUND,
            message=f"Program {program_id} is not configured.",
            policy_name="program_must_exist_policy",
        )
    return None


def principal_required_policy(principal, field_name: str = "user") -> Optional[RejectionReason]:
    if not isinstance(principal, str) or not principal.strip():
        return RejectionReason(
            code=ReasonCode.INVALID_PRINCIPAL,
            message=f"{field_name} must be a non-empty identity.",
            policy_name="principal_required_policy",
        )
    return None
