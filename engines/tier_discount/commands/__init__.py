"""
TierSeal Tier Discount Engine — Commands
==========================================
Frozen requests for every mutating operation.

Requests validate STRUCTURE only (types, tier counts, identities).
Ordered preconditions — admin, existence, non-zero id, proof present —
live in engines.tier_discount.policies so the service controls which
failure wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Tuple

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.engine import TIER_COUNT
from core.crypto.provider import ExternalCiphertext
from core.errors import InvalidArgument
from core.security.ownership import principal_is_valid


def _invalid(code: str, message: str, policy_name: str) -> InvalidArgument:
    return InvalidArgument(
        message,
        reason=RejectionReason(code=code, message=message, policy_name=policy_name),
    )


def _require_principal(value, field_name: str) -> None:
    if not principal_is_valid(value):
        raise _invalid(
            ReasonCode.INVALID_PRINCIPAL,
            f"{field_name} must be a non-empty identity.",
            "request_structure",
        )


def _require_program_id_type(program_id) -> None:
    if isinstance(program_id, bool) or not isinstance(program_id, int):
        raise _invalid(
            ReasonCode.INVALID_PROGRAM_ID,
            f"program_id must be an int, got {type(program_id).__name__}.",
            "request_structure",
        )


def _require_proof_type(proof) -> None:
    if not isinstance(proof, (bytes, bytearray)):
        raise _invalid(
            ReasonCode.EMPTY_PROOF,
            f"proof must be bytes, got {type(proof).__name__}.",
            "request_structure",
        )


def _require_tiers(values, field_name: str) -> None:
    if len(values) != TIER_COUNT:
        raise _invalid(
            ReasonCode.INVALID_TIER_COUNT,
            f"{field_name} must hold exactly {TIER_COUNT} values, got {len(values)}.",
            "request_structure",
        )
    for value in values:
        if not isinstance(value, ExternalCiphertext):
            raise _invalid(
                ReasonCode.INVALID_CIPHERTEXT,
                f"{field_name} entries must be ExternalCiphertext.",
                "request_structure",
            )


@dataclass(frozen=True)
class TransferOwnershipRequest:
    """Hand the admin role to a new identity."""
    command_type: ClassVar[str] = "tier_discount.ownership.transfer.request"

    actor_id: str
    new_admin: str

    def __post_init__(self):
        _require_principal(self.actor_id, "actor_id")


@dataclass(frozen=True)
class SetPolicyRequest:
    """Create or fully replace one program's three tiers."""
    command_type: ClassVar[str] = "tier_discount.policy.set.request"

    actor_id: str
    program_id: int
    min_scores: Tuple[ExternalCiphertext, ...]
    discounts: Tuple[ExternalCiphertext, ...]
    proof: bytes

    def __post_init__(self):
        _require_principal(self.actor_id, "actor_id")
        _require_program_id_type(self.program_id)
        object.__setattr__(self, "min_scores", tuple(self.min_scores))
        object.__setattr__(self, "discounts", tuple(self.discounts))
        _require_tiers(self.min_scores, "min_scores")
        _require_tiers(self.discounts, "discounts")
        _require_proof_type(self.proof)


@dataclass(frozen=True)
class RemoveProgramRequest:
    """Clear a program and release its six slots."""
    command_type: ClassVar[str] = "tier_discount.program.remove.request"

    actor_id: str
    program_id: int

    def __post_init__(self):
        _require_principal(self.actor_id, "actor_id")
        _require_program_id_type(self.program_id)


@dataclass(frozen=True)
class SubmitScoreRequest:
    """Evaluate an encrypted score against a program's tiers."""
    command_type: ClassVar[str] = "tier_discount.score.submit.request"

    actor_id: str
    program_id: int
    encrypted_score: ExternalCiphertext
    proof: bytes

    def __post_init__(self):
        _require_principal(self.actor_id, "actor_id")
        _require_program_id_type(self.program_id)
        if not isinstance(self.encrypted_score, ExternalCiphertext):
            raise _invalid(
                ReasonCode.INVALID_CIPHERTEXT,
                "encrypted_score must be an ExternalCiphertext.",
                "request_structure",
            )
        _require_proof_type(self.proof)
