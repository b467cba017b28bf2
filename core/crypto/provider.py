"""
TierSeal Core Crypto — Provider Protocol
==========================================
The homomorphic primitives are an external capability. The core
never compares, selects or decrypts anything itself; it only calls
an injected CryptoProvider and stores the opaque results.

Value types:
    ExternalCiphertext — caller-supplied encrypted input, not yet imported
    Ciphertext         — imported or computed encrypted integer
    EncryptedBool      — encrypted comparison result
    Handle             — opaque exportable reference (hex string)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


# ══════════════════════════════════════════════════════════════
# HANDLES
# ══════════════════════════════════════════════════════════════

Handle = str

HANDLE_BYTES = 32
ZERO_HANDLE: Handle = "0x" + "00" * HANDLE_BYTES


def is_zero_handle(handle: Handle) -> bool:
    return handle == ZERO_HANDLE


# ══════════════════════════════════════════════════════════════
# CIPHERTEXT VALUE TYPES
# ══════════════════════════════════════════════════════════════

KIND_UINT64 = "euint64"
KIND_BOOL = "ebool"


@dataclass(frozen=True)
class ExternalCiphertext:
    """Encrypted input as submitted by a caller, before proof verification."""

    handle: Handle

    def __post_init__(self):
        if not self.handle or not isinstance(self.handle, str):
            raise ValueError("handle must be a non-empty string.")


@dataclass(frozen=True)
class Ciphertext:
    """An encrypted value the provider can operate on."""

    handle: Handle
    kind: str = KIND_UINT64

    def __post_init__(self):
        if not self.handle or not isinstance(self.handle, str):
            raise ValueError("handle must be a non-empty string.")


@dataclass(frozen=True)
class EncryptedBool(Ciphertext):
    kind: str = KIND_BOOL


# ══════════════════════════════════════════════════════════════
# PROVIDER PROTOCOL
# ══════════════════════════════════════════════════════════════

class CryptoProvider(Protocol):
    """
    External homomorphic capability consumed by the core.

    import_ciphertext raises core.errors.InvalidProof when the proof
    does not cover the external value or was issued to a different
    principal. Every successful import yields a fresh ciphertext, so
    grants on it never reach the caller's original input.
    """

    def import_ciphertext(
        self, external: ExternalCiphertext, proof: bytes, principal: str
    ) -> Ciphertext:
        ...  # pragma: no cover

    def compare_ge(self, left: Ciphertext, right: Ciphertext) -> EncryptedBool:
        ...  # pragma: no cover

    def select(
        self, condition: EncryptedBool, if_true: Ciphertext, if_false: Ciphertext
    ) -> Ciphertext:
        ...  # pragma: no cover

    def grant_access(self, ciphertext: Ciphertext, principal: str) -> None:
        ...  # pragma: no cover

    def export_handle(self, ciphertext: Ciphertext) -> Handle:
        ...  # pragma: no cover

    def zero(self) -> Ciphertext:
        ...  # pragma: no cover
