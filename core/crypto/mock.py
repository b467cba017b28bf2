"""
TierSeal Core Crypto — In-Memory Mock Provider
================================================
Plaintext-backed stand-in for a homomorphic co-processor, for tests
and local runs. It keeps cleartexts behind opaque handles, tracks the
access-control list, and binds input proofs to the handles they cover
and to the principal allowed to import them. Each import copies the
value under a fresh handle.

This is NOT encryption. Anyone holding the provider object can read
every value. It exists so the core can be exercised end to end.

Proof format:
    HMAC-SHA256(secret, principal || 0x00 || handle_1 || ... || handle_n)
        || handle_1 || ... || handle_n
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Dict, Set, Tuple

from core.crypto.provider import (
    HANDLE_BYTES,
    KIND_BOOL,
    KIND_UINT64,
    Ciphertext,
    EncryptedBool,
    ExternalCiphertext,
    Handle,
)
from core.errors import AuthorizationError, InvalidProof

UINT64_MAX = 2 ** 64 - 1
_MAC_BYTES = 32


@dataclass(frozen=True)
class EncryptedInput:
    """A batch of client-side encrypted values and the proof that covers them."""

    values: Tuple[ExternalCiphertext, ...]
    proof: bytes

    def __getitem__(self, index: int) -> ExternalCiphertext:
        return self.values[index]


class MockCryptoProvider:
    """Deterministic in-memory provider with an access-control list."""

    def __init__(self, secret: bytes = b"tierseal-mock-provider"):
        if not secret:
            raise ValueError("secret must be non-empty.")
        self._secret = secret
        self._counter = 0
        self._cleartexts: Dict[Handle, int] = {}
        self._kinds: Dict[Handle, str] = {}
        self._acl: Dict[Handle, Set[str]] = {}

    # ── Handle allocation ─────────────────────────────────────

    def _new_handle(self, value: int, kind: str) -> Handle:
        self._counter += 1
        digest = hashlib.sha256(
            self._secret + self._counter.to_bytes(8, "big")
        ).hexdigest()
        handle = "0x" + digest
        self._cleartexts[handle] = value
        self._kinds[handle] = kind
        return handle

    def _value_of(self, ciphertext: Ciphertext) -> int:
        try:
            return self._cleartexts[ciphertext.handle]
        except KeyError:
            raise ValueError(
                f"Unknown ciphertext handle: {ciphertext.handle}"
            ) from None

    def _mac(self, principal: str, body: bytes) -> bytes:
        bound = principal.encode("utf-8") + b"\x00" + body
        return hmac.new(self._secret, bound, hashlib.sha256).digest()

    # ── Client side ───────────────────────────────────────────

    def encrypt_inputs(self, *values: int, principal: str) -> EncryptedInput:
        """
        Encrypt cleartext integers for `principal` and produce one proof
        covering all of them. Only that principal can import them.
        """
        if not isinstance(principal, str) or not principal.strip():
            raise ValueError("principal must be a non-empty string.")
        if not values:
            raise ValueError("At least one value is required.")
        externals = []
        for value in values:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Expected int, got {type(value).__name__}.")
            if not 0 <= value <= UINT64_MAX:
                raise ValueError(f"Value {value} is outside the uint64 range.")
            externals.append(ExternalCiphertext(self._new_handle(value, KIND_UINT64)))
        body = b"".join(bytes.fromhex(e.handle[2:]) for e in externals)
        return EncryptedInput(values=tuple(externals), proof=self._mac(principal, body) + body)

    # ── CryptoProvider protocol ───────────────────────────────

    def import_ciphertext(
        self, external: ExternalCiphertext, proof: bytes, principal: str
    ) -> Ciphertext:
        if len(proof) <= _MAC_BYTES or (len(proof) - _MAC_BYTES) % HANDLE_BYTES:
            raise InvalidProof("Malformed input proof.", policy_name="import_ciphertext")
        mac, body = proof[:_MAC_BYTES], proof[_MAC_BYTES:]
        if not isinstance(principal, str) or not hmac.compare_digest(
            mac, self._mac(principal, body)
        ):
            raise InvalidProof(
                f"Input proof was not issued to {principal}.",
                policy_name="import_ciphertext",
            )
        covered = {
            "0x" + body[i:i + HANDLE_BYTES].hex()
            for i in range(0, len(body), HANDLE_BYTES)
        }
        if external.handle not in covered or external.handle not in self._cleartexts:
            raise InvalidProof(
                f"Proof does not cover handle {external.handle}.",
                policy_name="import_ciphertext",
            )
        kind = self._kinds[external.handle]
        return Ciphertext(self._new_handle(self._cleartexts[external.handle], kind), kind)

    def compare_ge(self, left: Ciphertext, right: Ciphertext) -> EncryptedBool:
        result = int(self._value_of(left) >= self._value_of(right))
        return EncryptedBool(self._new_handle(result, KIND_BOOL))

    def select(
        self, condition: EncryptedBool, if_true: Ciphertext, if_false: Ciphertext
    ) -> Ciphertext:
        chosen = if_true if self._value_of(condition) else if_false
        return Ciphertext(self._new_handle(self._value_of(chosen), chosen.kind), chosen.kind)

    def grant_access(self, ciphertext: Ciphertext, principal: str) -> None:
        self._value_of(ciphertext)
        self._acl.setdefault(ciphertext.handle, set()).add(principal)

    def export_handle(self, ciphertext: Ciphertext) -> Handle:
        return ciphertext.handle

    def zero(self) -> Ciphertext:
        return Ciphertext(self._new_handle(0, KIND_UINT64))

    # ── Access control / off-chain decryption ─────────────────

    def is_allowed(self, handle: Handle, principal: str) -> bool:
        return principal in self._acl.get(handle, ())

    def user_decrypt(self, handle: Handle, principal: str) -> int:
        """Off-chain decryption stand-in: only granted principals may read."""
        if not self.is_allowed(handle, principal):
            raise AuthorizationError(
                f"{principal} has no decryption grant for {handle}.",
                policy_name="user_decrypt",
            )
        return self._cleartexts[handle]

    # ── Ledger participation ──────────────────────────────────

    def snapshot(self) -> dict:
        return {
            "counter": self._counter,
            "cleartexts": dict(self._cleartexts),
            "kinds": dict(self._kinds),
            "acl": {h: set(p) for h, p in self._acl.items()},
        }

    def restore(self, state: dict) -> None:
        self._counter = state["counter"]
        self._cleartexts = state["cleartexts"]
        self._kinds = state["kinds"]
        self._acl = state["acl"]
