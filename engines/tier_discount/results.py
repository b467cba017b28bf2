"""
TierSeal Tier Discount Engine — Result Ledger
===============================================
Per (principal, program): the submitted score, the computed discount
and the decided flag.

State machine:
    absent  → decided   (first submit)
    decided → decided   (every later submit overwrites both ciphertexts)

Nothing here deletes a result or clears `decided`. Removing a program
leaves its historical results and their grants in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from core.crypto.provider import Ciphertext, CryptoProvider

logger = logging.getLogger("tierseal.engine")

ResultKey = Tuple[str, int]


@dataclass(frozen=True)
class TierResult:
    score: Ciphertext
    discount: Ciphertext
    decided: bool = True


class ResultLedger:
    """Encrypted result store. Written only by the evaluation path."""

    def __init__(self, provider: CryptoProvider, registry_principal: str):
        self._provider = provider
        self._registry_principal = registry_principal
        self._results: Dict[ResultKey, TierResult] = {}

    def record(
        self,
        principal: str,
        program_id: int,
        score: Ciphertext,
        discount: Ciphertext,
    ) -> TierResult:
        """Overwrite the result wholesale and grant the principal both ciphertexts."""
        for ciphertext in (score, discount):
            self._provider.grant_access(ciphertext, self._registry_principal)
            self._provider.grant_access(ciphertext, principal)

        result = TierResult(score=score, discount=discount, decided=True)
        self._results[(principal, program_id)] = result
        return result

    def get(self, principal: str, program_id: int) -> Optional[TierResult]:
        return self._results.get((principal, program_id))

    def __len__(self) -> int:
        return len(self._results)

    # ── Ledger participation ──────────────────────────────────

    def snapshot(self) -> Dict[ResultKey, TierResult]:
        return dict(self._results)

    def restore(self, state: Dict[ResultKey, TierResult]) -> None:
        self._results = state
