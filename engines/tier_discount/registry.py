"""
TierSeal Tier Discount Engine — Policy Registry
=================================================
Per program: three encrypted minimum scores and three encrypted
discounts. A program's six slots are either all set or absent.

Threshold ordering is never validated. Non-monotonic programs are
legal; their meaning is fixed by the cascade order alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from core.crypto.provider import Ciphertext, CryptoProvider

from engines.tier_discount.evaluation import Tier

logger = logging.getLogger("tierseal.engine")


@dataclass(frozen=True)
class ProgramPolicy:
    min_scores: Tuple[Ciphertext, ...]
    discounts: Tuple[Ciphertext, ...]

    def __post_init__(self):
        if len(self.min_scores) != len(self.discounts):
            raise ValueError("min_scores and discounts must pair up.")

    @property
    def tiers(self) -> Tuple[Tier, ...]:
        """(threshold, discount) pairs in cascade order."""
        return tuple(
            Tier(min_score=m, discount=d)
            for m, d in zip(self.min_scores, self.discounts)
        )


class PolicyRegistry:
    """Encrypted program store. Mutated only through the admin-guarded service."""

    def __init__(self, provider: CryptoProvider, registry_principal: str):
        self._provider = provider
        self._registry_principal = registry_principal
        self._programs: Dict[int, ProgramPolicy] = {}

    def configure(self, request) -> ProgramPolicy:
        """
        Import all six external values against one proof, grant the
        registry standing rights, and replace any prior policy in full.

        Any import failure raises before the store is touched.
        """
        imported = []
        for external in (*request.min_scores, *request.discounts):
            ciphertext = self._provider.import_ciphertext(
                external, request.proof, request.actor_id
            )
            self._provider.grant_access(ciphertext, self._registry_principal)
            imported.append(ciphertext)

        half = len(request.min_scores)
        policy = ProgramPolicy(
            min_scores=tuple(imported[:half]),
            discounts=tuple(imported[half:]),
        )
        replaced = request.program_id in self._programs
        self._programs[request.program_id] = policy
        logger.info(
            f"Program {request.program_id} policy "
            f"{'replaced' if replaced else 'configured'}"
        )
        return policy

    def remove(self, program_id: int) -> None:
        del self._programs[program_id]
        logger.info(f"Program {program_id} removed")

    def exists(self, program_id: int) -> bool:
        return program_id in self._programs

    def get(self, program_id: int) -> Optional[ProgramPolicy]:
        return self._programs.get(program_id)

    def program_ids(self) -> Tuple[int, ...]:
        return tuple(sorted(self._programs))

    # ── Ledger participation ──────────────────────────────────

    def snapshot(self) -> Dict[int, ProgramPolicy]:
        return dict(self._programs)

    def restore(self, state: Dict[int, ProgramPolicy]) -> None:
        self._programs = state
