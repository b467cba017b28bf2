"""
TierSeal Tier Discount Engine — Cascade Evaluation
====================================================
The cascade is an ordered fold over (threshold, discount) pairs:

    acc = zero
    for tier in tiers:                      # tier 1, 2, 3 in this order
        ge  = score >= tier.min_score       # encrypted comparison
        acc = ge ? tier.discount : acc      # encrypted selection

Each step overrides the accumulator when its own condition holds,
whatever earlier steps decided. Tier 3 therefore has the final say,
then tier 2, then tier 1, then zero. This is NOT "highest satisfied
threshold wins" when thresholds are not increasing, and must not be
replaced by a max or priority scheme.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from core.crypto.provider import Ciphertext, CryptoProvider

logger = logging.getLogger("tierseal.engine")


@dataclass(frozen=True)
class Tier:
    min_score: Ciphertext
    discount: Ciphertext


def run_cascade(
    provider: CryptoProvider,
    score: Ciphertext,
    tiers: Sequence[Tier],
) -> Ciphertext:
    """Fold the tiers in order; returns the encrypted final discount."""
    acc = provider.zero()
    for tier in tiers:
        satisfied = provider.compare_ge(score, tier.min_score)
        acc = provider.select(satisfied, tier.discount, acc)
    return acc


@dataclass(frozen=True)
class Evaluation:
    score: Ciphertext
    discount: Ciphertext


class EvaluationEngine:
    """Imports a submitted score and runs the cascade against a program."""

    def __init__(self, provider: CryptoProvider, registry_principal: str):
        self._provider = provider
        self._registry_principal = registry_principal

    def evaluate(self, request, policy) -> Evaluation:
        score = self._provider.import_ciphertext(
            request.encrypted_score, request.proof, request.actor_id
        )
        self._provider.grant_access(score, self._registry_principal)
        self._provider.grant_access(score, request.actor_id)

        discount = run_cascade(self._provider, score, policy.tiers)
        logger.debug(
            f"Cascade evaluated for {request.actor_id} on program "
            f"{request.program_id} over {len(policy.tiers)} tiers"
        )
        return Evaluation(score=score, discount=discount)
