"""
TierSeal Tier Discount Engine — Handle Exporter
=================================================
Read-only surface: converts stored ciphertexts into opaque handles
for off-chain decryption. It never compares, selects, decrypts or
grants anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from core.crypto.provider import ZERO_HANDLE, CryptoProvider, Handle
from core.errors import NotFound

from engines.tier_discount.registry import PolicyRegistry
from engines.tier_discount.results import ResultLedger


@dataclass(frozen=True)
class PolicyHandles:
    min_scores: Tuple[Handle, ...]
    discounts: Tuple[Handle, ...]

    def as_tuple(self) -> Tuple[Handle, ...]:
        """min_score_1..3 followed by discount_1..3."""
        return (*self.min_scores, *self.discounts)


@dataclass(frozen=True)
class ResultHandles:
    score_handle: Handle
    discount_handle: Handle
    decided: bool

    def __iter__(self):
        return iter((self.score_handle, self.discount_handle, self.decided))


EMPTY_RESULT = ResultHandles(ZERO_HANDLE, ZERO_HANDLE, False)


class HandleExporter:
    def __init__(
        self,
        provider: CryptoProvider,
        registry: PolicyRegistry,
        results: ResultLedger,
    ):
        self._provider = provider
        self._registry = registry
        self._results = results

    def policy_handles(self, program_id: int) -> PolicyHandles:
        policy = self._registry.get(program_id)
        if policy is None:
            raise NotFound(
                f"Program {program_id} is not configured.",
                policy_name="handle_exporter",
            )
        return PolicyHandles(
            min_scores=tuple(self._provider.export_handle(c) for c in policy.min_scores),
            discounts=tuple(self._provider.export_handle(c) for c in policy.discounts),
        )

    def result_handles(self, principal: str, program_id: int) -> ResultHandles:
        """Zero handles and decided=False when nothing was ever submitted."""
        result = self._results.get(principal, program_id)
        if result is None:
            return EMPTY_RESULT
        return ResultHandles(
            score_handle=self._provider.export_handle(result.score),
            discount_handle=self._provider.export_handle(result.discount),
            decided=result.decided,
        )

    def discount_handle(self, principal: str, program_id: int) -> Tuple[Handle, bool]:
        handles = self.result_handles(principal, program_id)
        return handles.discount_handle, handles.decided
