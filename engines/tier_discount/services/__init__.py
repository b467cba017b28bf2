"""
TierSeal Tier Discount Engine — Service Layer
===============================================
Public operations over the encrypted policy registry, the cascade
evaluation engine and the result ledger.

Every mutating operation:
    1. Opens one ledger unit of work (serializes callers)
    2. Acquires the MutationLock (re-entry → ReentrancyError)
    3. Runs ordered policies; the first rejection raises
    4. Mutates state through the crypto provider
    5. Records exactly one notification

Any raise aborts the unit and the ledger restores every participant.
Notifications reach subscribers only after commit.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence, Tuple

from core.config.engine import EngineConfig
from core.crypto.provider import CryptoProvider, ExternalCiphertext, Handle
from core.errors import raise_for_rejection
from core.events.notification import Notification
from core.events.registry import SubscriberRegistry
from core.ledger.unit_of_work import Ledger, UnitOfWork
from core.security.mutation_lock import MutationLock
from core.security.ownership import OwnershipGuard
from core.time.clock import Clock, SystemClock

from engines.tier_discount.commands import (
    RemoveProgramRequest,
    SetPolicyRequest,
    SubmitScoreRequest,
    TransferOwnershipRequest,
)
from engines.tier_discount.evaluation import EvaluationEngine
from engines.tier_discount.events import COMMAND_TO_EVENT_TYPE, build_payload
from engines.tier_discount.exporter import HandleExporter, PolicyHandles, ResultHandles
from engines.tier_discount.policies import (
    principal_required_policy,
    program_id_must_be_nonzero_policy,
    program_must_exist_policy,
    proof_required_policy,
)
from engines.tier_discount.registry import PolicyRegistry
from engines.tier_discount.results import ResultLedger

logger = logging.getLogger("tierseal.engine")


class TierDiscountService:
    """Confidential tier evaluation. All state mutations produce notifications."""

    def __init__(
        self,
        *,
        provider: CryptoProvider,
        config: EngineConfig,
        clock: Optional[Clock] = None,
        subscriber_registry: Optional[SubscriberRegistry] = None,
        persist_notifications: Optional[
            Callable[[Tuple[Notification, ...]], Any]
        ] = None,
        ledger: Optional[Ledger] = None,
    ):
        self._provider = provider
        self._config = config
        self._clock = clock or SystemClock()
        self._lock = MutationLock()
        self._ledger = ledger or Ledger(
            subscriber_registry=subscriber_registry,
            persist_notifications=persist_notifications,
        )

        self._ownership = OwnershipGuard(config.initial_admin, config.registry_principal)
        self._registry = PolicyRegistry(provider, config.registry_principal)
        self._results = ResultLedger(provider, config.registry_principal)
        self._engine = EvaluationEngine(provider, config.registry_principal)
        self._exporter = HandleExporter(provider, self._registry, self._results)

        self._ledger.enlist("ownership", self._ownership)
        self._ledger.enlist("policy_registry", self._registry)
        self._ledger.enlist("result_ledger", self._results)
        if hasattr(provider, "snapshot") and hasattr(provider, "restore"):
            self._ledger.enlist("crypto_provider", provider)

    # ── Internals ─────────────────────────────────────────────

    def _record(
        self,
        unit: UnitOfWork,
        command,
        *,
        program_id: Optional[int] = None,
        **fields,
    ) -> Notification:
        event_type = COMMAND_TO_EVENT_TYPE[command.command_type]
        notification = Notification(
            event_type=event_type,
            payload=build_payload(event_type, program_id=program_id, **fields),
            actor_id=command.actor_id,
            created_at=self._clock.now_utc(),
            program_id=program_id,
        )
        unit.record(notification)
        return notification

    def _require_admin(self, caller: str) -> None:
        raise_for_rejection(self._ownership.check_admin(caller))

    # ── Ownership ─────────────────────────────────────────────

    @property
    def owner(self) -> str:
        return self._ownership.admin

    def transfer_ownership(self, caller: str, new_admin: str) -> None:
        with self._ledger.unit_of_work() as unit, self._lock.guard("transfer_ownership"):
            self._require_admin(caller)
            raise_for_rejection(self._ownership.check_new_admin(new_admin))
            command = TransferOwnershipRequest(actor_id=caller, new_admin=new_admin)

            previous = self._ownership.transfer(command.new_admin)
            self._record(unit, command, previous_admin=previous, new_admin=command.new_admin)

    # ── Policy registry ───────────────────────────────────────

    def set_policy(
        self,
        caller: str,
        program_id: int,
        min_scores: Sequence[ExternalCiphertext],
        discounts: Sequence[ExternalCiphertext],
        proof: bytes,
    ) -> None:
        with self._ledger.unit_of_work() as unit, self._lock.guard("set_policy"):
            self._require_admin(caller)
            command = SetPolicyRequest(
                actor_id=caller,
                program_id=program_id,
                min_scores=tuple(min_scores),
                discounts=tuple(discounts),
                proof=proof,
            )
            raise_for_rejection(program_id_must_be_nonzero_policy(command))
            raise_for_rejection(proof_required_policy(command))

            self._registry.configure(command)
            self._record(unit, command, program_id=command.program_id)

    def remove_program(self, caller: str, program_id: int) -> None:
        with self._ledger.unit_of_work() as unit, self._lock.guard("remove_program"):
            self._require_admin(caller)
            command = RemoveProgramRequest(actor_id=caller, program_id=program_id)
            raise_for_rejection(
                program_must_exist_policy(command.program_id, self._registry.exists)
            )

            self._registry.remove(command.program_id)
            self._record(unit, command, program_id=command.program_id)

    def get_meta(self, program_id: int) -> bool:
        return self._registry.exists(program_id)

    def program_ids(self) -> Tuple[int, ...]:
        return self._registry.program_ids()

    def get_policy_handles(self, caller: str, program_id: int) -> PolicyHandles:
        self._require_admin(caller)
        raise_for_rejection(program_must_exist_policy(program_id, self._registry.exists))
        return self._exporter.policy_handles(program_id)

    # ── Evaluation ────────────────────────────────────────────

    def submit(
        self,
        caller: str,
        program_id: int,
        encrypted_score: ExternalCiphertext,
        proof: bytes,
    ) -> None:
        with self._ledger.unit_of_work() as unit, self._lock.guard("submit"):
            command = SubmitScoreRequest(
                actor_id=caller,
                program_id=program_id,
                encrypted_score=encrypted_score,
                proof=proof,
            )
            raise_for_rejection(
                program_must_exist_policy(command.program_id, self._registry.exists)
            )
            raise_for_rejection(proof_required_policy(command))

            policy = self._registry.get(command.program_id)
            evaluation = self._engine.evaluate(command, policy)
            self._results.record(
                command.actor_id, command.program_id,
                evaluation.score, evaluation.discount,
            )
            notification = self._record(
                unit, command,
                program_id=command.program_id,
                principal=command.actor_id,
                score_handle=self._provider.export_handle(evaluation.score),
                discount_handle=self._provider.export_handle(evaluation.discount),
            )
            logger.info(
                f"Program {command.program_id} evaluated for {command.actor_id} "
                f"(event_id: {notification.event_id})"
            )

    # ── Handle export ─────────────────────────────────────────

    def get_own_handles(self, caller: str, program_id: int) -> ResultHandles:
        return self._exporter.result_handles(caller, program_id)

    def get_discount_handle_for(
        self, caller: str, user: str, program_id: int
    ) -> Tuple[Handle, bool]:
        self._require_admin(caller)
        raise_for_rejection(principal_required_policy(user))
        return self._exporter.discount_handle(user, program_id)

    # ── Introspection ─────────────────────────────────────────

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def config(self) -> EngineConfig:
        return self._config
