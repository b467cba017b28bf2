"""
TierSeal — Tier Discount Engine Tests
=======================================
Policy registry, cascade evaluation, result ledger, handle export,
ownership, re-entry and atomicity, driven through TierDiscountService
with the in-memory mock provider.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.config.engine import EngineConfig
from core.crypto.mock import MockCryptoProvider
from core.crypto.provider import ZERO_HANDLE
from core.errors import (
    AuthorizationError,
    InvalidArgument,
    InvalidProof,
    NotFound,
    ReentrancyError,
)
from core.events.registry import SubscriberRegistry
from core.time.clock import FixedClock
from engines.tier_discount.events import (
    OWNERSHIP_TRANSFERRED_V1,
    POLICY_SET_V1,
    PROGRAM_REMOVED_V1,
    RESULT_EVALUATED_V1,
)
from engines.tier_discount.exporter import HandleExporter
from engines.tier_discount.registry import PolicyRegistry
from engines.tier_discount.results import ResultLedger
from engines.tier_discount.services import TierDiscountService

ADMIN = "admin-1"
ALICE = "alice"
BOB = "bob"
REGISTRY = "tierseal.registry"
NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

THRESHOLDS = (100, 200, 300)
DISCOUNTS = (500, 1000, 1500)


# ── Shared helpers ─────────────────────────────────────────────

def make_service(provider=None, **kwargs):
    provider = provider or MockCryptoProvider()
    svc = TierDiscountService(
        provider=provider,
        config=EngineConfig(initial_admin=ADMIN, registry_principal=REGISTRY),
        clock=FixedClock(NOW),
        **kwargs,
    )
    return svc, provider


def configure(svc, provider, program_id=1, thresholds=THRESHOLDS, discounts=DISCOUNTS,
              caller=ADMIN):
    enc = provider.encrypt_inputs(*thresholds, *discounts, principal=caller)
    svc.set_policy(caller, program_id, enc.values[:3], enc.values[3:], enc.proof)
    return enc


def submit(svc, provider, principal, score, program_id=1):
    enc = provider.encrypt_inputs(score, principal=principal)
    svc.submit(principal, program_id, enc[0], enc.proof)
    return enc


def decrypted_discount(svc, provider, principal, program_id=1):
    handles = svc.get_own_handles(principal, program_id)
    return provider.user_decrypt(handles.discount_handle, principal)


def expected_cascade(score, thresholds, discounts):
    m1, m2, m3 = thresholds
    d1, d2, d3 = discounts
    return d3 if score >= m3 else d2 if score >= m2 else d1 if score >= m1 else 0


# ══════════════════════════════════════════════════════════════
# POLICY REGISTRY
# ══════════════════════════════════════════════════════════════

class TestSetPolicy:
    def test_set_policy_marks_program_existing(self):
        svc, provider = make_service()
        assert svc.get_meta(1) is False
        configure(svc, provider)
        assert svc.get_meta(1) is True
        assert svc.program_ids() == (1,)

    def test_non_admin_rejected(self):
        svc, provider = make_service()
        with pytest.raises(AuthorizationError):
            configure(svc, provider, caller=ALICE)
        assert svc.get_meta(1) is False

    def test_authorization_checked_before_arguments(self):
        svc, provider = make_service()
        with pytest.raises(AuthorizationError):
            configure(svc, provider, program_id=0, caller=ALICE)

    def test_zero_program_id_rejected(self):
        svc, provider = make_service()
        with pytest.raises(InvalidArgument) as exc_info:
            configure(svc, provider, program_id=0)
        assert exc_info.value.code == "INVALID_PROGRAM_ID"
        assert svc.program_ids() == ()

    def test_negative_program_id_rejected(self):
        svc, provider = make_service()
        with pytest.raises(InvalidArgument):
            configure(svc, provider, program_id=-4)

    def test_empty_proof_rejected(self):
        svc, provider = make_service()
        enc = provider.encrypt_inputs(*THRESHOLDS, *DISCOUNTS, principal=ADMIN)
        with pytest.raises(InvalidArgument) as exc_info:
            svc.set_policy(ADMIN, 1, enc.values[:3], enc.values[3:], b"")
        assert exc_info.value.code == "EMPTY_PROOF"
        assert svc.get_meta(1) is False

    def test_wrong_tier_count_rejected(self):
        svc, provider = make_service()
        enc = provider.encrypt_inputs(100, 200, 500, 1000, principal=ADMIN)
        with pytest.raises(InvalidArgument):
            svc.set_policy(ADMIN, 1, enc.values[:2], enc.values[2:], enc.proof)

    def test_proof_for_other_inputs_rejected(self):
        svc, provider = make_service()
        enc = provider.encrypt_inputs(*THRESHOLDS, *DISCOUNTS, principal=ADMIN)
        other = provider.encrypt_inputs(7, principal=ADMIN)
        with pytest.raises(InvalidProof):
            svc.set_policy(ADMIN, 1, enc.values[:3], enc.values[3:], other.proof)
        assert svc.get_meta(1) is False

    def test_late_import_failure_leaves_no_grants(self):
        """Five imports succeed, the sixth fails: nothing is retained."""
        svc, provider = make_service()
        enc = provider.encrypt_inputs(*THRESHOLDS, *DISCOUNTS, principal=ADMIN)
        stranger = provider.encrypt_inputs(9, principal=ADMIN)
        discounts = (enc[3], enc[4], stranger[0])
        with pytest.raises(InvalidProof):
            svc.set_policy(ADMIN, 1, enc.values[:3], discounts, enc.proof)
        assert svc.get_meta(1) is False
        for external in enc.values:
            assert not provider.is_allowed(external.handle, REGISTRY)
        assert svc.ledger.notifications() == ()

    def test_registry_holds_standing_grants(self):
        svc, provider = make_service()
        configure(svc, provider)
        handles = svc.get_policy_handles(ADMIN, 1)
        for handle in handles.as_tuple():
            assert provider.is_allowed(handle, REGISTRY)
            assert not provider.is_allowed(handle, ADMIN)

    def test_set_policy_replaces_prior_policy_in_full(self):
        svc, provider = make_service()
        configure(svc, provider)
        first = svc.get_policy_handles(ADMIN, 1)
        configure(svc, provider, thresholds=(10, 20, 30), discounts=(1, 2, 3))
        second = svc.get_policy_handles(ADMIN, 1)
        assert set(first.as_tuple()).isdisjoint(second.as_tuple())

        submit(svc, provider, ALICE, 25)
        assert decrypted_discount(svc, provider, ALICE) == 2

    def test_policy_set_notification_carries_program_id_only(self):
        svc, provider = make_service()
        configure(svc, provider, program_id=7)
        (notification,) = svc.ledger.notifications(POLICY_SET_V1)
        assert notification.payload == {"program_id": 7}
        assert notification.program_id == 7
        assert notification.actor_id == ADMIN
        assert notification.created_at == NOW


class TestRemoveProgram:
    def test_remove_clears_program(self):
        svc, provider = make_service()
        configure(svc, provider)
        svc.remove_program(ADMIN, 1)
        assert svc.get_meta(1) is False
        assert svc.program_ids() == ()
        (notification,) = svc.ledger.notifications(PROGRAM_REMOVED_V1)
        assert notification.payload == {"program_id": 1}

    def test_remove_missing_program_not_found(self):
        svc, _ = make_service()
        with pytest.raises(NotFound):
            svc.remove_program(ADMIN, 1)

    def test_remove_requires_admin(self):
        svc, provider = make_service()
        configure(svc, provider)
        with pytest.raises(AuthorizationError):
            svc.remove_program(ALICE, 1)
        assert svc.get_meta(1) is True

    def test_submit_after_remove_not_found(self):
        svc, provider = make_service()
        configure(svc, provider)
        svc.remove_program(ADMIN, 1)
        with pytest.raises(NotFound):
            submit(svc, provider, ALICE, 250)

    def test_policy_handles_unavailable_after_remove(self):
        svc, provider = make_service()
        configure(svc, provider)
        svc.remove_program(ADMIN, 1)
        with pytest.raises(NotFound):
            svc.get_policy_handles(ADMIN, 1)

    def test_existing_grants_survive_removal(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        svc.remove_program(ADMIN, 1)
        assert decrypted_discount(svc, provider, ALICE) == 1000
        assert svc.get_own_handles(ALICE, 1).decided is True


class TestPolicyHandles:
    def test_admin_gets_six_handles(self):
        svc, provider = make_service()
        enc = configure(svc, provider)
        handles = svc.get_policy_handles(ADMIN, 1)
        assert len(handles.as_tuple()) == 6
        assert set(handles.as_tuple()).isdisjoint(e.handle for e in enc.values)
        decrypted = [provider.user_decrypt(h, REGISTRY) for h in handles.as_tuple()]
        assert decrypted == [*THRESHOLDS, *DISCOUNTS]

    def test_non_admin_rejected(self):
        svc, provider = make_service()
        configure(svc, provider)
        with pytest.raises(AuthorizationError):
            svc.get_policy_handles(ALICE, 1)

    def test_unconfigured_program_not_found(self):
        svc, _ = make_service()
        with pytest.raises(NotFound):
            svc.get_policy_handles(ADMIN, 3)

    def test_exporter_raises_not_found_directly(self):
        provider = MockCryptoProvider()
        exporter = HandleExporter(
            provider,
            PolicyRegistry(provider, REGISTRY),
            ResultLedger(provider, REGISTRY),
        )
        with pytest.raises(NotFound) as exc_info:
            exporter.policy_handles(3)
        assert exc_info.value.code == "PROGRAM_NOT_FOUND"


# ══════════════════════════════════════════════════════════════
# EVALUATION
# ══════════════════════════════════════════════════════════════

class TestScenario:
    @pytest.mark.parametrize("score, discount", [
        (250, 1000),
        (50, 0),
        (300, 1500),
        (100, 500),
        (199, 500),
        (200, 1000),
        (10_000, 1500),
        (0, 0),
    ])
    def test_basis_point_tiers(self, score, discount):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, score)
        assert decrypted_discount(svc, provider, ALICE) == discount

    def test_remove_then_submit_fails(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        svc.remove_program(ADMIN, 1)
        with pytest.raises(NotFound):
            submit(svc, provider, ALICE, 250)


class TestCascadeOrder:
    SCORES = (0, 50, 99, 100, 101, 150, 199, 200, 201, 250, 299, 300, 301, 1000)

    @pytest.mark.parametrize("thresholds", [
        (100, 200, 300),
        (300, 200, 100),
        (100, 300, 200),
        (200, 100, 300),
        (150, 150, 150),
    ])
    def test_matches_override_order(self, thresholds):
        discounts = (10, 20, 30)
        svc, provider = make_service()
        configure(svc, provider, thresholds=thresholds, discounts=discounts)
        for score in self.SCORES:
            submit(svc, provider, ALICE, score)
            assert decrypted_discount(svc, provider, ALICE) == expected_cascade(
                score, thresholds, discounts
            ), f"score={score} thresholds={thresholds}"

    def test_descending_thresholds_last_tier_wins(self):
        """m1 > m2 > m3: a score clearing every tier still gets d3."""
        svc, provider = make_service()
        configure(svc, provider, thresholds=(300, 200, 100), discounts=(1500, 1000, 500))
        submit(svc, provider, ALICE, 350)
        assert decrypted_discount(svc, provider, ALICE) == 500

    def test_unknown_program_not_found(self):
        svc, provider = make_service()
        with pytest.raises(NotFound):
            submit(svc, provider, ALICE, 10, program_id=42)

    def test_program_zero_not_found(self):
        svc, provider = make_service()
        with pytest.raises(NotFound):
            submit(svc, provider, ALICE, 10, program_id=0)

    def test_not_found_checked_before_proof(self):
        svc, provider = make_service()
        enc = provider.encrypt_inputs(10, principal=ALICE)
        with pytest.raises(NotFound):
            svc.submit(ALICE, 5, enc[0], b"")

    def test_empty_proof_rejected(self):
        svc, provider = make_service()
        configure(svc, provider)
        enc = provider.encrypt_inputs(10, principal=ALICE)
        with pytest.raises(InvalidArgument):
            svc.submit(ALICE, 1, enc[0], b"")
        assert svc.get_own_handles(ALICE, 1).decided is False

    def test_foreign_proof_rejected(self):
        svc, provider = make_service()
        configure(svc, provider)
        enc = provider.encrypt_inputs(10, principal=ALICE)
        other = provider.encrypt_inputs(20, principal=ALICE)
        with pytest.raises(InvalidProof):
            svc.submit(ALICE, 1, enc[0], other.proof)
        assert svc.get_own_handles(ALICE, 1).decided is False


# ══════════════════════════════════════════════════════════════
# RESULT LEDGER / HANDLE EXPORT
# ══════════════════════════════════════════════════════════════

class TestResultLedger:
    def test_nothing_submitted_returns_zero_handles(self):
        svc, provider = make_service()
        configure(svc, provider)
        score_handle, discount_handle, decided = svc.get_own_handles(ALICE, 1)
        assert score_handle == ZERO_HANDLE
        assert discount_handle == ZERO_HANDLE
        assert decided is False

    def test_submit_marks_decided(self):
        svc, provider = make_service()
        configure(svc, provider)
        enc = submit(svc, provider, ALICE, 250)
        handles = svc.get_own_handles(ALICE, 1)
        assert handles.decided is True
        assert handles.score_handle != enc[0].handle
        assert provider.user_decrypt(handles.score_handle, ALICE) == 250

    def test_resubmission_overwrites(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 50)
        first = svc.get_own_handles(ALICE, 1)
        assert first.decided is True
        assert decrypted_discount(svc, provider, ALICE) == 0

        submit(svc, provider, ALICE, 250)
        second = svc.get_own_handles(ALICE, 1)
        assert second.decided is True
        assert second.score_handle != first.score_handle
        assert second.discount_handle != first.discount_handle
        assert provider.user_decrypt(second.score_handle, ALICE) == 250
        assert decrypted_discount(svc, provider, ALICE) == 1000

    def test_results_partitioned_by_principal(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        submit(svc, provider, BOB, 50)
        assert decrypted_discount(svc, provider, ALICE) == 1000
        assert decrypted_discount(svc, provider, BOB) == 0

    def test_results_partitioned_by_program(self):
        svc, provider = make_service()
        configure(svc, provider, program_id=1)
        configure(svc, provider, program_id=2, discounts=(1, 2, 3))
        submit(svc, provider, ALICE, 250, program_id=2)
        assert svc.get_own_handles(ALICE, 1).decided is False
        assert decrypted_discount(svc, provider, ALICE, program_id=2) == 2

    def test_evaluated_notification_carries_handles(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        handles = svc.get_own_handles(ALICE, 1)
        (notification,) = svc.ledger.notifications(RESULT_EVALUATED_V1)
        assert notification.payload == {
            "principal": ALICE,
            "program_id": 1,
            "score_handle": handles.score_handle,
            "discount_handle": handles.discount_handle,
        }


class TestAccessScoping:
    def test_only_submitter_and_registry_may_decrypt(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        handles = svc.get_own_handles(ALICE, 1)
        for handle in (handles.score_handle, handles.discount_handle):
            assert provider.is_allowed(handle, ALICE)
            assert provider.is_allowed(handle, REGISTRY)
            assert not provider.is_allowed(handle, ADMIN)
            assert not provider.is_allowed(handle, BOB)
        with pytest.raises(AuthorizationError):
            provider.user_decrypt(handles.discount_handle, BOB)

    def test_admin_gets_handle_but_no_grant(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        handle, decided = svc.get_discount_handle_for(ADMIN, ALICE, 1)
        assert decided is True
        assert handle == svc.get_own_handles(ALICE, 1).discount_handle
        assert not provider.is_allowed(handle, ADMIN)
        with pytest.raises(AuthorizationError):
            provider.user_decrypt(handle, ADMIN)

    def test_discount_handle_for_unsubmitted_user(self):
        svc, provider = make_service()
        configure(svc, provider)
        assert svc.get_discount_handle_for(ADMIN, BOB, 1) == (ZERO_HANDLE, False)

    def test_discount_handle_for_requires_admin(self):
        svc, provider = make_service()
        configure(svc, provider)
        with pytest.raises(AuthorizationError):
            svc.get_discount_handle_for(BOB, ALICE, 1)

    def test_discount_handle_for_requires_user(self):
        svc, provider = make_service()
        with pytest.raises(InvalidArgument):
            svc.get_discount_handle_for(ADMIN, "", 1)

    def test_replayed_policy_proof_grants_nothing(self):
        svc, provider = make_service()
        enc = configure(svc, provider)
        with pytest.raises(InvalidProof):
            svc.submit(ALICE, 1, enc[0], enc.proof)
        assert not provider.is_allowed(enc[0].handle, ALICE)
        for handle in svc.get_policy_handles(ADMIN, 1).as_tuple():
            assert not provider.is_allowed(handle, ALICE)
        assert svc.get_own_handles(ALICE, 1).decided is False

    def test_replayed_score_proof_grants_nothing(self):
        svc, provider = make_service()
        configure(svc, provider)
        enc = submit(svc, provider, ALICE, 250)
        with pytest.raises(InvalidProof):
            svc.submit(BOB, 1, enc[0], enc.proof)
        alice = svc.get_own_handles(ALICE, 1)
        assert not provider.is_allowed(alice.score_handle, BOB)
        assert not provider.is_allowed(enc[0].handle, BOB)
        assert svc.get_own_handles(BOB, 1).decided is False

    def test_submitted_input_handle_stays_private(self):
        svc, provider = make_service()
        configure(svc, provider)
        enc = submit(svc, provider, ALICE, 250)
        handles = svc.get_own_handles(ALICE, 1)
        assert handles.score_handle != enc[0].handle
        assert not provider.is_allowed(enc[0].handle, ALICE)
        assert not provider.is_allowed(enc[0].handle, REGISTRY)


# ══════════════════════════════════════════════════════════════
# OWNERSHIP
# ══════════════════════════════════════════════════════════════

class TestOwnership:
    def test_transfer_takes_effect_immediately(self):
        svc, provider = make_service()
        svc.transfer_ownership(ADMIN, "admin-2")
        assert svc.owner == "admin-2"
        with pytest.raises(AuthorizationError):
            configure(svc, provider, caller=ADMIN)
        configure(svc, provider, caller="admin-2")
        assert svc.get_meta(1) is True

    def test_transfer_requires_admin(self):
        svc, _ = make_service()
        with pytest.raises(AuthorizationError):
            svc.transfer_ownership(ALICE, ALICE)
        assert svc.owner == ADMIN

    @pytest.mark.parametrize("new_admin", ["", "   ", None])
    def test_transfer_to_null_rejected(self, new_admin):
        svc, _ = make_service()
        with pytest.raises(InvalidArgument):
            svc.transfer_ownership(ADMIN, new_admin)
        assert svc.owner == ADMIN

    def test_transfer_to_registry_principal_rejected(self):
        svc, provider = make_service()
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        with pytest.raises(InvalidArgument) as exc_info:
            svc.transfer_ownership(ADMIN, REGISTRY)
        assert exc_info.value.code == "INVALID_PRINCIPAL"
        assert svc.owner == ADMIN
        with pytest.raises(AuthorizationError):
            svc.get_discount_handle_for(REGISTRY, ALICE, 1)
        assert svc.ledger.notifications(OWNERSHIP_TRANSFERRED_V1) == ()

    def test_transfer_notification(self):
        svc, _ = make_service()
        svc.transfer_ownership(ADMIN, "admin-2")
        (notification,) = svc.ledger.notifications(OWNERSHIP_TRANSFERRED_V1)
        assert notification.payload == {"previous_admin": ADMIN, "new_admin": "admin-2"}
        assert notification.program_id is None


# ══════════════════════════════════════════════════════════════
# RE-ENTRY AND ATOMICITY
# ══════════════════════════════════════════════════════════════

class ReentrantProvider(MockCryptoProvider):
    """Calls back into the service from inside the first comparison."""

    def __init__(self):
        super().__init__()
        self.callback = None

    def compare_ge(self, left, right):
        callback, self.callback = self.callback, None
        if callback is not None:
            callback()
        return super().compare_ge(left, right)


class TestReentrancy:
    def test_nested_submit_rejected_without_partial_state(self):
        provider = ReentrantProvider()
        svc, _ = make_service(provider=provider)
        configure(svc, provider)
        outer = provider.encrypt_inputs(250, principal=ALICE)
        inner = provider.encrypt_inputs(50, principal=BOB)
        provider.callback = lambda: svc.submit(BOB, 1, inner[0], inner.proof)

        with pytest.raises(ReentrancyError):
            svc.submit(ALICE, 1, outer[0], outer.proof)

        assert svc.get_own_handles(ALICE, 1).decided is False
        assert svc.get_own_handles(BOB, 1).decided is False
        assert not provider.is_allowed(outer[0].handle, ALICE)
        assert svc.ledger.notifications(RESULT_EVALUATED_V1) == ()

    def test_nested_admin_call_rejected(self):
        provider = ReentrantProvider()
        svc, _ = make_service(provider=provider)
        configure(svc, provider)
        provider.callback = lambda: svc.remove_program(ADMIN, 1)

        with pytest.raises(ReentrancyError):
            submit(svc, provider, ALICE, 250)
        assert svc.get_meta(1) is True

    def test_lock_released_after_failure(self):
        provider = ReentrantProvider()
        svc, _ = make_service(provider=provider)
        configure(svc, provider)
        inner = provider.encrypt_inputs(50, principal=BOB)
        provider.callback = lambda: svc.submit(BOB, 1, inner[0], inner.proof)
        with pytest.raises(ReentrancyError):
            submit(svc, provider, ALICE, 250)

        submit(svc, provider, ALICE, 250)
        assert decrypted_discount(svc, provider, ALICE) == 1000


class TestAtomicity:
    def test_subscribers_see_only_committed_notifications(self):
        received = []
        subscribers = SubscriberRegistry()
        subscribers.register_subscriber(POLICY_SET_V1, received.append, "audit")
        subscribers.register_subscriber(RESULT_EVALUATED_V1, received.append, "audit")
        svc, provider = make_service(subscriber_registry=subscribers)

        with pytest.raises(AuthorizationError):
            configure(svc, provider, caller=ALICE)
        assert received == []

        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        assert [n.event_type for n in received] == [POLICY_SET_V1, RESULT_EVALUATED_V1]

    def test_failing_subscriber_does_not_undo_commit(self):
        def broken(notification):
            raise RuntimeError("subscriber down")

        subscribers = SubscriberRegistry()
        subscribers.register_subscriber(POLICY_SET_V1, broken, "audit")
        svc, provider = make_service(subscriber_registry=subscribers)
        configure(svc, provider)
        assert svc.get_meta(1) is True

    def test_persistence_failure_aborts_operation(self):
        def refuse(notifications):
            raise RuntimeError("log unavailable")

        svc, provider = make_service(persist_notifications=refuse)
        enc = provider.encrypt_inputs(*THRESHOLDS, *DISCOUNTS, principal=ADMIN)
        with pytest.raises(RuntimeError, match="log unavailable"):
            svc.set_policy(ADMIN, 1, enc.values[:3], enc.values[3:], enc.proof)
        assert svc.get_meta(1) is False
        assert not provider.is_allowed(enc[0].handle, REGISTRY)
        assert svc.ledger.notifications() == ()

    def test_persisted_notifications_in_commit_order(self):
        persisted = []
        svc, provider = make_service(persist_notifications=persisted.extend)
        configure(svc, provider)
        submit(svc, provider, ALICE, 250)
        svc.remove_program(ADMIN, 1)
        assert [n.event_type for n in persisted] == [
            POLICY_SET_V1, RESULT_EVALUATED_V1, PROGRAM_REMOVED_V1,
        ]
        assert tuple(persisted) == svc.ledger.notifications()
