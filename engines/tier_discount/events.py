"""
TierSeal Tier Discount Engine — Event Types
=============================================
Notifications carry identifiers and opaque handles only.
No ciphertext material, no cleartext, ever.
"""

# ── Event Types ───────────────────────────────────────────────

POLICY_SET_V1 = "tier_discount.policy.set.v1"
PROGRAM_REMOVED_V1 = "tier_discount.program.removed.v1"
RESULT_EVALUATED_V1 = "tier_discount.result.evaluated.v1"
OWNERSHIP_TRANSFERRED_V1 = "tier_discount.ownership.transferred.v1"

ALL_EVENT_TYPES = (
    POLICY_SET_V1,
    PROGRAM_REMOVED_V1,
    RESULT_EVALUATED_V1,
    OWNERSHIP_TRANSFERRED_V1,
)


# ── Payload Builders ──────────────────────────────────────────

def _policy_set(*, program_id, **_):
    return {"program_id": program_id}


def _program_removed(*, program_id, **_):
    return {"program_id": program_id}


def _result_evaluated(*, principal, program_id, score_handle, discount_handle, **_):
    return {
        "principal": principal,
        "program_id": program_id,
        "score_handle": score_handle,
        "discount_handle": discount_handle,
    }


def _ownership_transferred(*, previous_admin, new_admin, **_):
    return {
        "previous_admin": previous_admin,
        "new_admin": new_admin,
    }


PAYLOAD_BUILDERS = {
    POLICY_SET_V1: _policy_set,
    PROGRAM_REMOVED_V1: _program_removed,
    RESULT_EVALUATED_V1: _result_evaluated,
    OWNERSHIP_TRANSFERRED_V1: _ownership_transferred,
}

COMMAND_TO_EVENT_TYPE = {
    "tier_discount.policy.set.request": POLICY_SET_V1,
    "tier_discount.program.remove.request": PROGRAM_REMOVED_V1,
    "tier_discount.score.submit.request": RESULT_EVALUATED_V1,
    "tier_discount.ownership.transfer.request": OWNERSHIP_TRANSFERRED_V1,
}


def build_payload(event_type: str, **fields) -> dict:
    builder = PAYLOAD_BUILDERS.get(event_type)
    if builder is None:
        raise KeyError(f"No payload builder for: {event_type}")
    return builder(**fields)
