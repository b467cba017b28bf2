"""
TierSeal Event Store — Hash Computation
=========================================
event_hash = SHA256(canonical_json(envelope) + previous_event_hash)

The hashed envelope covers event_id, event_type, program_id,
actor_id and payload, so tampering with any of them breaks the chain.
The first row uses GENESIS_HASH as previous_event_hash.
"""

import hashlib
import json
from typing import Any

GENESIS_HASH = "GENESIS"


def canonical_serialize(payload: Any) -> str:
    """
    Deterministic JSON: sorted keys, fixed separators, ASCII only,
    str() for UUIDs and datetimes.
    """
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def compute_event_hash(envelope: Any, previous_event_hash: str) -> str:
    """Return the 64-character lowercase hex SHA-256 chain digest."""
    hash_input = canonical_serialize(envelope) + previous_event_hash
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()
