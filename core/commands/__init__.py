"""
TierSeal Command Layer — Public API
=====================================
Every mutating operation begins as a validated request.
Every denied request carries a structured RejectionReason.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]
