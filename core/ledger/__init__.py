"""
TierSeal Ledger — Public API
==============================
Serialized, all-or-nothing commit of every mutating operation.
"""

from core.ledger.unit_of_work import Ledger, Transactional, UnitOfWork

__all__ = [
    "Ledger",
    "Transactional",
    "UnitOfWork",
]
