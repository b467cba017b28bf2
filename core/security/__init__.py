"""
TierSeal Core Security — Public API
=====================================
Admin ownership guard and the re-entry mutation lock.
"""

from core.security.mutation_lock import MutationLock
from core.security.ownership import OwnershipGuard, principal_is_valid

__all__ = [
    "MutationLock",
    "OwnershipGuard",
    "principal_is_valid",
]
