"""
TierSeal Core Config — Public API
===================================
Engine identities and tier layout.
Doctrine: No hardcoded identities in engine logic.
"""

from core.config.engine import (
    DEFAULT_REGISTRY_PRINCIPAL,
    TIER_COUNT,
    EngineConfig,
    load_config,
)

__all__ = [
    "DEFAULT_REGISTRY_PRINCIPAL",
    "TIER_COUNT",
    "EngineConfig",
    "load_config",
]
