"""
TierSeal Core Config — Engine Configuration
=============================================
Doctrine: no hardcoded identities in engine logic.
The initial admin and the registry's own principal come from
configuration, never from source code.

Sources, in precedence order:
    1. Explicit EngineConfig(...) construction (tests, embedding)
    2. Django settings.TIERSEAL mapping (see config/settings.py)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEFAULT_REGISTRY_PRINCIPAL = "tierseal.registry"
TIER_COUNT = 3


@dataclass(frozen=True)
class EngineConfig:
    """
    Fields:
        initial_admin:      Admin identity at construction.
        registry_principal: Identity holding standing decryption grants
                            on every stored ciphertext.
        tier_count:         Number of (threshold, discount) pairs per
                            program. Fixed at 3.
    """

    initial_admin: str
    registry_principal: str = DEFAULT_REGISTRY_PRINCIPAL
    tier_count: int = TIER_COUNT

    def __post_init__(self) -> None:
        if not self.initial_admin or not isinstance(self.initial_admin, str):
            raise ValueError("initial_admin must be a non-empty string.")
        if not self.registry_principal or not isinstance(self.registry_principal, str):
            raise ValueError("registry_principal must be a non-empty string.")
        if self.registry_principal == self.initial_admin:
            raise ValueError("registry_principal must differ from initial_admin.")
        if self.tier_count != TIER_COUNT:
            raise ValueError(f"tier_count must be {TIER_COUNT}, got {self.tier_count}.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """Build from a TIERSEAL-style mapping (upper-case keys)."""
        return cls(
            initial_admin=data.get("ADMIN", ""),
            registry_principal=data.get("REGISTRY_PRINCIPAL") or DEFAULT_REGISTRY_PRINCIPAL,
            tier_count=int(data.get("TIER_COUNT", TIER_COUNT)),
        )


def load_config(settings: Optional[Any] = None) -> EngineConfig:
    """
    Read settings.TIERSEAL. Falls back to django.conf.settings when no
    settings object is passed.
    """
    if settings is None:
        from django.conf import settings
    data = getattr(settings, "TIERSEAL", None)
    if not data:
        raise ValueError("settings.TIERSEAL is not configured.")
    return EngineConfig.from_mapping(data)
