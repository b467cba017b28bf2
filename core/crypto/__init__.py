"""
TierSeal Core Crypto — Public API
===================================
Injected homomorphic capability and its value types.
"""

from core.crypto.mock import EncryptedInput, MockCryptoProvider
from core.crypto.provider import (
    ZERO_HANDLE,
    Ciphertext,
    CryptoProvider,
    EncryptedBool,
    ExternalCiphertext,
    Handle,
    is_zero_handle,
)

__all__ = [
    "Ciphertext",
    "CryptoProvider",
    "EncryptedBool",
    "EncryptedInput",
    "ExternalCiphertext",
    "Handle",
    "MockCryptoProvider",
    "ZERO_HANDLE",
    "is_zero_handle",
]
