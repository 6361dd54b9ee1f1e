"""Cryptographic primitives for Chronolock.

This module provides:
- Pairing group backends (BLS12-381 and a test simulator)
- The pairing-based decryption primitive
- Identity-based timelock encryption built on top of it
"""

from chronolock.crypto.decryptor import (
    PairingDecryptor,
    derive_keystream,
    keccak256,
    xor_bytes,
)
from chronolock.crypto.ibe import (
    Ciphertext,
    MasterKeyPair,
    compute_timelock_identity,
    decrypt,
    derive_decryption_key,
    encrypt,
    generate_master_keypair,
)
from chronolock.crypto.pairing import (
    BLS12381PairingGroup,
    InvalidPointError,
    PairingError,
    PairingGroup,
    SimulatedPairingGroup,
    UnknownPairingGroupError,
    get_pairing_group,
)

__all__ = [
    # Decryption
    "PairingDecryptor",
    "derive_keystream",
    "keccak256",
    "xor_bytes",
    # IBE
    "Ciphertext",
    "MasterKeyPair",
    "compute_timelock_identity",
    "decrypt",
    "derive_decryption_key",
    "encrypt",
    "generate_master_keypair",
    # Pairing backends
    "BLS12381PairingGroup",
    "InvalidPointError",
    "PairingError",
    "PairingGroup",
    "SimulatedPairingGroup",
    "UnknownPairingGroupError",
    "get_pairing_group",
]
