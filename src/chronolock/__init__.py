# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Chronolock - timelock encryption coordinator.

Clients encrypt now against the public key of a future interval; the
matching secret is revealed only after that interval has closed.

Architecture:
  rotation.RotationCoordinator   interval state machine (driven by on_tick)
    -> IntervalStore x2          published public keys, revealed secrets
    -> signals                   RotationStarted / RevealRequested
  rotation.TimelockQueries       read-only lookups for clients
  crypto.PairingDecryptor        e(U, Sig) -> Keccak keystream -> XOR

CLI entry point: ``chronolock``
"""

__version__ = "0.1.0"

from . import (
    core as core,
)
from . import (
    crypto as crypto,
)
from . import (
    rotation as rotation,
)
