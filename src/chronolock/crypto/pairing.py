# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Pairing group abstraction layer.

The decryption primitive needs a bilinear map e: G1 x G2 -> Gt and a
canonical byte encoding of Gt elements. The curve is a parameter, so this
module defines the interface and two implementations:

- BLS12381PairingGroup: real BLS12-381 pairing (py_ecc). G1 points encode to
  48 compressed bytes, G2 points to 96, Gt elements to 576.
- SimulatedPairingGroup: exponent-tracking simulator for tests. Every
  element is represented by its discrete log relative to a fixed generator,
  so e(a*g1, b*g2) is just a*b. Bilinear and fast, with no security at all.

Example:
    >>> group = get_pairing_group("simulated")
    >>> u = group.g1_mul(group.g1_generator(), 5)
    >>> sig = group.g2_mul(group.g2_generator(), 7)
    >>> group.pair(u, sig) == group.pair(group.g1_mul(group.g1_generator(), 35), group.g2_generator())
    True
"""

from __future__ import annotations

import hashlib
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from py_ecc.bls.g2_primitives import (
    G1_to_pubkey,
    G2_to_signature,
    pubkey_to_G1,
    signature_to_G2,
)
from py_ecc.bls.hash_to_curve import hash_to_G2
from py_ecc.optimized_bls12_381 import (
    G1,
    G2,
    curve_order,
    multiply,
    pairing,
)

# Domain separation tag for hashing identities onto G2
IDENTITY_DST = b"CHRONOLOCK-TIMELOCK-V01-CS01-with-BLS12381G2_XMD:SHA-256_SSWU_RO_"

G1_COMPRESSED_SIZE = 48
G2_COMPRESSED_SIZE = 96
FQ_SIZE = 48
GT_SIZE = 12 * FQ_SIZE

SIMULATED_ELEMENT_SIZE = 32


# =============================================================================
# Exceptions
# =============================================================================


class PairingError(Exception):
    """Base exception for pairing operations."""
    pass


class InvalidPointError(PairingError):
    """Raised when bytes do not decode to a valid group element."""
    pass


class UnknownPairingGroupError(PairingError):
    """Raised when a pairing backend name is not registered."""
    pass


# =============================================================================
# Abstract Interface
# =============================================================================


class PairingGroup(ABC):
    """Abstract asymmetric pairing group (G1, G2, Gt)."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the backend."""

    @property
    @abstractmethod
    def order(self) -> int:
        """Prime order shared by G1, G2 and Gt."""

    @abstractmethod
    def g1_generator(self) -> Any:
        pass

    @abstractmethod
    def g2_generator(self) -> Any:
        pass

    @abstractmethod
    def g1_mul(self, point: Any, scalar: int) -> Any:
        pass

    @abstractmethod
    def g2_mul(self, point: Any, scalar: int) -> Any:
        pass

    @abstractmethod
    def pair(self, g1_point: Any, g2_point: Any) -> Any:
        """Compute e(g1_point, g2_point) in Gt."""

    @abstractmethod
    def serialize_gt(self, element: Any) -> bytes:
        """Canonical byte encoding of a Gt element."""

    @abstractmethod
    def serialize_g1(self, point: Any) -> bytes:
        pass

    @abstractmethod
    def deserialize_g1(self, data: bytes) -> Any:
        """Decode a G1 point.

        Raises:
            InvalidPointError: If the bytes are not a valid encoding.
        """

    @abstractmethod
    def serialize_g2(self, point: Any) -> bytes:
        pass

    @abstractmethod
    def deserialize_g2(self, data: bytes) -> Any:
        """Decode a G2 point.

        Raises:
            InvalidPointError: If the bytes are not a valid encoding.
        """

    @abstractmethod
    def hash_to_g2(self, message: bytes, dst: bytes = IDENTITY_DST) -> Any:
        """Hash arbitrary bytes onto G2."""

    def random_scalar(self) -> int:
        """Uniform non-zero scalar modulo the group order."""
        return secrets.randbelow(self.order - 1) + 1


# =============================================================================
# BLS12-381 (py_ecc)
# =============================================================================


class BLS12381PairingGroup(PairingGroup):
    """BLS12-381 via py_ecc's optimized curve arithmetic.

    Points use py_ecc's projective tuples. Pure Python: one pairing takes on
    the order of a second.
    """

    @property
    def name(self) -> str:
        return "bls12_381"

    @property
    def order(self) -> int:
        return curve_order

    def g1_generator(self) -> Any:
        return G1

    def g2_generator(self) -> Any:
        return G2

    def g1_mul(self, point: Any, scalar: int) -> Any:
        return multiply(point, scalar % curve_order)

    def g2_mul(self, point: Any, scalar: int) -> Any:
        return multiply(point, scalar % curve_order)

    def pair(self, g1_point: Any, g2_point: Any) -> Any:
        # py_ecc takes the G2 argument first
        return pairing(g2_point, g1_point)

    def serialize_gt(self, element: Any) -> bytes:
        return b"".join(int(c).to_bytes(FQ_SIZE, "big") for c in element.coeffs)

    def serialize_g1(self, point: Any) -> bytes:
        return bytes(G1_to_pubkey(point))

    def deserialize_g1(self, data: bytes) -> Any:
        if len(data) != G1_COMPRESSED_SIZE:
            raise InvalidPointError(f"G1 point must be {G1_COMPRESSED_SIZE} bytes, got {len(data)}")
        try:
            return pubkey_to_G1(bytes(data))
        except ValueError as e:
            raise InvalidPointError(f"Invalid G1 point: {e}") from e

    def serialize_g2(self, point: Any) -> bytes:
        return bytes(G2_to_signature(point))

    def deserialize_g2(self, data: bytes) -> Any:
        if len(data) != G2_COMPRESSED_SIZE:
            raise InvalidPointError(f"G2 point must be {G2_COMPRESSED_SIZE} bytes, got {len(data)}")
        try:
            return signature_to_G2(bytes(data))
        except ValueError as e:
            raise InvalidPointError(f"Invalid G2 point: {e}") from e

    def hash_to_g2(self, message: bytes, dst: bytes = IDENTITY_DST) -> Any:
        return hash_to_G2(message, dst, hashlib.sha256)


# =============================================================================
# Simulated group (testing)
# =============================================================================


@dataclass(frozen=True)
class SimulatedElement:
    """Group element tracked by its exponent relative to the generator."""

    group: str  # "G1", "G2" or "GT"
    exponent: int


class SimulatedPairingGroup(PairingGroup):
    """Exponent-tracking pairing simulator over the BLS12-381 scalar field.

    WARNING: Elements reveal their discrete logs. For tests only.
    """

    @property
    def name(self) -> str:
        return "simulated"

    @property
    def order(self) -> int:
        return curve_order

    def _element(self, group: str, exponent: int) -> SimulatedElement:
        return SimulatedElement(group, exponent % curve_order)

    def g1_generator(self) -> SimulatedElement:
        return self._element("G1", 1)

    def g2_generator(self) -> SimulatedElement:
        return self._element("G2", 1)

    def g1_mul(self, point: SimulatedElement, scalar: int) -> SimulatedElement:
        return self._element("G1", point.exponent * scalar)

    def g2_mul(self, point: SimulatedElement, scalar: int) -> SimulatedElement:
        return self._element("G2", point.exponent * scalar)

    def pair(self, g1_point: SimulatedElement, g2_point: SimulatedElement) -> SimulatedElement:
        return self._element("GT", g1_point.exponent * g2_point.exponent)

    def serialize_gt(self, element: SimulatedElement) -> bytes:
        return element.exponent.to_bytes(SIMULATED_ELEMENT_SIZE, "big")

    def serialize_g1(self, point: SimulatedElement) -> bytes:
        return point.exponent.to_bytes(SIMULATED_ELEMENT_SIZE, "big")

    def deserialize_g1(self, data: bytes) -> SimulatedElement:
        return self._element("G1", self._decode(data))

    def serialize_g2(self, point: SimulatedElement) -> bytes:
        return point.exponent.to_bytes(SIMULATED_ELEMENT_SIZE, "big")

    def deserialize_g2(self, data: bytes) -> SimulatedElement:
        return self._element("G2", self._decode(data))

    def hash_to_g2(self, message: bytes, dst: bytes = IDENTITY_DST) -> SimulatedElement:
        digest = hashlib.sha256(dst + message).digest()
        return self._element("G2", int.from_bytes(digest, "big") or 1)

    def _decode(self, data: bytes) -> int:
        if len(data) != SIMULATED_ELEMENT_SIZE:
            raise InvalidPointError(f"Simulated element must be {SIMULATED_ELEMENT_SIZE} bytes, got {len(data)}")
        value = int.from_bytes(data, "big")
        if value >= curve_order:
            raise InvalidPointError("Simulated element exceeds group order")
        return value


# =============================================================================
# Registry
# =============================================================================

PAIRING_GROUPS: dict[str, type[PairingGroup]] = {
    "bls12_381": BLS12381PairingGroup,
    "simulated": SimulatedPairingGroup,
}


def get_pairing_group(name: str | None = None) -> PairingGroup:
    """Instantiate a pairing backend by name.

    Args:
        name: Backend name. Defaults to the configured CHRONOLOCK_PAIRING_GROUP.

    Raises:
        UnknownPairingGroupError: If no backend is registered under the name.
    """
    if name is None:
        from ..core.config import get_config

        name = get_config().pairing_group
    try:
        return PAIRING_GROUPS[name]()
    except KeyError:
        raise UnknownPairingGroupError(
            f"Unknown pairing group {name!r}; expected one of {sorted(PAIRING_GROUPS)}"
        ) from None
