# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Identity-based timelock encryption (Boneh-Franklin style).

The identity of an interval is a hash of its number and the chain id.
Participants hold shares of a master secret `msk`; the interval's public
key is `MPK = msk * g1` and the key revealed after the interval closes is
the BLS signature on its identity, `DK = msk * H(identity)` in G2.

    encrypt:  r random, U = r * g1, V = M xor KS(e(r * MPK, H(id)))
    decrypt:  M = V xor KS(e(U, DK))

Both sides arrive at e(g1, H(id))^(r * msk), so anyone holding the revealed
DK can decrypt, and nobody can before it is revealed.

generate_master_keypair() stands in for the distributed key generation,
which is outside this package.

Example:
    >>> from chronolock.crypto.pairing import get_pairing_group
    >>> group = get_pairing_group("simulated")
    >>> keys = generate_master_keypair(group)
    >>> identity = compute_timelock_identity(interval=7, chain_id=4)
    >>> ct = encrypt(group, keys.public_key, identity, b"sealed bid: 100")
    >>> dk = derive_decryption_key(group, keys.secret_scalar, identity)
    >>> decrypt(group, dk, ct)
    b'sealed bid: 100'
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any

from ..core.exceptions import ValidationException
from .decryptor import PairingDecryptor, derive_keystream, xor_bytes
from .pairing import PairingGroup

TIMELOCK_IDENTITY_CONTEXT = b"chronolock_timelock"

MAX_U64 = 2**64 - 1
MAX_U8 = 2**8 - 1


@dataclass(frozen=True)
class Ciphertext:
    """Timelock ciphertext.

    Attributes:
        u: Serialized G1 element r * g1
        v: Message masked with the pairing-derived keystream
    """

    u: bytes
    v: bytes

    def to_bytes(self) -> bytes:
        """Encode as len(u) (2 bytes, big-endian) || u || v."""
        return len(self.u).to_bytes(2, "big") + self.u + self.v

    @classmethod
    def from_bytes(cls, data: bytes) -> Ciphertext:
        if len(data) < 2:
            raise ValidationException("Ciphertext too short", field="ciphertext", value=len(data))
        u_len = int.from_bytes(data[:2], "big")
        if len(data) < 2 + u_len:
            raise ValidationException("Ciphertext truncated", field="ciphertext", value=len(data))
        return cls(u=data[2 : 2 + u_len], v=data[2 + u_len :])

    def to_dict(self) -> dict[str, Any]:
        return {"u": self.u.hex(), "v": self.v.hex()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ciphertext:
        return cls(u=bytes.fromhex(data["u"]), v=bytes.fromhex(data["v"]))


@dataclass(frozen=True)
class MasterKeyPair:
    """Master secret and its public key.

    Attributes:
        secret_scalar: msk (SENSITIVE!)
        public_key: Serialized G1 element msk * g1
    """

    secret_scalar: int
    public_key: bytes


def compute_timelock_identity(interval: int, chain_id: int) -> bytes:
    """Canonical identity of an interval.

    SHA3-256(interval as u64 little-endian || chain_id as u8 || context).
    Binding the chain id keeps ciphertexts from being replayed across networks.
    """
    if isinstance(interval, bool) or not isinstance(interval, int) or not 0 <= interval <= MAX_U64:
        raise ValidationException("Interval must fit in an unsigned 64-bit integer", field="interval", value=interval)
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or not 0 <= chain_id <= MAX_U8:
        raise ValidationException("Chain id must fit in an unsigned 8-bit integer", field="chain_id", value=chain_id)
    data = interval.to_bytes(8, "little") + chain_id.to_bytes(1, "big") + TIMELOCK_IDENTITY_CONTEXT
    return hashlib.sha3_256(data).digest()


def generate_master_keypair(group: PairingGroup, secret_scalar: int | None = None) -> MasterKeyPair:
    """Create a master key pair (single-party stand-in for the DKG output)."""
    msk = group.random_scalar() if secret_scalar is None else secret_scalar % group.order
    mpk = group.g1_mul(group.g1_generator(), msk)
    return MasterKeyPair(secret_scalar=msk, public_key=group.serialize_g1(mpk))


def derive_decryption_key(group: PairingGroup, secret_scalar: int, identity: bytes) -> bytes:
    """DK = msk * H(identity), serialized. This is what gets revealed for an interval."""
    q_id = group.hash_to_g2(identity)
    return group.serialize_g2(group.g2_mul(q_id, secret_scalar))


def encrypt(
    group: PairingGroup,
    public_key: bytes,
    identity: bytes,
    message: bytes,
    randomness: int | None = None,
) -> Ciphertext:
    """Encrypt a message to an identity under a master public key.

    Args:
        group: Pairing backend the key belongs to
        public_key: Serialized MPK (G1)
        identity: Interval identity from compute_timelock_identity()
        message: Plaintext bytes
        randomness: Fixed r for reproducible output; random when None

    Raises:
        InvalidPointError: If the public key does not decode.
    """
    mpk = group.deserialize_g1(public_key)
    r = group.random_scalar() if randomness is None else randomness % group.order
    u = group.g1_mul(group.g1_generator(), r)
    q_id = group.hash_to_g2(identity)
    gid = group.pair(group.g1_mul(mpk, r), q_id)
    keystream = derive_keystream(group.serialize_gt(gid), len(message))
    return Ciphertext(u=group.serialize_g1(u), v=xor_bytes(message, keystream))


def decrypt(group: PairingGroup, decryption_key: bytes, ciphertext: Ciphertext) -> bytes:
    """Decrypt with a revealed interval key.

    Raises:
        InvalidPointError: If the key or the ciphertext's U does not decode.
    """
    return PairingDecryptor(group).decrypt_bytes(ciphertext.u, decryption_key, ciphertext.v)
