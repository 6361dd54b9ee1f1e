# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Pairing-based decryption primitive.

    plaintext = ciphertext XOR keystream(serialize(e(U, Sig)))

U is the G1 element the client produced at encryption time, Sig is the
interval's revealed secret (a G2 element). The keystream is derived from
the canonical Gt encoding T with Keccak-256:

    block 0 = Keccak256(T)
    block i = Keccak256(T || i as 4-byte big-endian),  i >= 1

so messages of up to 32 bytes are masked with exactly Keccak256(T).

Inputs are not authenticated. Mismatched elements decrypt to garbage, not
to an error. The decryptor holds no state and is safe to share across
threads.
"""

from __future__ import annotations

from typing import Any

from Crypto.Hash import keccak

from .pairing import PairingGroup

KECCAK_BLOCK_SIZE = 32


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def derive_keystream(gt_bytes: bytes, length: int) -> bytes:
    """Expand a serialized Gt element into at least `length` keystream bytes."""
    blocks = [keccak256(gt_bytes)]
    counter = 1
    while len(blocks) * KECCAK_BLOCK_SIZE < length:
        blocks.append(keccak256(gt_bytes + counter.to_bytes(4, "big")))
        counter += 1
    return b"".join(blocks)


def xor_bytes(data: bytes, keystream: bytes) -> bytes:
    """XOR data with the keystream, byte for byte.

    The keystream is repeated if it is shorter than the data.
    """
    if not keystream:
        return bytes(data)
    width = len(keystream)
    return bytes(b ^ keystream[i % width] for i, b in enumerate(data))


class PairingDecryptor:
    """Recovers plaintext from a ciphertext and a revealed interval secret."""

    def __init__(self, group: PairingGroup) -> None:
        self.group = group

    def decrypt(self, u: Any, sig: Any, ciphertext: bytes) -> bytes:
        """Decrypt with group elements.

        Args:
            u: G1 element from encryption time
            sig: Revealed interval secret (G2 element)
            ciphertext: Masked message bytes

        Returns:
            Plaintext of the same length as the ciphertext.
        """
        t = self.group.pair(u, sig)
        keystream = derive_keystream(self.group.serialize_gt(t), len(ciphertext))
        return xor_bytes(ciphertext, keystream)

    def decrypt_bytes(self, u_bytes: bytes, sig_bytes: bytes, ciphertext: bytes) -> bytes:
        """Decrypt with serialized elements, e.g. a secret fetched via TimelockQueries.

        Raises:
            InvalidPointError: If either element fails to decode.
        """
        u = self.group.deserialize_g1(u_bytes)
        sig = self.group.deserialize_g2(sig_bytes)
        return self.decrypt(u, sig, ciphertext)
