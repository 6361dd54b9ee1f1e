"""Tests for chronolock.crypto.ibe - identity-based timelock encryption."""

from __future__ import annotations

import doctest
import hashlib

import pytest

from chronolock.core.exceptions import ValidationException
from chronolock.crypto.ibe import (
    TIMELOCK_IDENTITY_CONTEXT,
    Ciphertext,
    compute_timelock_identity,
    decrypt,
    derive_decryption_key,
    encrypt,
    generate_master_keypair,
)
from chronolock.crypto.pairing import BLS12381PairingGroup, InvalidPointError


class TestTimelockIdentity:
    def test_layout(self):
        expected = hashlib.sha3_256(
            (7).to_bytes(8, "little") + bytes([4]) + TIMELOCK_IDENTITY_CONTEXT
        ).digest()

        assert compute_timelock_identity(7, 4) == expected
        assert len(expected) == 32

    def test_chain_binding(self):
        assert compute_timelock_identity(7, 4) != compute_timelock_identity(7, 1)
        assert compute_timelock_identity(7, 4) != compute_timelock_identity(8, 4)

    @pytest.mark.parametrize(
        "interval,chain_id",
        [(-1, 4), (2**64, 4), (1, 256), (1, -1), ("1", 4)],
    )
    def test_out_of_range(self, interval, chain_id):
        with pytest.raises(ValidationException):
            compute_timelock_identity(interval, chain_id)


class TestCiphertextEncoding:
    def test_bytes_round_trip(self):
        ct = Ciphertext(u=b"\x01" * 48, v=b"payload")

        encoded = ct.to_bytes()

        assert encoded[:2] == (48).to_bytes(2, "big")
        assert Ciphertext.from_bytes(encoded) == ct

    def test_dict_round_trip(self):
        ct = Ciphertext(u=b"\xaa", v=b"\xbb")

        assert ct.to_dict() == {"u": "aa", "v": "bb"}
        assert Ciphertext.from_dict(ct.to_dict()) == ct

    def test_rejects_short(self):
        with pytest.raises(ValidationException):
            Ciphertext.from_bytes(b"\x00")

    def test_rejects_truncated(self):
        with pytest.raises(ValidationException):
            Ciphertext.from_bytes((10).to_bytes(2, "big") + b"\x00" * 5)


class TestSimulatedTimelock:
    def test_encrypt_decrypt(self, sim_group):
        keys = generate_master_keypair(sim_group)
        identity = compute_timelock_identity(3, 4)

        ct = encrypt(sim_group, keys.public_key, identity, b"sealed bid: 100")
        dk = derive_decryption_key(sim_group, keys.secret_scalar, identity)

        assert ct.v != b"sealed bid: 100"
        assert decrypt(sim_group, dk, ct) == b"sealed bid: 100"

    def test_fixed_inputs_are_deterministic(self, sim_group):
        keys = generate_master_keypair(sim_group, secret_scalar=1234)
        identity = compute_timelock_identity(0, 4)

        first = encrypt(sim_group, keys.public_key, identity, b"m", randomness=99)
        second = encrypt(sim_group, keys.public_key, identity, b"m", randomness=99)

        assert first == second

    def test_key_for_other_interval_fails(self, sim_group):
        keys = generate_master_keypair(sim_group)
        ct = encrypt(sim_group, keys.public_key, compute_timelock_identity(5, 4), b"not yet")

        early = derive_decryption_key(sim_group, keys.secret_scalar, compute_timelock_identity(4, 4))

        assert decrypt(sim_group, early, ct) != b"not yet"

    def test_long_message(self, sim_group):
        keys = generate_master_keypair(sim_group)
        identity = compute_timelock_identity(1, 4)
        message = bytes(range(256)) * 2

        ct = encrypt(sim_group, keys.public_key, identity, message)
        dk = derive_decryption_key(sim_group, keys.secret_scalar, identity)

        assert decrypt(sim_group, dk, ct) == message

    def test_bad_public_key(self, sim_group):
        with pytest.raises(InvalidPointError):
            encrypt(sim_group, b"\x00", compute_timelock_identity(1, 4), b"m")

    def test_ciphertext_survives_wire_encoding(self, sim_group):
        keys = generate_master_keypair(sim_group)
        identity = compute_timelock_identity(2, 4)
        ct = encrypt(sim_group, keys.public_key, identity, b"over the wire")

        restored = Ciphertext.from_bytes(ct.to_bytes())
        dk = derive_decryption_key(sim_group, keys.secret_scalar, identity)

        assert decrypt(sim_group, dk, restored) == b"over the wire"


def test_module_example_runs():
    """The usage example in the module docstring is self-contained."""
    from chronolock.crypto import ibe

    results = doctest.testmod(ibe)

    assert results.attempted > 0
    assert results.failed == 0
    assert not hasattr(ibe, "get_pairing_group")


@pytest.mark.slow
def test_bls12_381_encrypt_decrypt():
    group = BLS12381PairingGroup()
    keys = generate_master_keypair(group, secret_scalar=0x1F2E3D4C)
    identity = compute_timelock_identity(1, 4)

    ct = encrypt(group, keys.public_key, identity, b"sealed on a real curve", randomness=0x5A5A)
    dk = derive_decryption_key(group, keys.secret_scalar, identity)

    assert len(keys.public_key) == 48
    assert len(dk) == 96
    assert len(ct.u) == 48
    assert decrypt(group, dk, ct) == b"sealed on a real curve"
