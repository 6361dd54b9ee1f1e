#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
Chronolock CLI - offline timelock tooling.

Commands:
  chronolock identity --interval N          Interval identity bytes
  chronolock keygen                         Master key pair (DKG stand-in)
  chronolock derive-key --secret S ...      Decryption key for an interval
  chronolock encrypt --public-key PK ...    Encrypt to a future interval
  chronolock decrypt --decryption-key DK .. Decrypt with a revealed key
  chronolock simulate --tick T [--tick T]   Drive a coordinator, print signals
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..core.config import get_config
from ..core.exceptions import ChronolockException
from ..core.logging import configure_logging, correlation_context
from ..crypto.ibe import (
    Ciphertext,
    compute_timelock_identity,
    decrypt,
    derive_decryption_key,
    encrypt,
    generate_master_keypair,
)
from ..crypto.pairing import PairingError, get_pairing_group
from ..rotation.coordinator import RotationCoordinator
from .output import output_error, output_result

logger = logging.getLogger(__name__)


def _parse_hex(value: str) -> bytes:
    try:
        return bytes.fromhex(value.removeprefix("0x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {value!r}") from None


def _chain_id(args: argparse.Namespace) -> int:
    return get_config().chain_id if args.chain_id is None else args.chain_id


# ============================================================================
# Commands
# ============================================================================


def cmd_identity(args: argparse.Namespace) -> int:
    """Print the identity of an interval."""
    identity = compute_timelock_identity(args.interval, _chain_id(args))
    output_result({"interval": args.interval, "chain_id": _chain_id(args), "identity": identity.hex()})
    return 0


def cmd_keygen(args: argparse.Namespace) -> int:
    """Generate a master key pair."""
    group = get_pairing_group(args.group)
    keys = generate_master_keypair(group, secret_scalar=args.secret)
    output_result(
        {
            "group": group.name,
            "secret_scalar": str(keys.secret_scalar),
            "public_key": keys.public_key.hex(),
        }
    )
    return 0


def cmd_derive_key(args: argparse.Namespace) -> int:
    """Derive the decryption key participants reveal for an interval."""
    group = get_pairing_group(args.group)
    identity = compute_timelock_identity(args.interval, _chain_id(args))
    dk = derive_decryption_key(group, args.secret, identity)
    output_result({"group": group.name, "interval": args.interval, "decryption_key": dk.hex()})
    return 0


def cmd_encrypt(args: argparse.Namespace) -> int:
    """Encrypt a message to an interval."""
    group = get_pairing_group(args.group)
    identity = compute_timelock_identity(args.interval, _chain_id(args))
    message = args.message.encode() if args.message is not None else args.message_hex
    ciphertext = encrypt(group, args.public_key, identity, message)
    output_result(
        {
            "group": group.name,
            "interval": args.interval,
            "ciphertext": ciphertext.to_bytes().hex(),
            **ciphertext.to_dict(),
        }
    )
    return 0


def cmd_decrypt(args: argparse.Namespace) -> int:
    """Decrypt a ciphertext with a revealed decryption key."""
    group = get_pairing_group(args.group)
    ciphertext = Ciphertext.from_bytes(args.ciphertext)
    plaintext = decrypt(group, args.decryption_key, ciphertext)
    result = {"group": group.name, "plaintext_hex": plaintext.hex()}
    try:
        result["plaintext"] = plaintext.decode()
    except UnicodeDecodeError:
        pass
    output_result(result)
    return 0


def cmd_simulate(args: argparse.Namespace) -> int:
    """Run a fresh coordinator through a sequence of tick times."""
    coordinator = RotationCoordinator.from_config()
    system = coordinator.roles.system
    coordinator.initialize(system)
    if args.interval_micros is not None:
        coordinator.config.set_interval_for_testing(system, args.interval_micros)

    ticks = []
    for now in args.ticks:
        signals = coordinator.on_tick(coordinator.roles.scheduler, now)
        ticks.append({"now": now, "signals": [s.to_dict() for s in signals]})

    output_result(
        {
            "interval_duration": coordinator.config.get_interval_duration(),
            "ticks": ticks,
            "state": coordinator.state.to_dict(),
        }
    )
    return 0


# ============================================================================
# Parser
# ============================================================================


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="chronolock",
        description="Timelock encryption tooling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chronolock keygen --group simulated
  chronolock encrypt --public-key <hex> --interval 5 --message "bid: 100"
  chronolock derive-key --secret <n> --interval 5
  chronolock decrypt --decryption-key <hex> --ciphertext <hex>
  chronolock simulate --interval-micros 5000000 --tick 0 --tick 6000000
        """,
    )
    parser.add_argument("--log-level", help="Configure logging at this level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_group_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument("--group", "-g", default=None, help="Pairing backend (bls12_381, simulated)")

    def add_interval_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--interval", "-i", type=int, required=True, help="Interval number")
        p.add_argument("--chain-id", type=int, default=None, help="Chain id (defaults to CHRONOLOCK_CHAIN_ID)")

    identity_p = subparsers.add_parser("identity", help="Compute an interval identity")
    add_interval_args(identity_p)
    identity_p.set_defaults(func=cmd_identity)

    keygen_p = subparsers.add_parser("keygen", help="Generate a master key pair")
    add_group_arg(keygen_p)
    keygen_p.add_argument("--secret", type=int, default=None, help="Fixed secret scalar (testing)")
    keygen_p.set_defaults(func=cmd_keygen)

    derive_p = subparsers.add_parser("derive-key", help="Derive an interval decryption key")
    add_group_arg(derive_p)
    add_interval_args(derive_p)
    derive_p.add_argument("--secret", type=int, required=True, help="Master secret scalar")
    derive_p.set_defaults(func=cmd_derive_key)

    encrypt_p = subparsers.add_parser("encrypt", help="Encrypt to a future interval")
    add_group_arg(encrypt_p)
    add_interval_args(encrypt_p)
    encrypt_p.add_argument("--public-key", type=_parse_hex, required=True, help="Master public key (hex)")
    message_group = encrypt_p.add_mutually_exclusive_group(required=True)
    message_group.add_argument("--message", "-m", help="UTF-8 message")
    message_group.add_argument("--message-hex", type=_parse_hex, help="Message bytes (hex)")
    encrypt_p.set_defaults(func=cmd_encrypt)

    decrypt_p = subparsers.add_parser("decrypt", help="Decrypt with a revealed key")
    add_group_arg(decrypt_p)
    decrypt_p.add_argument("--decryption-key", type=_parse_hex, required=True, help="Revealed key (hex)")
    decrypt_p.add_argument("--ciphertext", type=_parse_hex, required=True, help="Ciphertext (hex)")
    decrypt_p.set_defaults(func=cmd_decrypt)

    simulate_p = subparsers.add_parser("simulate", help="Drive a coordinator through tick times")
    simulate_p.add_argument("--tick", "-t", dest="ticks", type=int, action="append", default=[],
                            help="Tick time in microseconds (repeatable, in order)")
    simulate_p.add_argument("--interval-micros", type=int, default=None,
                            help="Override the interval duration (refused on production)")
    simulate_p.set_defaults(func=cmd_simulate)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)

    if args.log_level:
        configure_logging(level=args.log_level)

    with correlation_context() as cid:
        logger.debug(f"Running command {args.command} ({cid})")
        try:
            return args.func(args)
        except ChronolockException as e:
            output_error(e.message, e.details)
            return 1
        except PairingError as e:
            output_error(str(e))
            return 1


if __name__ == "__main__":
    sys.exit(main())
