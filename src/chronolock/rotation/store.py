# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Append-only keyed storage for per-interval key material.

An IntervalStore maps an interval number to an opaque byte blob. The
coordinator keeps two of them: one for published public keys and one for
revealed secrets. There is no update and no delete: once a value exists
for an interval it is the value clients see forever, so a published key
cannot be swapped after encryption against it has begun.

Backends:
- MemoryIntervalStore: process-local dict-backed store
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator

from ..core.exceptions import ValidationException

# Interval numbers are unsigned 64-bit
MAX_INTERVAL = 2**64 - 1


def validate_interval(interval: int) -> int:
    """Check that an interval key is an unsigned 64-bit integer.

    Raises:
        ValidationException: If the key is not an int or is out of range.
    """
    if isinstance(interval, bool) or not isinstance(interval, int):
        raise ValidationException("Interval must be an integer", field="interval", value=interval)
    if interval < 0:
        raise ValidationException("Interval must be non-negative", field="interval", value=interval)
    if interval > MAX_INTERVAL:
        raise ValidationException("Interval must fit in 64 bits", field="interval", value=interval)
    return interval


def validate_payload(value: bytes | bytearray | memoryview, field: str = "value") -> bytes:
    """Coerce a bytes-like payload to immutable bytes.

    Raises:
        ValidationException: If the payload is not bytes-like.
    """
    if not isinstance(value, bytes | bytearray | memoryview):
        raise ValidationException("Payload must be bytes", field=field, value=type(value).__name__)
    return bytes(value)


class IntervalStore(ABC):
    """Abstract first-write-wins store keyed by interval number."""

    @abstractmethod
    def contains(self, interval: int) -> bool:
        """Whether a value has been stored for the interval."""

    @abstractmethod
    def get(self, interval: int) -> bytes | None:
        """Return the stored value, or None if nothing was stored."""

    @abstractmethod
    def insert_if_absent(self, interval: int, value: bytes) -> bool:
        """Store the value unless the interval already has one.

        Returns:
            True if the value was stored, False if an earlier value was kept.
        """

    @abstractmethod
    def intervals(self) -> list[int]:
        """All interval keys with a stored value, ascending."""

    def __contains__(self, interval: object) -> bool:
        return isinstance(interval, int) and self.contains(interval)

    def __len__(self) -> int:
        return len(self.intervals())

    def __iter__(self) -> Iterator[int]:
        return iter(self.intervals())


class MemoryIntervalStore(IntervalStore):
    """In-memory IntervalStore.

    Thread-safe: the check and the insert happen under one lock, so two
    concurrent first writes cannot both succeed.
    """

    def __init__(self, name: str = "intervals") -> None:
        self.name = name
        self._entries: dict[int, bytes] = {}
        self._lock = threading.Lock()

    def contains(self, interval: int) -> bool:
        return interval in self._entries

    def get(self, interval: int) -> bytes | None:
        return self._entries.get(interval)

    def insert_if_absent(self, interval: int, value: bytes) -> bool:
        interval = validate_interval(interval)
        payload = validate_payload(value)
        with self._lock:
            if interval in self._entries:
                return False
            self._entries[interval] = payload
            return True

    def intervals(self) -> list[int]:
        return sorted(self._entries)

    def to_dict(self) -> dict[str, str]:
        """Hex-encoded view of the entries, keyed by interval."""
        return {str(k): self._entries[k].hex() for k in self.intervals()}

    def __repr__(self) -> str:
        return f"MemoryIntervalStore(name={self.name!r}, entries={len(self._entries)})"
