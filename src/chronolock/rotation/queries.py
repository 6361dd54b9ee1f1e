# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Read-only accessors for clients and decryptors.

Every lookup returns an absent/default value rather than raising when the
rotation state or the interval entry does not exist.
"""

from __future__ import annotations

from .coordinator import RotationCoordinator


class TimelockQueries:
    """Query facade over a RotationCoordinator's state."""

    def __init__(self, coordinator: RotationCoordinator) -> None:
        self._coordinator = coordinator

    def is_initialized(self) -> bool:
        return self._coordinator.state is not None

    def get_current_interval(self) -> int:
        """Current interval number, 0 before initialization."""
        state = self._coordinator.state
        return 0 if state is None else state.current_interval

    def get_last_rotation_time(self) -> int:
        """Microsecond timestamp of the last rotation, 0 before the first tick."""
        state = self._coordinator.state
        return 0 if state is None else state.last_rotation_time

    def get_public_key(self, interval: int) -> bytes | None:
        """Published public key for the interval, if any."""
        state = self._coordinator.state
        return None if state is None else state.public_keys.get(interval)

    def is_secret_revealed(self, interval: int) -> bool:
        state = self._coordinator.state
        return state is not None and state.revealed_secrets.contains(interval)

    def get_secret(self, interval: int) -> bytes | None:
        """Revealed secret for the interval, if any."""
        state = self._coordinator.state
        return None if state is None else state.revealed_secrets.get(interval)
