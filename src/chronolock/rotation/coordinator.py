# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Interval rotation state machine.

The coordinator owns the rotation state: the current interval, the time of
the last rotation, and the two append-only stores (public keys and revealed
secrets). An external scheduler calls on_tick() once per unit of progress
(for example once per produced block) with the current time in
microseconds; the coordinator never reads a clock itself.

Rotation is driven by elapsed time against one stored timestamp:

    tick(now):
        first tick after initialize  -> seed last_rotation_time, no rotation
        now - last > interval        -> RevealRequested(old), interval += 1,
                                        last = now, RotationStarted(new)
        otherwise                    -> nothing

At most one rotation happens per tick. If ticks are sparse relative to the
interval duration, interval numbers still advance by exactly one per
rotation, so the mapping from wall-clock to interval number drifts.

Every mutating operation runs under one lock and validates before it
mutates, so failures leave no partial state.

Example:
    >>> roles = TrustRoles(system="0x1", scheduler="0x1")
    >>> coordinator = RotationCoordinator(RotationConfig(roles, chain_id=4))
    >>> coordinator.initialize("0x1")
    >>> coordinator.on_tick("0x1", 0)
    []
    >>> [s.to_dict()["type"] for s in coordinator.on_tick("0x1", 3_600_000_001)]
    ['reveal_requested', 'rotation_started']
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..core.exceptions import (
    AlreadyInitializedError,
    ConfigException,
    NotInitializedError,
    UnauthorizedError,
    ValidationException,
)
from .config import RotationConfig, TrustRoles
from .signals import RevealRequested, RotationStarted, Signal, ThresholdConfig
from .store import IntervalStore, MemoryIntervalStore, validate_interval, validate_payload

logger = logging.getLogger(__name__)

# Placeholder threshold announced with every rotation. Not derived from any
# participant set; replace once a real DKG supplies these values.
PLACEHOLDER_THRESHOLD = 3
PLACEHOLDER_TOTAL_PARTICIPANTS = 4

# Optional capability check for publishers: (caller, interval) -> allowed
ParticipantCheck = Callable[[str, int], bool]


@dataclass
class RotationState:
    """Mutable rotation state, created once by initialize()."""

    current_interval: int = 0
    last_rotation_time: int = 0
    clock_seeded: bool = False
    public_keys: IntervalStore = field(default_factory=lambda: MemoryIntervalStore("public_keys"))
    revealed_secrets: IntervalStore = field(default_factory=lambda: MemoryIntervalStore("revealed_secrets"))
    signals: list[Signal] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output. Byte values are hex-encoded."""
        return {
            "current_interval": self.current_interval,
            "last_rotation_time": self.last_rotation_time,
            "public_keys": {str(i): self.public_keys.get(i).hex() for i in self.public_keys.intervals()},
            "revealed_secrets": {
                str(i): self.revealed_secrets.get(i).hex() for i in self.revealed_secrets.intervals()
            },
            "signals": [s.to_dict() for s in self.signals],
        }


class RotationCoordinator:
    """Owns the rotation state machine and its key-material stores.

    Args:
        config: Interval duration configuration (carries the trust roles)
        threshold_config: Announced with each RotationStarted signal
        participant_check: Optional callable deciding who may publish. When
            None, any caller may publish.
    """

    def __init__(
        self,
        config: RotationConfig,
        threshold_config: ThresholdConfig | None = None,
        participant_check: ParticipantCheck | None = None,
    ) -> None:
        self.config = config
        self.threshold_config = threshold_config or ThresholdConfig(
            threshold=PLACEHOLDER_THRESHOLD,
            total_participants=PLACEHOLDER_TOTAL_PARTICIPANTS,
        )
        self.participant_check = participant_check
        self._state: RotationState | None = None
        # One serialization point for state and config mutations
        self._lock = config.lock

    @classmethod
    def from_config(cls, participant_check: ParticipantCheck | None = None) -> RotationCoordinator:
        """Build a coordinator from the global settings.

        Raises:
            ConfigException: If the placeholder threshold exceeds the participant count.
        """
        from ..core.config import get_config

        settings = get_config()
        if settings.placeholder_threshold > settings.placeholder_total_participants:
            raise ConfigException(
                "Placeholder threshold exceeds total participants",
                setting="placeholder_threshold",
            )
        roles = TrustRoles(system=settings.system_address, scheduler=settings.scheduler_address)
        return cls(
            RotationConfig(roles, chain_id=settings.chain_id),
            threshold_config=ThresholdConfig(**settings.threshold_config),
            participant_check=participant_check,
        )

    @property
    def roles(self) -> TrustRoles:
        return self.config.roles

    @property
    def state(self) -> RotationState | None:
        """The rotation state, or None before initialize()."""
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, caller: str) -> None:
        """Create the rotation state.

        Raises:
            UnauthorizedError: Caller is not the system identity.
            AlreadyInitializedError: State already exists.
        """
        self.roles.require_system(caller)
        with self._lock:
            if self._state is not None:
                raise AlreadyInitializedError()
            self._state = RotationState()
        logger.info("Rotation state initialized at interval 0")

    def on_tick(self, caller: str, now: int) -> list[Signal]:
        """Advance the state machine with the current time in microseconds.

        Returns:
            Signals emitted by this tick, in emission order (also appended
            to the state's signal log). Empty when nothing rotated or when
            the state does not exist yet.

        Raises:
            UnauthorizedError: Caller is not the scheduler identity.
            ValidationException: now is not a non-negative integer.
        """
        self.roles.require_scheduler(caller)
        if isinstance(now, bool) or not isinstance(now, int) or now < 0:
            raise ValidationException("Tick time must be a non-negative integer", field="now", value=now)

        with self._lock:
            state = self._state
            if state is None:
                logger.debug("Tick before initialization ignored (now=%d)", now)
                return []

            if not state.clock_seeded:
                state.last_rotation_time = now
                state.clock_seeded = True
                logger.debug("Rotation clock seeded at %d", now)
                return []

            interval_duration = self.config.get_interval_duration()
            # A late or repeated timestamp never rotates and never moves the clock back
            if now - state.last_rotation_time <= interval_duration:
                return []

            closed = state.current_interval
            reveal = RevealRequested(interval=closed)
            state.signals.append(reveal)

            state.current_interval = closed + 1
            state.last_rotation_time = now
            started = RotationStarted(interval=state.current_interval, threshold_config=self.threshold_config)
            state.signals.append(started)

        logger.info(
            f"Rotated interval {closed} -> {started.interval} at {now}",
            extra={"extra_data": {"reveal": reveal.to_dict(), "rotation": started.to_dict()}},
        )
        return [reveal, started]

    # ------------------------------------------------------------------
    # Participant publications
    # ------------------------------------------------------------------

    def publish_public_key(self, caller: str, interval: int, key_bytes: bytes) -> bool:
        """Publish the public key for an interval. First write wins.

        Returns:
            True if stored, False if a key for the interval already existed.
        """
        return self._publish("public_keys", caller, interval, key_bytes)

    def publish_secret_share(self, caller: str, interval: int, share_bytes: bytes) -> bool:
        """Publish the aggregated secret for an interval. First write wins.

        The value is the output of threshold aggregation, not a raw
        per-participant share; aggregation happens before this call.

        Returns:
            True if stored, False if a secret for the interval already existed.
        """
        return self._publish("revealed_secrets", caller, interval, share_bytes)

    def _publish(self, store_name: str, caller: str, interval: int, payload: bytes) -> bool:
        interval = validate_interval(interval)
        payload = validate_payload(payload, field=store_name)

        if self.participant_check is None:
            # Open question: publishers are not authenticated by default.
            logger.debug("Unchecked publish to %s by %s for interval %d", store_name, caller, interval)
        elif not self.participant_check(caller, interval):
            raise UnauthorizedError(caller, "participant")

        with self._lock:
            state = self._state
            if state is None:
                raise NotInitializedError()
            store: IntervalStore = getattr(state, store_name)
            inserted = store.insert_if_absent(interval, payload)

        if inserted:
            logger.info(f"Stored {store_name} entry for interval {interval} from {caller}")
        else:
            logger.debug("Dropped duplicate %s entry for interval %d from %s", store_name, interval, caller)
        return inserted
