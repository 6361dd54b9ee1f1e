# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Rotation interval configuration.

Holds the interval duration the coordinator compares elapsed time against.
The duration can be shortened for test networks, but the override is
refused on the production network no matter who asks: the check is on the
network identity, not on the caller's privilege.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from ..core.config import PRODUCTION_CHAIN_ID
from ..core.exceptions import (
    ProductionOverrideForbiddenError,
    UnauthorizedError,
    ValidationException,
)

logger = logging.getLogger(__name__)

# One hour, in microseconds
DEFAULT_INTERVAL_MICROS = 3_600_000_000


@dataclass(frozen=True)
class TrustRoles:
    """Distinguished identities allowed to drive the coordinator.

    Attributes:
        system: Identity for initialize() and configuration changes
        scheduler: Identity for on_tick()
    """

    system: str
    scheduler: str

    @classmethod
    def from_config(cls) -> TrustRoles:
        """Build roles from the global settings."""
        from ..core.config import get_config

        config = get_config()
        return cls(system=config.system_address, scheduler=config.scheduler_address)

    def require_system(self, caller: str) -> None:
        if caller != self.system:
            raise UnauthorizedError(caller, "system")

    def require_scheduler(self, caller: str) -> None:
        if caller != self.scheduler:
            raise UnauthorizedError(caller, "scheduler")


class RotationConfig:
    """Configured interval duration with environment-gated overrides.

    Args:
        roles: Trust roles; the system identity may change the config
        chain_id: Network identity consulted by set_interval_for_testing

    The lock is shared with the RotationCoordinator built on this config, so
    config changes and ticks are serialized against each other.
    """

    def __init__(self, roles: TrustRoles, chain_id: int) -> None:
        self.roles = roles
        self.chain_id = chain_id
        self._interval_duration_micros: int | None = None
        self.lock = threading.RLock()

    @property
    def is_configured(self) -> bool:
        return self._interval_duration_micros is not None

    def get_interval_duration(self) -> int:
        """Configured duration in microseconds, or the one-hour default."""
        duration = self._interval_duration_micros
        return DEFAULT_INTERVAL_MICROS if duration is None else duration

    def initialize(self, caller: str) -> None:
        """Set the default duration if nothing is configured yet."""
        self.roles.require_system(caller)
        with self.lock:
            if self._interval_duration_micros is None:
                self._interval_duration_micros = DEFAULT_INTERVAL_MICROS

    def set_interval_for_testing(self, caller: str, new_duration: int) -> None:
        """Override the interval duration on a non-production network.

        The production check runs before the role check, so every caller
        gets ProductionOverrideForbiddenError on production.

        Raises:
            ProductionOverrideForbiddenError: Network is production.
            UnauthorizedError: Caller is not the system identity.
            ValidationException: Duration is not a positive integer.
        """
        if self.chain_id == PRODUCTION_CHAIN_ID:
            raise ProductionOverrideForbiddenError(self.chain_id)
        self.roles.require_system(caller)
        if isinstance(new_duration, bool) or not isinstance(new_duration, int) or new_duration <= 0:
            raise ValidationException(
                "Interval duration must be a positive integer",
                field="new_duration",
                value=new_duration,
            )
        with self.lock:
            self._interval_duration_micros = new_duration
        logger.info(f"Interval duration overridden to {new_duration}us (chain_id={self.chain_id})")
