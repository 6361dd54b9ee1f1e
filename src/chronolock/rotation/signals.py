# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Signals emitted by the rotation coordinator.

Signals are the only channel through which participant processes learn to
start key generation for a new interval (RotationStarted) or to reveal and
aggregate the secret of a closed interval (RevealRequested).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class ThresholdConfig:
    """Threshold announced with a rotation.

    Placeholder values: they are not derived from any participant set.
    """

    threshold: int
    total_participants: int

    def to_dict(self) -> dict[str, int]:
        return {"threshold": self.threshold, "total_participants": self.total_participants}


@dataclass(frozen=True)
class RevealRequested:
    """The interval that just closed should now be revealed."""

    interval: int

    kind = "reveal_requested"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "interval": self.interval}


@dataclass(frozen=True)
class RotationStarted:
    """A new interval began; participants generate its keys."""

    interval: int
    threshold_config: ThresholdConfig

    kind = "rotation_started"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "interval": self.interval,
            "threshold_config": self.threshold_config.to_dict(),
        }


Signal = Union[RevealRequested, RotationStarted]
