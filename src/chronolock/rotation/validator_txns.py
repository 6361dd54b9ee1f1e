# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Processing of participant results delivered as validator transactions.

Participants run key generation and reveal off to the side and hand their
results back as two payload types:

- DKGTranscript: the public key produced for an epoch. Published as the
  public key of interval == epoch.
- TimelockShare: one participant's share of an interval's secret. Shares go
  through a ShareAggregator; when it yields an aggregate, the aggregate is
  published as the interval's revealed secret.

Both are applied as the system identity, so the coordinator's stores only
ever see results that passed through this dispatcher.

Real threshold aggregation is not implemented here. FirstShareAggregator
treats the first share it sees for an interval as the aggregate, matching
the coordinator's first-write-wins behavior; swap in a real aggregator by
passing another ShareAggregator.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from .coordinator import RotationCoordinator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DKGTranscript:
    """Output of key generation for one epoch."""

    epoch: int
    author: str
    transcript_bytes: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "epoch": self.epoch,
            "author": self.author,
            "transcript_bytes": self.transcript_bytes.hex(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DKGTranscript:
        return cls(
            epoch=int(data["epoch"]),
            author=data["author"],
            transcript_bytes=bytes.fromhex(data["transcript_bytes"]),
        )


@dataclass(frozen=True)
class TimelockShare:
    """One participant's share of an interval's secret."""

    interval: int
    author: str
    share: bytes

    def to_dict(self) -> dict[str, Any]:
        return {"interval": self.interval, "author": self.author, "share": self.share.hex()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimelockShare:
        return cls(
            interval=int(data["interval"]),
            author=data["author"],
            share=bytes.fromhex(data["share"]),
        )


class ShareAggregator(ABC):
    """Combines per-participant shares into one revealed secret."""

    @abstractmethod
    def add_share(self, share: TimelockShare) -> bytes | None:
        """Record a share.

        Returns:
            The aggregated secret once available, otherwise None.
        """


class FirstShareAggregator(ShareAggregator):
    """Placeholder aggregator: the first share per interval is the aggregate."""

    def __init__(self) -> None:
        self._seen: set[int] = set()
        self._lock = threading.Lock()

    def add_share(self, share: TimelockShare) -> bytes | None:
        with self._lock:
            if share.interval in self._seen:
                return None
            self._seen.add(share.interval)
        return share.share


class ValidatorTxnProcessor:
    """Applies participant results to a coordinator as the system identity."""

    def __init__(
        self,
        coordinator: RotationCoordinator,
        aggregator: ShareAggregator | None = None,
    ) -> None:
        self.coordinator = coordinator
        self.aggregator = aggregator or FirstShareAggregator()

    def process_dkg_result(self, transcript: DKGTranscript) -> bool:
        """Publish a transcript's key as the public key of interval == epoch."""
        logger.debug("Processing DKG transcript for epoch %d from %s", transcript.epoch, transcript.author)
        return self.coordinator.publish_public_key(
            self.coordinator.roles.system,
            transcript.epoch,
            transcript.transcript_bytes,
        )

    def process_timelock_share(self, share: TimelockShare) -> bool:
        """Feed a share to the aggregator and publish the aggregate if one results.

        Returns:
            True if a revealed secret was stored by this call.
        """
        aggregate = self.aggregator.add_share(share)
        if aggregate is None:
            logger.debug("Share for interval %d from %s held by aggregator", share.interval, share.author)
            return False
        return self.coordinator.publish_secret_share(
            self.coordinator.roles.system,
            share.interval,
            aggregate,
        )
