"""Interval rotation: state machine, key-material stores and queries."""

from chronolock.rotation.config import (
    DEFAULT_INTERVAL_MICROS,
    RotationConfig,
    TrustRoles,
)
from chronolock.rotation.coordinator import (
    PLACEHOLDER_THRESHOLD,
    PLACEHOLDER_TOTAL_PARTICIPANTS,
    ParticipantCheck,
    RotationCoordinator,
    RotationState,
)
from chronolock.rotation.queries import TimelockQueries
from chronolock.rotation.signals import (
    RevealRequested,
    RotationStarted,
    Signal,
    ThresholdConfig,
)
from chronolock.rotation.store import (
    IntervalStore,
    MemoryIntervalStore,
)
from chronolock.rotation.validator_txns import (
    DKGTranscript,
    FirstShareAggregator,
    ShareAggregator,
    TimelockShare,
    ValidatorTxnProcessor,
)

__all__ = [
    "DEFAULT_INTERVAL_MICROS",
    "RotationConfig",
    "TrustRoles",
    "PLACEHOLDER_THRESHOLD",
    "PLACEHOLDER_TOTAL_PARTICIPANTS",
    "ParticipantCheck",
    "RotationCoordinator",
    "RotationState",
    "TimelockQueries",
    "RevealRequested",
    "RotationStarted",
    "Signal",
    "ThresholdConfig",
    "IntervalStore",
    "MemoryIntervalStore",
    "DKGTranscript",
    "FirstShareAggregator",
    "ShareAggregator",
    "TimelockShare",
    "ValidatorTxnProcessor",
]
