"""Tests for chronolock.rotation.coordinator - the rotation state machine."""

from __future__ import annotations

import logging
import threading

import pytest

from chronolock.core.exceptions import (
    AlreadyInitializedError,
    ConfigException,
    NotInitializedError,
    UnauthorizedError,
    ValidationException,
)
from chronolock.rotation.config import DEFAULT_INTERVAL_MICROS, RotationConfig, TrustRoles
from chronolock.rotation.coordinator import (
    PLACEHOLDER_THRESHOLD,
    PLACEHOLDER_TOTAL_PARTICIPANTS,
    RotationCoordinator,
)
from chronolock.rotation.queries import TimelockQueries
from chronolock.rotation.signals import RevealRequested, RotationStarted, ThresholdConfig

SYSTEM = "0x1"
SCHEDULER = "0x0"
OUTSIDER = "0xbad"
HOUR = DEFAULT_INTERVAL_MICROS


# ============================================================================
# Initialization
# ============================================================================


class TestInitialize:
    def test_initial_state(self, initialized):
        state = initialized.state

        assert initialized.is_initialized
        assert state.current_interval == 0
        assert state.last_rotation_time == 0
        assert state.signals == []
        assert len(state.public_keys) == 0
        assert len(state.revealed_secrets) == 0

    def test_requires_system(self, coordinator):
        with pytest.raises(UnauthorizedError):
            coordinator.initialize(SCHEDULER)
        assert coordinator.state is None

    def test_twice_fails(self, initialized):
        with pytest.raises(AlreadyInitializedError):
            initialized.initialize(SYSTEM)

    def test_default_threshold_is_placeholder(self, coordinator):
        assert coordinator.threshold_config == ThresholdConfig(
            threshold=PLACEHOLDER_THRESHOLD,
            total_participants=PLACEHOLDER_TOTAL_PARTICIPANTS,
        )
        assert (PLACEHOLDER_THRESHOLD, PLACEHOLDER_TOTAL_PARTICIPANTS) == (3, 4)


class TestFromConfig:
    def test_reads_settings(self, clean_env, monkeypatch):
        monkeypatch.setenv("CHRONOLOCK_SYSTEM_ADDRESS", "0xsys")
        monkeypatch.setenv("CHRONOLOCK_SCHEDULER_ADDRESS", "0xsched")
        monkeypatch.setenv("CHRONOLOCK_CHAIN_ID", "7")
        monkeypatch.setenv("CHRONOLOCK_PLACEHOLDER_THRESHOLD", "2")
        monkeypatch.setenv("CHRONOLOCK_PLACEHOLDER_TOTAL_PARTICIPANTS", "3")

        coordinator = RotationCoordinator.from_config()

        assert coordinator.roles == TrustRoles(system="0xsys", scheduler="0xsched")
        assert coordinator.config.chain_id == 7
        assert coordinator.threshold_config == ThresholdConfig(threshold=2, total_participants=3)

    def test_rejects_threshold_above_total(self, clean_env, monkeypatch):
        monkeypatch.setenv("CHRONOLOCK_PLACEHOLDER_THRESHOLD", "5")
        monkeypatch.setenv("CHRONOLOCK_PLACEHOLDER_TOTAL_PARTICIPANTS", "4")

        with pytest.raises(ConfigException):
            RotationCoordinator.from_config()


# ============================================================================
# Ticks
# ============================================================================


class TestOnTick:
    def test_requires_scheduler(self, initialized):
        with pytest.raises(UnauthorizedError) as exc_info:
            initialized.on_tick(SYSTEM, 0)
        assert exc_info.value.required_role == "scheduler"

    def test_unauthorized_tick_leaves_clock_unseeded(self, initialized):
        with pytest.raises(UnauthorizedError):
            initialized.on_tick(OUTSIDER, 5)

        initialized.on_tick(SCHEDULER, 100)
        assert initialized.state.last_rotation_time == 100

    @pytest.mark.parametrize("bad", [-1, 1.0, "0", True])
    def test_rejects_invalid_time(self, initialized, bad):
        with pytest.raises(ValidationException):
            initialized.on_tick(SCHEDULER, bad)

    def test_noop_before_initialize(self, coordinator):
        assert coordinator.on_tick(SCHEDULER, 10 * HOUR) == []
        assert coordinator.state is None

    def test_first_tick_seeds_clock(self, initialized):
        assert initialized.on_tick(SCHEDULER, 5 * HOUR) == []

        state = initialized.state
        assert state.current_interval == 0
        assert state.last_rotation_time == 5 * HOUR

    def test_first_tick_at_zero_then_rotation(self, initialized):
        initialized.on_tick(SCHEDULER, 0)

        signals = initialized.on_tick(SCHEDULER, HOUR + 1)

        assert [type(s) for s in signals] == [RevealRequested, RotationStarted]
        assert initialized.state.current_interval == 1

    def test_exact_duration_does_not_rotate(self, initialized):
        initialized.on_tick(SCHEDULER, 0)

        assert initialized.on_tick(SCHEDULER, HOUR) == []
        assert initialized.state.current_interval == 0
        assert initialized.state.last_rotation_time == 0

    def test_rotation_emits_ordered_signals(self, initialized):
        initialized.on_tick(SCHEDULER, 0)

        reveal, started = initialized.on_tick(SCHEDULER, HOUR + 1)

        assert reveal == RevealRequested(interval=0)
        assert started == RotationStarted(
            interval=1,
            threshold_config=ThresholdConfig(threshold=3, total_participants=4),
        )
        assert initialized.state.signals == [reveal, started]
        assert initialized.state.last_rotation_time == HOUR + 1

    def test_at_most_one_rotation_per_tick(self, initialized):
        initialized.on_tick(SCHEDULER, 0)

        signals = initialized.on_tick(SCHEDULER, 10 * HOUR)

        assert len(signals) == 2
        assert initialized.state.current_interval == 1
        assert initialized.state.last_rotation_time == 10 * HOUR

    def test_clock_measured_from_last_rotation(self, initialized):
        initialized.on_tick(SCHEDULER, 0)
        initialized.on_tick(SCHEDULER, HOUR + 1)

        assert initialized.on_tick(SCHEDULER, 2 * HOUR + 1) == []
        assert len(initialized.on_tick(SCHEDULER, 2 * HOUR + 2)) == 2
        assert initialized.state.current_interval == 2

    def test_time_going_backwards_never_rotates(self, initialized):
        initialized.on_tick(SCHEDULER, 5 * HOUR)

        assert initialized.on_tick(SCHEDULER, 0) == []
        assert initialized.state.last_rotation_time == 5 * HOUR

    def test_shortened_interval(self, initialized, rotation_config):
        rotation_config.set_interval_for_testing(SYSTEM, 10)
        initialized.on_tick(SCHEDULER, 0)

        assert initialized.on_tick(SCHEDULER, 10) == []
        assert len(initialized.on_tick(SCHEDULER, 11)) == 2

    def test_signal_log_is_interleaved(self, initialized):
        initialized.on_tick(SCHEDULER, 0)
        for step in range(1, 4):
            initialized.on_tick(SCHEDULER, step * (HOUR + 1))

        kinds = [(s.kind, s.interval) for s in initialized.state.signals]
        assert kinds == [
            ("reveal_requested", 0),
            ("rotation_started", 1),
            ("reveal_requested", 1),
            ("rotation_started", 2),
            ("reveal_requested", 2),
            ("rotation_started", 3),
        ]

    def test_interval_and_time_monotonic(self, initialized):
        initialized.on_tick(SCHEDULER, 0)
        prev_interval, prev_time = 0, 0
        for now in [HOUR // 2, 2 * HOUR, 2 * HOUR + 7, 3 * HOUR, 7 * HOUR, 7 * HOUR + 1, 9 * HOUR]:
            initialized.on_tick(SCHEDULER, now)
            state = initialized.state
            assert prev_interval <= state.current_interval <= prev_interval + 1
            assert state.last_rotation_time >= prev_time
            prev_interval, prev_time = state.current_interval, state.last_rotation_time

    def test_rotation_is_logged(self, initialized, caplog):
        initialized.on_tick(SCHEDULER, 0)

        with caplog.at_level(logging.INFO, logger="chronolock.rotation.coordinator"):
            initialized.on_tick(SCHEDULER, HOUR + 1)

        assert "Rotated interval 0 -> 1" in caplog.text


# ============================================================================
# Publications
# ============================================================================


class TestPublish:
    def test_public_key_first_write_wins(self, initialized):
        assert initialized.publish_public_key(OUTSIDER, 1, bytes([10])) is True
        assert initialized.publish_public_key(OUTSIDER, 1, bytes([99])) is False

        assert initialized.state.public_keys.get(1) == bytes([10])

    def test_secret_share_first_write_wins(self, initialized):
        assert initialized.publish_secret_share("0x2", 0, bytes([20])) is True
        assert initialized.publish_secret_share("0x3", 0, bytes([21])) is False

        assert initialized.state.revealed_secrets.get(0) == bytes([20])

    def test_publish_any_interval(self, initialized):
        """Publishing is not tied to the current interval."""
        assert initialized.publish_public_key(OUTSIDER, 1_000, b"future")
        assert initialized.publish_secret_share(OUTSIDER, 1_000, b"early")

    def test_empty_payload_accepted(self, initialized):
        assert initialized.publish_public_key(OUTSIDER, 2, b"") is True
        assert initialized.publish_public_key(OUTSIDER, 2, b"\x01") is False

    def test_publish_before_initialize(self, coordinator):
        with pytest.raises(NotInitializedError):
            coordinator.publish_public_key(OUTSIDER, 0, b"k")

    @pytest.mark.parametrize("bad", [-1, "1", None, 2**64])
    def test_invalid_interval(self, initialized, bad):
        with pytest.raises(ValidationException):
            initialized.publish_secret_share(OUTSIDER, bad, b"s")

    def test_invalid_payload(self, initialized):
        with pytest.raises(ValidationException):
            initialized.publish_public_key(OUTSIDER, 0, "not-bytes")

    def test_stores_are_independent(self, initialized):
        initialized.publish_public_key(OUTSIDER, 4, b"pk")

        assert initialized.state.revealed_secrets.get(4) is None


class TestParticipantCheck:
    @pytest.fixture
    def checked(self, rotation_config):
        allowed = {"0x2", "0x3"}
        coordinator = RotationCoordinator(
            rotation_config,
            participant_check=lambda caller, interval: caller in allowed,
        )
        coordinator.initialize(SYSTEM)
        return coordinator

    def test_allowed_participant(self, checked):
        assert checked.publish_public_key("0x2", 0, b"k") is True

    def test_rejected_caller(self, checked):
        with pytest.raises(UnauthorizedError) as exc_info:
            checked.publish_secret_share(OUTSIDER, 0, b"s")

        assert exc_info.value.required_role == "participant"
        assert checked.state.revealed_secrets.get(0) is None


# ============================================================================
# End-to-end scenario
# ============================================================================


class TestRotationScenario:
    def test_full_cycle(self, initialized):
        queries = TimelockQueries(initialized)

        assert initialized.on_tick(SCHEDULER, 0) == []
        assert queries.get_current_interval() == 0

        signals = initialized.on_tick(SCHEDULER, 3_600_000_001)
        assert signals == [
            RevealRequested(interval=0),
            RotationStarted(interval=1, threshold_config=ThresholdConfig(3, 4)),
        ]
        assert queries.get_current_interval() == 1

        initialized.publish_public_key(OUTSIDER, 1, bytes([10]))
        initialized.publish_public_key(OUTSIDER, 1, bytes([99]))
        assert queries.get_public_key(1) == bytes([10])

        initialized.publish_secret_share(OUTSIDER, 0, bytes([20]))
        assert queries.is_secret_revealed(0) is True
        assert queries.get_secret(0) == bytes([20])

    def test_state_to_dict(self, initialized):
        initialized.on_tick(SCHEDULER, 0)
        initialized.on_tick(SCHEDULER, HOUR + 1)
        initialized.publish_public_key(OUTSIDER, 1, b"\x0a")

        data = initialized.state.to_dict()

        assert data["current_interval"] == 1
        assert data["last_rotation_time"] == HOUR + 1
        assert data["public_keys"] == {"1": "0a"}
        assert data["revealed_secrets"] == {}
        assert data["signals"][1] == {
            "type": "rotation_started",
            "interval": 1,
            "threshold_config": {"threshold": 3, "total_participants": 4},
        }

    def test_roles_shared_with_config(self):
        roles = TrustRoles(system=SYSTEM, scheduler=SYSTEM)
        coordinator = RotationCoordinator(RotationConfig(roles, chain_id=4))
        coordinator.initialize(SYSTEM)

        assert coordinator.on_tick(SYSTEM, 0) == []
        assert coordinator.roles is roles


# ============================================================================
# Serialization
# ============================================================================


class TestSharedLock:
    """Ticks and config changes go through the same lock."""

    def test_coordinator_uses_config_lock(self, coordinator, rotation_config):
        assert coordinator._lock is rotation_config.lock

    def test_tick_waits_for_config_change(self, initialized, rotation_config):
        results: list = []
        worker = threading.Thread(target=lambda: results.append(initialized.on_tick(SCHEDULER, 0)))

        with rotation_config.lock:
            worker.start()
            worker.join(timeout=0.2)
            assert worker.is_alive()
            assert results == []

        worker.join(timeout=5)
        assert results == [[]]
        assert initialized.state.clock_seeded is True

    def test_config_change_is_reentrant_under_lock(self, initialized, rotation_config):
        with rotation_config.lock:
            rotation_config.set_interval_for_testing(SYSTEM, 10)

        assert initialized.config.get_interval_duration() == 10
