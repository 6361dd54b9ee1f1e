# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core configuration - centralized config for the chronolock package.

All environment-based configuration should flow through this module.
This provides a single source of truth and consistent defaults.

Usage:
    from chronolock.core.config import get_config
    config = get_config()

    chain_id = config.chain_id
    log_level = config.log_level
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Chain id of the production network. Test-only overrides are refused there.
PRODUCTION_CHAIN_ID = 1

# Framework address, the default holder of both privileged roles.
FRAMEWORK_ADDRESS = "0x1"


class CoreSettings(BaseSettings):
    """Core configuration settings for Chronolock.

    Settings can be configured via environment variables with the
    CHRONOLOCK_ prefix, or from a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # NETWORK IDENTITY
    # ==========================================================================

    chain_id: int = Field(
        default=4,
        description="Network/chain identity. 1 is the production network.",
        validation_alias="CHRONOLOCK_CHAIN_ID",
    )

    # ==========================================================================
    # TRUST ROLES
    # ==========================================================================

    system_address: str = Field(
        default=FRAMEWORK_ADDRESS,
        description="Privileged system identity (initialize, config changes)",
        validation_alias="CHRONOLOCK_SYSTEM_ADDRESS",
    )
    scheduler_address: str = Field(
        default=FRAMEWORK_ADDRESS,
        description="Identity allowed to drive rotation ticks",
        validation_alias="CHRONOLOCK_SCHEDULER_ADDRESS",
    )

    # ==========================================================================
    # THRESHOLD PLACEHOLDERS
    # ==========================================================================
    # Not derived from any participant set; carried verbatim in RotationStarted.

    placeholder_threshold: int = Field(
        default=3,
        description="Threshold announced with each rotation (placeholder)",
        validation_alias="CHRONOLOCK_PLACEHOLDER_THRESHOLD",
    )
    placeholder_total_participants: int = Field(
        default=4,
        description="Participant count announced with each rotation (placeholder)",
        validation_alias="CHRONOLOCK_PLACEHOLDER_TOTAL_PARTICIPANTS",
    )

    # ==========================================================================
    # CRYPTO SETTINGS
    # ==========================================================================

    pairing_group: str = Field(
        default="bls12_381",
        description="Pairing backend: 'bls12_381' or 'simulated'",
        validation_alias="CHRONOLOCK_PAIRING_GROUP",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="CHRONOLOCK_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="CHRONOLOCK_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="CHRONOLOCK_LOG_FILE",
    )

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        """Whether the configured network is the production network."""
        return self.chain_id == PRODUCTION_CHAIN_ID

    @property
    def threshold_config(self) -> dict:
        """Placeholder threshold configuration announced on rotation."""
        return {
            "threshold": self.placeholder_threshold,
            "total_participants": self.placeholder_total_participants,
        }


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
