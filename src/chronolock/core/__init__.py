"""Chronolock Core - configuration, errors and logging shared by all modules."""

from .config import (
    FRAMEWORK_ADDRESS,
    PRODUCTION_CHAIN_ID,
    CoreSettings,
    clear_config_cache,
    get_config,
)
from .exceptions import (
    AlreadyInitializedError,
    ChronolockException,
    ConfigException,
    NotInitializedError,
    ProductionOverrideForbiddenError,
    UnauthorizedError,
    ValidationException,
)
from .logging import (
    configure_logging,
    correlation_context,
)

__all__ = [
    "FRAMEWORK_ADDRESS",
    "PRODUCTION_CHAIN_ID",
    "CoreSettings",
    "clear_config_cache",
    "get_config",
    "AlreadyInitializedError",
    "ChronolockException",
    "ConfigException",
    "NotInitializedError",
    "ProductionOverrideForbiddenError",
    "UnauthorizedError",
    "ValidationException",
    "configure_logging",
    "correlation_context",
]
