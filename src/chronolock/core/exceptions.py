# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for Chronolock.

Provides specific exception types for the failure modes of the rotation
coordinator. Every error aborts the attempted operation without a partial
state change. Absent data (no state yet, nothing published for an interval)
is never an error; it is a normal return value.
"""

from __future__ import annotations

from typing import Any


class ChronolockException(Exception):  # noqa: N818
    """Base exception for all Chronolock errors.

    All Chronolock-specific exceptions should inherit from this class.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class UnauthorizedError(ChronolockException):
    """Raised when a caller lacks the role an operation requires.

    Raised when:
    - initialize() is called by anyone but the system identity
    - on_tick() is called by anyone but the scheduler identity
    - a participant check rejects a publisher
    """

    def __init__(self, caller: str, required_role: str):
        message = f"Caller {caller} is not authorized (requires {required_role})"
        super().__init__(message, {"caller": caller, "required_role": required_role})
        self.caller = caller
        self.required_role = required_role


class AlreadyInitializedError(ChronolockException):
    """Raised on a second initialize() of the rotation state."""

    def __init__(self, resource: str = "RotationState"):
        super().__init__(f"{resource} is already initialized", {"resource": resource})
        self.resource = resource


class NotInitializedError(ChronolockException):
    """Raised when an operation that must fail requires state that does not exist yet."""

    def __init__(self, resource: str = "RotationState"):
        super().__init__(f"{resource} is not initialized", {"resource": resource})
        self.resource = resource


class ProductionOverrideForbiddenError(ChronolockException):
    """Raised when a test-only config change is attempted on the production network."""

    def __init__(self, chain_id: int):
        super().__init__(
            f"Test-only override is forbidden on production network (chain_id={chain_id})",
            {"chain_id": chain_id},
        )
        self.chain_id = chain_id


class ValidationException(ChronolockException):
    """Exception for validation errors.

    Raised when:
    - An interval number is negative or not an integer
    - A payload is not bytes-like
    - A configured duration is not a positive integer
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ConfigException(ChronolockException):
    """Exception for configuration errors.

    Raised when:
    - A configured backend name is unknown
    - Settings values are inconsistent
    """

    def __init__(self, message: str, setting: str | None = None):
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)
        self.setting = setting
