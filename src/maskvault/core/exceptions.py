# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for maskvault.

Authorization and input errors abort a request before anything is persisted.
Collaborator failures (entropy, storage) propagate unchanged. Declined consent
is not an error and never appears here.
"""

from __future__ import annotations

from typing import Any


class MaskVaultException(Exception):  # noqa: N818
    """Base exception for all maskvault errors."""

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


class UnauthorizedError(MaskVaultException):
    """Exception for authorization failures.

    Raised when:
    - Logging in with masks of an origin that never linked to the caller
    - Signing or reading a public key without an active session
    """

    def __init__(self, message: str, origin: str | None = None):
        details = {}
        if origin:
            details["origin"] = origin
        super().__init__(message, details)
        self.origin = origin


class ProtectedMethodError(UnauthorizedError):
    """A protected method was called from an origin other than the application site."""

    def __init__(self, method: str, origin: str):
        super().__init__(f"Method {method} can only be executed from the application site", origin)
        self.details["method"] = method
        self.method = method


class InvalidInputError(MaskVaultException, ValueError):
    """Exception for invalid input.

    Raised when:
    - An origin tries to link to itself
    - An identity index is out of range
    - A request body fails validation
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


class InvariantViolation(MaskVaultException):
    """A caller broke the request protocol; not recoverable by the user."""


class CollaboratorError(MaskVaultException):
    """Base class for failures of host-provided collaborators."""


class EntropyError(CollaboratorError):
    """The entropy source refused or failed to produce key material."""


class StorageError(CollaboratorError):
    """The encrypted state store failed to load or save."""

    def __init__(self, message: str, path: str | None = None):
        details = {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


class ConfigException(MaskVaultException):  # noqa: N818
    """Exception for configuration errors.

    Raised when required environment variables (seed, state key) are missing
    or malformed.
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []
