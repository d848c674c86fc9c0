"""Custom exceptions for the storefront client."""
from __future__ import annotations

from typing import Any


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class ValidationException(StorefrontException):
    """Checkout form validation errors, keyed by field name."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = dict(errors)


class CommerceApiError(StorefrontException):
    """Non-2xx or unreadable response from the commerce backend."""

    def __init__(self, status: int, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload


class AuthenticationException(StorefrontException):
    """Missing, invalid or expired customer session."""

    pass


class StorageException(StorefrontException):
    """Local storage backend errors."""

    pass
