"""
Tests for core exceptions and logging setup.
"""
import logging

from storefront.core.exceptions import (
    AuthenticationException,
    CommerceApiError,
    ConfigurationException,
    StorageException,
    StorefrontException,
    ValidationException,
)
from storefront.logging_config import setup_logging


class TestExceptions:
    """Test custom exceptions."""

    def test_base_exception_keeps_message(self):
        exc = StorefrontException("boom")
        assert exc.message == "boom"
        assert str(exc) == "boom"

    def test_subclasses(self):
        for cls in (ConfigurationException, AuthenticationException, StorageException):
            assert issubclass(cls, StorefrontException)

    def test_commerce_api_error(self):
        exc = CommerceApiError(400, "Sin stock", {"message": "Sin stock"})
        assert exc.status == 400
        assert exc.message == "Sin stock"
        assert exc.payload == {"message": "Sin stock"}
        assert isinstance(exc, StorefrontException)

    def test_validation_exception_keeps_field_errors(self):
        exc = ValidationException({"name": "Requerido", "phone": "Requerido"})
        assert exc.errors == {"name": "Requerido", "phone": "Requerido"}
        assert exc.message == "name: Requerido; phone: Requerido"


class TestLogging:
    """Test logging configuration."""

    def test_setup_logging_sets_level(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging("DEBUG")
        assert logging.getLogger("storefront").level == logging.DEBUG
        setup_logging("INFO")
        assert logging.getLogger("storefront").level == logging.INFO
