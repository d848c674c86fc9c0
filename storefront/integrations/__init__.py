"""Integrations package - clients for external systems."""

from storefront.integrations.commerce_api import CommerceApiClient

__all__ = ["CommerceApiClient"]
