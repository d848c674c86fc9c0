"""Environment-driven settings and the store configuration document."""
from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront.core.constants import (
    ORDER_MODE_DIRECT,
    ORDER_MODES,
    PAYMENT_CASH,
    PAYMENT_TRANSFER,
    SHIPPING_DELIVERY,
    SHIPPING_PICKUP,
)
from storefront.core.exceptions import ConfigurationException


_CLOCK_TIME = re.compile(r"^(\d{1,2}):(\d{2})$")


class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# store-config.json
# =============================================================================


class BusinessInfo(_ConfigModel):
    name: str = ""
    phone: str = ""
    email: str = ""
    description: str = ""
    address: str = ""
    whatsapp: str = ""
    has_physical_store: bool = Field(False, alias="hasPhysicalStore")


class Shift(_ConfigModel):
    open: str
    close: str

    @field_validator("open", "close")
    @classmethod
    def validate_clock_time(cls, v: str) -> str:
        match = _CLOCK_TIME.match((v or "").strip())
        if not match or int(match.group(1)) > 23 or int(match.group(2)) > 59:
            raise ValueError(f"shift times must be HH:MM, got {v!r}")
        return match.group(0)


class DaySchedule(_ConfigModel):
    day_of_week: int = Field(..., alias="dayOfWeek", ge=0, le=6)
    is_open: bool = Field(False, alias="isOpen")
    shifts: list[Shift] = Field(default_factory=list)


class BusinessHours(_ConfigModel):
    enabled: bool = False
    timezone: str | None = None
    schedule: list[DaySchedule] = Field(default_factory=list)


class PickupOption(_ConfigModel):
    enabled: bool = False
    label: str = "Retiro en local"


class DeliveryOption(_ConfigModel):
    enabled: bool = False
    label: str = "Envío a domicilio"
    cost: float = Field(0, ge=0)
    free_above: float = Field(0, alias="freeAbove", ge=0)


class ShippingSettings(_ConfigModel):
    pickup: PickupOption = Field(default_factory=PickupOption)
    delivery: DeliveryOption = Field(default_factory=DeliveryOption)

    def enabled_methods(self) -> list[str]:
        methods = []
        if self.pickup.enabled:
            methods.append(SHIPPING_PICKUP)
        if self.delivery.enabled:
            methods.append(SHIPPING_DELIVERY)
        return methods

    def label_for(self, method: str) -> str:
        if method == SHIPPING_DELIVERY:
            return self.delivery.label
        return self.pickup.label


class TransferOption(_ConfigModel):
    enabled: bool = False
    label: str = "Transferencia bancaria"
    bank_name: str | None = Field(None, alias="bankName")
    cbu: str | None = None
    alias: str | None = None
    holder: str | None = None

    def details(self) -> dict[str, str]:
        """Bank-transfer data shown to the customer, empty fields omitted."""
        raw = {
            "bankName": self.bank_name,
            "cbu": self.cbu,
            "alias": self.alias,
            "holder": self.holder,
        }
        return {key: value for key, value in raw.items() if value}


class CashOption(_ConfigModel):
    enabled: bool = False
    label: str = "Efectivo"


class PaymentSettings(_ConfigModel):
    transfer: TransferOption = Field(default_factory=TransferOption)
    cash: CashOption = Field(default_factory=CashOption)

    def enabled_methods(self) -> list[str]:
        methods = []
        if self.transfer.enabled:
            methods.append(PAYMENT_TRANSFER)
        if self.cash.enabled:
            methods.append(PAYMENT_CASH)
        return methods

    def label_for(self, method: str) -> str:
        if method == PAYMENT_TRANSFER:
            return self.transfer.label
        return self.cash.label


class StoreSettings(_ConfigModel):
    show_stock: bool = Field(True, alias="showStock")
    allow_orders: bool = Field(True, alias="allowOrders")
    order_method: str = Field(ORDER_MODE_DIRECT, alias="orderMethod")
    show_prices: bool = Field(True, alias="showPrices")
    show_floating_whatsapp: bool = Field(False, alias="showFloatingWhatsapp")
    currency: str = "ARS"
    currency_symbol: str = Field("$", alias="currencySymbol")
    shipping: ShippingSettings = Field(default_factory=ShippingSettings)
    payment: PaymentSettings = Field(default_factory=PaymentSettings)

    @field_validator("order_method")
    @classmethod
    def validate_order_method(cls, v: str) -> str:
        method = (v or "").strip().lower()
        if method not in ORDER_MODES:
            raise ValueError(f"orderMethod must be one of {sorted(ORDER_MODES)}")
        return method


class StoreConfig(_ConfigModel):
    """Typed view of the store's ``store-config.json``."""

    store_id: str = Field(..., alias="storeId", min_length=1)
    api_url: str = Field(..., alias="apiUrl", min_length=1)
    business: BusinessInfo = Field(default_factory=BusinessInfo)
    business_hours: BusinessHours | None = Field(None, alias="businessHours")
    settings: StoreSettings = Field(default_factory=StoreSettings)

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def parse_store_config(data: dict[str, Any]) -> StoreConfig:
    try:
        return StoreConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationException(f"Invalid store configuration: {e}") from e


def load_store_config(
    path: str | Path,
    *,
    api_url: str | None = None,
    store_id: str | None = None,
) -> StoreConfig:
    """Read ``store-config.json`` and apply environment overrides."""
    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationException(f"Store configuration not found: {config_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationException(f"Cannot read store configuration {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationException("Store configuration must be a JSON object")
    if api_url:
        data["apiUrl"] = api_url
    if store_id:
        data["storeId"] = store_id
    return parse_store_config(data)


# =============================================================================
# Process settings
# =============================================================================


@dataclass(slots=True)
class ApiServerConfig:
    host: str
    port: int
    cors_origins: list[str]


@dataclass(slots=True)
class Settings:
    config_path: str
    api_url: str | None
    store_id: str | None
    http_timeout: float
    data_dir: str
    redis_url: str | None
    environment: str
    log_level: str
    api: ApiServerConfig

    @property
    def is_dev(self) -> bool:
        return self.environment in ("development", "dev", "local", "test")

    def store_config(self) -> StoreConfig:
        return load_store_config(self.config_path, api_url=self.api_url, store_id=self.store_id)


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    try:
        http_timeout = float(os.getenv("STOREFRONT_HTTP_TIMEOUT", "15"))
        port = int(os.getenv("PORT", "8000"))
    except ValueError as e:
        raise ConfigurationException(f"Invalid numeric setting: {e}") from e

    origins = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    api = ApiServerConfig(
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        cors_origins=origins,
    )

    return Settings(
        config_path=os.getenv("STOREFRONT_CONFIG_PATH", "config/store-config.json"),
        api_url=os.getenv("STOREFRONT_API_URL") or None,
        store_id=os.getenv("STOREFRONT_STORE_ID") or None,
        http_timeout=http_timeout,
        data_dir=os.getenv("STOREFRONT_DATA_DIR", "data"),
        redis_url=os.getenv("REDIS_URL") or None,
        environment=os.getenv("ENVIRONMENT", "production").strip().lower(),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        api=api,
    )
