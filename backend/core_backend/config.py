"""
Centralized ledger configuration using the Singleton pattern.

Business logic reads ledger policy (currency, rounding tolerance, close
policy, document prefixes) through ``app_settings`` instead of reaching into
``django.conf.settings`` directly.
"""

from decimal import Decimal
from typing import Optional, Any
import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver

logger = logging.getLogger(__name__)


DEFAULTS = {
    "CURRENCY": "USD",
    "ROUNDING_TOLERANCE": Decimal("0.01"),
    "REQUIRE_SERVED_BEFORE_CLOSE": True,
    "ORDER_NUMBER_PREFIX": "DIN",
    "GOODS_RECEIPT_PREFIX": "GRN",
}


class AppSettings:
    """
    A LAZY singleton that exposes the RMS_LEDGER settings dict as attributes.
    Loading is deferred until the first attribute access so that importing a
    service module never touches settings at import time.
    """

    _instance: Optional["AppSettings"] = None
    _initialized: bool = False

    def __new__(cls) -> "AppSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def _setup(self):
        if not self._initialized:
            self.load_settings()
            self._initialized = True

    def __getattr__(self, name: str) -> Any:
        if not self._initialized:
            self._setup()

        try:
            return self.__dict__[name]
        except KeyError:
            raise AttributeError(f"'AppSettings' object has no attribute '{name}'")

    def load_settings(self) -> None:
        """
        Merge the RMS_LEDGER settings dict over the defaults and populate
        instance attributes.
        """
        configured = getattr(settings, "RMS_LEDGER", {}) or {}
        unknown = set(configured) - set(DEFAULTS)
        if unknown:
            raise ImproperlyConfigured(f"Unknown RMS_LEDGER keys: {', '.join(sorted(unknown))}")

        merged = {**DEFAULTS, **configured}

        self.currency: str = merged["CURRENCY"]
        self.rounding_tolerance: Decimal = Decimal(str(merged["ROUNDING_TOLERANCE"]))
        self.require_served_before_close: bool = bool(merged["REQUIRE_SERVED_BEFORE_CLOSE"])
        self.order_number_prefix: str = merged["ORDER_NUMBER_PREFIX"]
        self.goods_receipt_prefix: str = merged["GOODS_RECEIPT_PREFIX"]

    def reload(self) -> None:
        """
        Reload settings. Called when RMS_LEDGER is overridden (e.g. in tests).
        """
        self.load_settings()
        self._initialized = True
        logger.info("Ledger settings reloaded")

    def __str__(self) -> str:
        return (
            f"AppSettings(currency={self.currency}, "
            f"tolerance={self.rounding_tolerance}, "
            f"require_served_before_close={self.require_served_before_close})"
        )


# Create the singleton instance at module level
app_settings = AppSettings()


@receiver(setting_changed)
def reload_ledger_settings(sender, setting, **kwargs):
    if setting == "RMS_LEDGER":
        app_settings.reload()
