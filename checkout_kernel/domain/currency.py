"""Currency -- ISO 4217 registry for express-checkout currencies."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def rounding_tolerance(self) -> Decimal:
        """One minor unit of the currency."""
        if self.decimal_places == 0:
            return Decimal("1")
        return Decimal("0." + "0" * (self.decimal_places - 1) + "1")

    @property
    def quantize_string(self) -> str:
        """String for Decimal.quantize() to round to this currency's precision."""
        if self.decimal_places == 0:
            return "1"
        return "0." + "0" * self.decimal_places


class CurrencyRegistry:
    """Registry of currencies accepted by the express-checkout processor."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "AUD": CurrencyInfo("AUD", 2, "Australian Dollar"),
        "BRL": CurrencyInfo("BRL", 2, "Brazilian Real"),
        "CAD": CurrencyInfo("CAD", 2, "Canadian Dollar"),
        "CHF": CurrencyInfo("CHF", 2, "Swiss Franc"),
        "CNY": CurrencyInfo("CNY", 2, "Chinese Yuan"),
        "CZK": CurrencyInfo("CZK", 2, "Czech Koruna"),
        "DKK": CurrencyInfo("DKK", 2, "Danish Krone"),
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        "HKD": CurrencyInfo("HKD", 2, "Hong Kong Dollar"),
        "HUF": CurrencyInfo("HUF", 2, "Hungarian Forint"),
        "ILS": CurrencyInfo("ILS", 2, "Israeli New Shekel"),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen"),
        "MXN": CurrencyInfo("MXN", 2, "Mexican Peso"),
        "MYR": CurrencyInfo("MYR", 2, "Malaysian Ringgit"),
        "NOK": CurrencyInfo("NOK", 2, "Norwegian Krone"),
        "NZD": CurrencyInfo("NZD", 2, "New Zealand Dollar"),
        "PHP": CurrencyInfo("PHP", 2, "Philippine Peso"),
        "PLN": CurrencyInfo("PLN", 2, "Polish Zloty"),
        "RUB": CurrencyInfo("RUB", 2, "Russian Ruble"),
        "SEK": CurrencyInfo("SEK", 2, "Swedish Krona"),
        "SGD": CurrencyInfo("SGD", 2, "Singapore Dollar"),
        "THB": CurrencyInfo("THB", 2, "Thai Baht"),
        "TWD": CurrencyInfo("TWD", 2, "New Taiwan Dollar"),
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is registered."""
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        """Get one minor unit of the currency."""
        info = cls.get_info(code)
        if info:
            return info.rounding_tolerance
        return Decimal("0." + "0" * (cls.DEFAULT_DECIMAL_PLACES - 1) + "1")

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES.keys())
