"""Tests for Currency, Money and PostalAddress value objects."""

from decimal import Decimal

import pytest

from checkout_kernel.domain.currency import CurrencyRegistry
from checkout_kernel.domain.values import Currency, Money, PostalAddress
from checkout_kernel.exceptions import CurrencyMismatchError, InvalidCurrencyError


class TestCurrency:
    def test_normalizes_code(self):
        assert Currency(" eur ").code == "EUR"

    def test_unknown_code_rejected(self):
        with pytest.raises(InvalidCurrencyError) as exc_info:
            Currency("XYZ")
        assert exc_info.value.currency == "XYZ"

    def test_non_string_rejected(self):
        with pytest.raises(InvalidCurrencyError):
            Currency(978)

    def test_minor_unit(self):
        assert Currency("EUR").minor_unit == Decimal("0.01")
        assert Currency("JPY").minor_unit == Decimal("1")

    def test_decimal_places(self):
        assert Currency("USD").decimal_places == 2
        assert Currency("JPY").decimal_places == 0

    def test_hashable_and_equal(self):
        assert {Currency("EUR"), Currency("eur")} == {Currency("EUR")}


class TestCurrencyRegistry:
    def test_registered_codes(self):
        codes = CurrencyRegistry.all_codes()
        assert "EUR" in codes
        assert "JPY" in codes
        assert len(codes) == 25

    def test_unknown_code_defaults(self):
        assert CurrencyRegistry.get_info("XYZ") is None
        assert CurrencyRegistry.get_decimal_places("XYZ") == 2
        assert CurrencyRegistry.get_rounding_tolerance("XYZ") == Decimal("0.01")


class TestMoneyConstruction:
    def test_from_string(self):
        money = Money.of("49.99", "EUR")
        assert money.amount == Decimal("49.99")
        assert money.currency == Currency("EUR")

    def test_from_int(self):
        assert Money.of(10, "USD").amount == Decimal("10")

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of(49.99, "EUR")

    def test_unparseable_amount_rejected(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            Money.of("forty", "EUR")

    def test_bad_currency_type_rejected(self):
        with pytest.raises(TypeError):
            Money(Decimal("1"), 978)

    def test_zero(self):
        assert Money.zero("EUR").is_zero
        assert not Money.of("-1", "EUR").is_zero
        assert Money.of("-1", "EUR").is_negative

    def test_str(self):
        assert str(Money.of("49.99", "EUR")) == "49.99 EUR"


class TestMoneyRounding:
    def test_round_half_up(self):
        assert Money.of("10.005", "EUR").round() == Money.of("10.01", "EUR")
        assert Money.of("10.004", "EUR").round() == Money.of("10.00", "EUR")

    def test_round_zero_decimal_currency(self):
        assert Money.of("100.5", "JPY").round() == Money.of("101", "JPY")

    def test_equal_after_rounding_ignores_trailing_zeros(self):
        assert Money.of("10", "EUR").round() == Money.of("10.00", "EUR")


class TestMoneyArithmetic:
    def test_add_and_sub(self):
        a = Money.of("10.00", "EUR")
        b = Money.of("2.50", "EUR")
        assert a + b == Money.of("12.50", "EUR")
        assert a - b == Money.of("7.50", "EUR")

    def test_neg_and_abs(self):
        a = Money.of("3.00", "EUR")
        assert -a == Money.of("-3.00", "EUR")
        assert abs(-a) == a

    def test_ordering(self):
        assert Money.of("1", "EUR") < Money.of("2", "EUR")
        assert Money.of("2", "EUR") >= Money.of("2", "EUR")

    def test_mixed_currency_arithmetic_rejected(self):
        with pytest.raises(CurrencyMismatchError) as exc_info:
            Money.of("1", "EUR") + Money.of("1", "USD")
        assert exc_info.value.expected == "EUR"
        assert exc_info.value.received == "USD"

    def test_mixed_currency_comparison_rejected(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "EUR") < Money.of("1", "USD")

    def test_mixed_currency_equality_is_false(self):
        assert Money.of("1", "EUR") != Money.of("1", "USD")
        assert not Money.of("1", "EUR").same_currency(Money.of("1", "USD"))


class TestPostalAddress:
    def test_all_fields_optional(self):
        address = PostalAddress()
        assert address.street is None
        assert address.country is None

    def test_immutable(self):
        address = PostalAddress(city="Berlin")
        with pytest.raises(AttributeError):
            address.city = "Hamburg"

    def test_value_equality(self):
        assert PostalAddress(city="Berlin") == PostalAddress(city="Berlin")
