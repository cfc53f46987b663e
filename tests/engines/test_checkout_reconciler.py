"""
Tests for CheckoutReconciler.

Covers token status, amount check, delivery address resolution, address
check and the reconcile orchestrator (check order, rejection reasons,
purity).
"""

from decimal import Decimal

import pytest

from checkout_kernel.domain.values import Money, PostalAddress
from checkout_engines.reconciliation.amount_policy import MinorUnitToleranceAmountPolicy
from checkout_engines.reconciliation.address_fields import fields_by_name
from checkout_engines.reconciliation.checkout_types import (
    AddressRelation,
    AddressSourceKind,
    ApprovedCheckoutDetails,
    BasketOwner,
    BasketSnapshot,
    Rejected,
    RejectionReason,
    TokenStatus,
    Validated,
)
from checkout_engines.reconciliation.reconciler import (
    CheckoutReconciler,
    resolve_delivery_address_source,
)


@pytest.fixture
def reconciler():
    return CheckoutReconciler()


def _address(**overrides):
    """Helper to build a Berlin PostalAddress."""
    fields = dict(
        street="Invalidenstrasse",
        street_number="117",
        city="Berlin",
        postal_code="10115",
        country="DE",
        company=None,
        additional_info=None,
    )
    fields.update(overrides)
    return PostalAddress(**fields)


def _basket(
    basket_id="basket-1",
    gross="49.99",
    currency="EUR",
    invoice_address=None,
    delivery_address=None,
):
    """Helper to build a BasketSnapshot."""
    return BasketSnapshot(
        basket_id=basket_id,
        gross_amount=Money.of(gross, currency) if gross is not None else None,
        owner=BasketOwner(
            owner_id="user-1",
            invoice_address=invoice_address or _address(),
        ),
        delivery_address=(
            AddressRelation(address_id="addr-9", address=delivery_address)
            if delivery_address is not None else None
        ),
    )


def _details(amount="49.99", currency="EUR", address=None, payer_id="PAYER42", token="TOKEN1"):
    """Helper to build ApprovedCheckoutDetails."""
    return ApprovedCheckoutDetails(
        token=token,
        approved_amount=Money.of(amount, currency),
        approved_address=address or _address(),
        payer_id=payer_id,
    )


# =============================================================================
# Token status
# =============================================================================


class TestDeriveTokenStatus:
    def test_payer_id_present_is_approved(self, reconciler):
        status = reconciler.derive_token_status("TOKEN1", _details(payer_id="PAYER42"))
        assert status == TokenStatus(token="TOKEN1", is_approved=True, payer_id="PAYER42")

    def test_payer_id_absent_not_approved(self, reconciler):
        status = reconciler.derive_token_status("TOKEN1", _details(payer_id=None))
        assert status.is_approved is False
        assert status.payer_id is None

    def test_empty_payer_id_not_approved_and_absent(self, reconciler):
        status = reconciler.derive_token_status("TOKEN1", _details(payer_id=""))
        assert status.is_approved is False
        assert status.payer_id is None

    def test_payer_id_echoed_verbatim(self, reconciler):
        status = reconciler.derive_token_status("T", _details(payer_id=" Payer-7 "))
        assert status.payer_id == " Payer-7 "

    def test_token_taken_from_argument(self, reconciler):
        status = reconciler.derive_token_status("OTHER", _details(token="TOKEN1"))
        assert status.token == "OTHER"


# =============================================================================
# Amount
# =============================================================================


class TestValidateAmount:
    def test_equal_amounts(self, reconciler):
        assert reconciler.validate_amount(Money.of("49.99", "EUR"), Money.of("49.99", "EUR"))

    def test_different_amounts(self, reconciler):
        assert not reconciler.validate_amount(Money.of("49.99", "EUR"), Money.of("39.99", "EUR"))

    def test_equal_at_minor_unit(self, reconciler):
        assert reconciler.validate_amount(Money.of("49.990", "EUR"), Money.of("49.99", "EUR"))

    def test_missing_local_amount(self, reconciler):
        assert not reconciler.validate_amount(None, Money.of("49.99", "EUR"))

    def test_different_currency(self, reconciler):
        assert not reconciler.validate_amount(Money.of("49.99", "USD"), Money.of("49.99", "EUR"))

    def test_custom_policy_is_used(self):
        calls = []

        def policy(local, approved):
            calls.append((local, approved))
            return True

        reconciler = CheckoutReconciler(amount_policy=policy)
        assert reconciler.validate_amount(Money.of("1", "EUR"), Money.of("2", "EUR"))
        assert calls == [(Money.of("1", "EUR"), Money.of("2", "EUR"))]

    def test_tolerance_policy(self):
        reconciler = CheckoutReconciler(amount_policy=MinorUnitToleranceAmountPolicy())
        assert reconciler.validate_amount(Money.of("49.99", "EUR"), Money.of("50.00", "EUR"))
        assert not reconciler.validate_amount(Money.of("49.98", "EUR"), Money.of("50.00", "EUR"))


# =============================================================================
# Delivery address source
# =============================================================================


class TestResolveDeliveryAddressSource:
    def test_explicit_delivery_address_wins(self, reconciler):
        delivery = _address(city="Hamburg", postal_code="20095")
        basket = _basket(delivery_address=delivery)

        source = reconciler.resolve_delivery_address_source(basket)

        assert source.kind == AddressSourceKind.DELIVERY_ADDRESS
        assert source.address == delivery

    def test_falls_back_to_owner_invoice_address(self, reconciler):
        invoice = _address(street="Torstrasse", street_number="1")
        basket = _basket(invoice_address=invoice)

        source = reconciler.resolve_delivery_address_source(basket)

        assert source.kind == AddressSourceKind.OWNER_INVOICE_ADDRESS
        assert source.address == invoice

    def test_module_function_matches_method(self, reconciler):
        basket = _basket()
        assert resolve_delivery_address_source(basket) == reconciler.resolve_delivery_address_source(basket)


# =============================================================================
# Address
# =============================================================================


class TestValidateAddress:
    def test_identical_addresses(self, reconciler):
        assert reconciler.validate_address(_address(), _address())

    def test_postal_code_differs(self, reconciler):
        resolved = _address(postal_code="10117")
        approved = _address(postal_code="10115")
        assert not reconciler.validate_address(resolved, approved)
        assert reconciler.mismatched_address_fields(resolved, approved) == ("postal_code",)

    def test_field_absent_from_approved_not_checked(self, reconciler):
        resolved = _address(company="ACME GmbH")
        approved = _address(company=None)
        assert reconciler.validate_address(resolved, approved)

    def test_field_present_on_approved_missing_on_resolved(self, reconciler):
        resolved = _address(company=None)
        approved = _address(company="ACME GmbH")
        assert reconciler.mismatched_address_fields(resolved, approved) == ("company",)

    def test_empty_approved_value_matches_missing_resolved(self, reconciler):
        resolved = _address(additional_info=None)
        approved = _address(additional_info="")
        assert reconciler.validate_address(resolved, approved)

    def test_multiple_mismatches_in_table_order(self, reconciler):
        resolved = _address(country="AT", street="Ringstrasse")
        approved = _address()
        assert reconciler.mismatched_address_fields(resolved, approved) == ("street", "country")

    def test_names_outside_table_ignored(self, reconciler):
        resolved = _address(first_name="Ada")
        approved = _address(first_name="Grace")
        assert reconciler.validate_address(resolved, approved)

    def test_configured_table_checks_names(self):
        reconciler = CheckoutReconciler(
            address_fields=fields_by_name(["postal_code", "first_name"]),
        )
        resolved = _address(first_name="Ada", street="Elsewhere")
        approved = _address(first_name="Grace")
        assert reconciler.mismatched_address_fields(resolved, approved) == ("first_name",)
        assert reconciler.compared_address_fields == ("postal_code", "first_name")


# =============================================================================
# Orchestrator
# =============================================================================


class TestReconcile:
    def test_matching_basket_validated(self, reconciler):
        basket = _basket(gross="49.99")
        result = reconciler.reconcile(basket, _details(amount="49.99"))

        assert result == Validated(basket=basket)
        assert result.is_validated
        assert result.basket is basket

    def test_amount_mismatch(self, reconciler):
        result = reconciler.reconcile(_basket(gross="49.99"), _details(amount="39.99"))

        assert isinstance(result, Rejected)
        assert result.reason == RejectionReason.AMOUNT_MISMATCH
        assert result.basket_id == "basket-1"
        assert result.details == {
            "local_amount": "49.99 EUR",
            "approved_amount": "39.99 EUR",
        }

    def test_amount_checked_before_address(self, reconciler):
        result = reconciler.reconcile(
            _basket(gross="49.99"),
            _details(amount="39.99", address=_address(postal_code="99999")),
        )
        assert result.reason == RejectionReason.AMOUNT_MISMATCH

    def test_unpriced_basket_is_amount_mismatch(self, reconciler):
        result = reconciler.reconcile(_basket(gross=None), _details())
        assert result.reason == RejectionReason.AMOUNT_MISMATCH
        assert result.details["local_amount"] is None

    def test_address_mismatch(self, reconciler):
        basket = _basket(invoice_address=_address(postal_code="10117"))
        result = reconciler.reconcile(basket, _details(address=_address(postal_code="10115")))

        assert isinstance(result, Rejected)
        assert result.reason == RejectionReason.ADDRESS_MISMATCH
        assert result.basket_id == "basket-1"
        assert result.details["mismatched_fields"] == ("postal_code",)
        assert result.details["address_source"] == "owner_invoice_address"

    def test_delivery_address_compared_not_invoice(self, reconciler):
        approved = _address(city="Hamburg", postal_code="20095")
        basket = _basket(
            invoice_address=_address(),
            delivery_address=approved,
        )
        result = reconciler.reconcile(basket, _details(address=approved))
        assert result.is_validated

    def test_delivery_address_mismatch_reports_source(self, reconciler):
        basket = _basket(
            invoice_address=_address(),
            delivery_address=_address(city="Hamburg", postal_code="20095"),
        )
        result = reconciler.reconcile(basket, _details(address=_address()))
        assert result.reason == RejectionReason.ADDRESS_MISMATCH
        assert result.details["address_source"] == "delivery_address"
        assert result.details["mismatched_fields"] == ("city", "postal_code")

    def test_owner_address_used_without_relation(self, reconciler):
        owner_address = _address(street="Torstrasse", street_number="1")
        basket = _basket(invoice_address=owner_address)
        result = reconciler.reconcile(basket, _details(address=owner_address))
        assert result == Validated(basket=basket)

    def test_idempotent(self, reconciler):
        basket = _basket(invoice_address=_address(postal_code="10117"))
        details = _details()
        assert reconciler.reconcile(basket, details) == reconciler.reconcile(basket, details)

    def test_inputs_not_mutated(self, reconciler):
        basket = _basket(delivery_address=_address(city="Hamburg"))
        details = _details(amount="12.00")

        reconciler.reconcile(basket, details)

        assert basket == _basket(delivery_address=_address(city="Hamburg"))
        assert details == _details(amount="12.00")

    def test_rejection_is_immutable_and_hashable(self, reconciler):
        basket = _basket(invoice_address=_address(postal_code="10117"))
        result = reconciler.reconcile(basket, _details())

        with pytest.raises(TypeError):
            result.details["mismatched_fields"] = ()
        assert hash(result) == hash(reconciler.reconcile(basket, _details()))
        assert len({result, reconciler.reconcile(basket, _details())}) == 1

    def test_rejection_copies_caller_details(self):
        details = {"local_amount": None, "approved_amount": "1.00 EUR"}
        result = Rejected(RejectionReason.AMOUNT_MISMATCH, "basket-1", details)
        details["approved_amount"] = "2.00 EUR"

        assert result.details["approved_amount"] == "1.00 EUR"

    def test_zero_decimal_currency(self, reconciler):
        basket = _basket(gross="5000", currency="JPY")
        result = reconciler.reconcile(basket, _details(amount="5000", currency="JPY"))
        assert result.is_validated

    def test_emits_engine_trace(self, reconciler, captured_logs):
        reconciler.reconcile(_basket(), _details())

        traces = [r for r in captured_logs() if r["message"] == "CHECKOUT_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "checkout_reconciliation"
        assert traces[0]["function"] == "CheckoutReconciler.reconcile"
        assert len(traces[0]["input_fingerprint"]) == 16


class TestScenarios:
    """End-to-end decision scenarios for checkout confirmation."""

    def test_same_amount_same_address(self, reconciler):
        basket = _basket(gross="49.99")
        assert reconciler.reconcile(basket, _details(amount="49.99")) == Validated(basket=basket)

    def test_lower_approved_amount(self, reconciler):
        result = reconciler.reconcile(_basket(gross="49.99"), _details(amount="39.99"))
        assert (result.reason, result.basket_id) == (RejectionReason.AMOUNT_MISMATCH, "basket-1")

    def test_changed_postal_code(self, reconciler):
        basket = _basket(invoice_address=_address(postal_code="10117"))
        result = reconciler.reconcile(basket, _details(address=_address(postal_code="10115")))
        assert (result.reason, result.basket_id) == (RejectionReason.ADDRESS_MISMATCH, "basket-1")

    def test_token_status(self, reconciler):
        status = reconciler.derive_token_status("TOKEN1", _details(payer_id="PAYER42"))
        assert (status.token, status.is_approved, status.payer_id) == ("TOKEN1", True, "PAYER42")

    def test_amount_precision(self, reconciler):
        basket = _basket(gross=Decimal("49.99"))
        assert reconciler.reconcile(basket, _details(amount="49.99")).is_validated
