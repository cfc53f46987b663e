"""
Collaborator contracts consumed by the payment service.

The basket/pricing engine and the payment processor's API client are
external systems.  These protocols describe the only calls this library
makes on them; any object with matching methods can be wired in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from checkout_kernel.domain.values import Money
from checkout_engines.reconciliation.checkout_types import (
    AddressRelation,
    ApprovedCheckoutDetails,
    BasketOwner,
    BasketSnapshot,
)

# Opaque reference the host framework uses to identify a basket.
BasketRef = Any


@dataclass(frozen=True)
class SetExpressCheckoutResponse:
    """Processor reply to starting an express checkout."""

    token: str


@runtime_checkable
class BasketService(Protocol):
    def get_calculated_basket(self, basket_ref: BasketRef) -> BasketSnapshot:
        """Priced basket state for the reference, as of now."""
        ...

    def get_delivery_address_relation(
        self, basket_ref: BasketRef,
    ) -> AddressRelation | None:
        """Explicit delivery address attached to the basket, if any."""
        ...


@runtime_checkable
class PaymentProcessorClient(Protocol):
    def get_express_checkout_details(self, token: str) -> ApprovedCheckoutDetails:
        ...

    def set_express_checkout(
        self,
        basket: BasketSnapshot,
        owner: BasketOwner,
        return_url: str,
        cancel_url: str,
        display_basket_in_processor: bool,
        ship_to_address_id: str | None,
    ) -> SetExpressCheckoutResponse:
        ...

    def validate_approved_amount(self, local: Money | None, approved: Money) -> bool:
        ...

    def build_communication_url(self, token: str) -> str:
        """URL the buyer is redirected to in order to approve the token."""
        ...
