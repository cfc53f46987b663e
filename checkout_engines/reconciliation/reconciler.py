"""
CheckoutReconciler -- Pure engine deciding whether a basket may become an order.

Compares the basket the shop is about to turn into an order with what the
buyer approved on the processor's site during express checkout.

Architecture: checkout_engines -- pure calculation, zero I/O, zero DB access.
All inputs are frozen dataclasses populated by the service layer.

Checks, in order (the first failure decides the rejection reason):
    1. Amount   basket gross amount vs approved amount (amount policy)
    2. Address  resolved delivery address vs approved address (field table)

On success the original basket snapshot is returned unchanged.
"""

from __future__ import annotations

from checkout_kernel.domain.values import Money, PostalAddress
from checkout_kernel.logging_config import get_logger
from checkout_engines.tracer import traced_engine

from checkout_engines.reconciliation.address_fields import (
    ADDRESS_FIELDS,
    AddressField,
    mismatched_fields,
)
from checkout_engines.reconciliation.amount_policy import (
    AmountPolicy,
    ExactMinorUnitAmountPolicy,
)
from checkout_engines.reconciliation.checkout_types import (
    AddressSource,
    AddressSourceKind,
    ApprovedCheckoutDetails,
    BasketSnapshot,
    ReconciliationResult,
    Rejected,
    RejectionReason,
    TokenStatus,
    Validated,
)

logger = get_logger("engines.reconciliation.reconciler")

_ENGINE_NAME = "checkout_reconciliation"
_ENGINE_VERSION = "1.0"


def resolve_delivery_address_source(basket: BasketSnapshot) -> AddressSource:
    """The address the shop will deliver to.

    An explicit delivery-address relation wins; without one the basket
    owner's invoice address is the delivery address.
    """
    if basket.delivery_address is not None:
        return AddressSource(
            kind=AddressSourceKind.DELIVERY_ADDRESS,
            address=basket.delivery_address.address,
        )
    return AddressSource(
        kind=AddressSourceKind.OWNER_INVOICE_ADDRESS,
        address=basket.owner.invoice_address,
    )


class CheckoutReconciler:
    """Pure engine for checkout confirmation checks.

    Stateless apart from its amount policy and address field table, both
    fixed at construction.  Safe to share across requests.

    Usage:
        reconciler = CheckoutReconciler()
        result = reconciler.reconcile(basket, approved_details)
        if not result.is_validated:
            ...
    """

    def __init__(
        self,
        amount_policy: AmountPolicy | None = None,
        address_fields: tuple[AddressField, ...] = ADDRESS_FIELDS,
    ) -> None:
        self._amount_policy = amount_policy or ExactMinorUnitAmountPolicy()
        self._address_fields = address_fields

    @property
    def compared_address_fields(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self._address_fields)

    # -----------------------------------------------------------------
    # Token status
    # -----------------------------------------------------------------

    @traced_engine(_ENGINE_NAME, _ENGINE_VERSION, fingerprint_fields=("token",))
    def derive_token_status(
        self,
        token: str,
        details: ApprovedCheckoutDetails,
    ) -> TokenStatus:
        """Approved iff the processor returned a payer id.

        The processor only reports a payer once the buyer finished approval
        on its site.  An empty payer id is treated as absent.
        """
        payer_id = details.payer_id if details.payer_id else None
        return TokenStatus(
            token=token,
            is_approved=payer_id is not None,
            payer_id=payer_id,
        )

    # -----------------------------------------------------------------
    # Amount
    # -----------------------------------------------------------------

    def validate_amount(
        self,
        local_gross_amount: Money | None,
        approved_amount: Money,
    ) -> bool:
        return bool(self._amount_policy(local_gross_amount, approved_amount))

    # -----------------------------------------------------------------
    # Address
    # -----------------------------------------------------------------

    def resolve_delivery_address_source(self, basket: BasketSnapshot) -> AddressSource:
        return resolve_delivery_address_source(basket)

    def mismatched_address_fields(
        self,
        resolved_address: PostalAddress,
        approved_address: PostalAddress,
    ) -> tuple[str, ...]:
        return mismatched_fields(resolved_address, approved_address, self._address_fields)

    def validate_address(
        self,
        resolved_address: PostalAddress,
        approved_address: PostalAddress,
    ) -> bool:
        return not self.mismatched_address_fields(resolved_address, approved_address)

    # -----------------------------------------------------------------
    # Orchestrator
    # -----------------------------------------------------------------

    @traced_engine(
        _ENGINE_NAME, _ENGINE_VERSION,
        fingerprint_fields=("basket", "approved_details"),
    )
    def reconcile(
        self,
        basket: BasketSnapshot,
        approved_details: ApprovedCheckoutDetails,
    ) -> ReconciliationResult:
        """Amount check, then address check; first failure wins."""
        if not self.validate_amount(basket.gross_amount, approved_details.approved_amount):
            return Rejected(
                reason=RejectionReason.AMOUNT_MISMATCH,
                basket_id=basket.basket_id,
                details={
                    "local_amount": (
                        str(basket.gross_amount) if basket.gross_amount is not None else None
                    ),
                    "approved_amount": str(approved_details.approved_amount),
                },
            )

        source = self.resolve_delivery_address_source(basket)
        mismatches = self.mismatched_address_fields(
            source.address, approved_details.approved_address,
        )
        if mismatches:
            logger.debug(
                "address_fields_mismatched",
                extra={
                    "basket_id": basket.basket_id,
                    "address_source": source.kind.value,
                    "mismatched_fields": mismatches,
                },
            )
            return Rejected(
                reason=RejectionReason.ADDRESS_MISMATCH,
                basket_id=basket.basket_id,
                details={
                    "address_source": source.kind.value,
                    "mismatched_fields": mismatches,
                },
            )

        return Validated(basket=basket)
