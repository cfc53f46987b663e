"""
Checkout reconciliation domain types.

Pure frozen dataclasses exchanged between the basket service, the payment
processor client, the CheckoutReconciler (pure engine) and the
ExpressCheckoutPaymentService (imperative shell).

Architecture: checkout_engines/reconciliation -- pure domain, zero I/O.

Snapshots are produced once by a collaborator and never mutated; the
reconciler only reads them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

from checkout_kernel.domain.values import Money, PostalAddress


# =============================================================================
# Input types (produced by collaborators, consumed by engine)
# =============================================================================


@dataclass(frozen=True)
class BasketOwner:
    """The shop customer owning a basket, with their default (invoice) address."""

    owner_id: str
    invoice_address: PostalAddress


@dataclass(frozen=True)
class AddressRelation:
    """An explicit delivery address attached to a basket."""

    address_id: str
    address: PostalAddress


@dataclass(frozen=True)
class BasketSnapshot:
    """Calculated basket state at a point in time.

    ``gross_amount`` is None when the basket could not be priced; such a
    basket never matches an approved amount.
    """

    basket_id: str
    gross_amount: Money | None
    owner: BasketOwner
    delivery_address: AddressRelation | None = None

    @property
    def has_delivery_address(self) -> bool:
        return self.delivery_address is not None

    def with_delivery_address(self, relation: AddressRelation | None) -> BasketSnapshot:
        """Return a new snapshot carrying the given delivery-address relation."""
        return replace(self, delivery_address=relation)


@dataclass(frozen=True)
class ApprovedCheckoutDetails:
    """What the processor holds for a token once the buyer has approved it.

    ``payer_id`` is only present when approval was completed on the
    processor's site.
    """

    token: str
    approved_amount: Money
    approved_address: PostalAddress
    payer_id: str | None = None


# =============================================================================
# Output types
# =============================================================================


@dataclass(frozen=True)
class TokenStatus:
    """Approval status of an express-checkout token."""

    token: str
    is_approved: bool
    payer_id: str | None = None


class AddressSourceKind(str, Enum):
    """Where the delivery address used for comparison came from."""

    DELIVERY_ADDRESS = "delivery_address"
    OWNER_INVOICE_ADDRESS = "owner_invoice_address"


@dataclass(frozen=True)
class AddressSource:
    """The address the shop will deliver to, and where it was taken from."""

    kind: AddressSourceKind
    address: PostalAddress


class RejectionReason(str, Enum):
    """Why a basket was refused at confirmation time."""

    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    ADDRESS_MISMATCH = "ADDRESS_MISMATCH"


@dataclass(frozen=True)
class Validated:
    """The basket still matches the approved checkout and may proceed."""

    basket: BasketSnapshot

    @property
    def is_validated(self) -> bool:
        return True

    @property
    def basket_id(self) -> str:
        return self.basket.basket_id


@dataclass(frozen=True)
class Rejected:
    """The basket drifted from the approved checkout.

    ``details`` holds JSON-safe diagnostics (amounts as strings, mismatched
    field names as a tuple) for logs and the audit trail.  It is stored as a
    read-only mapping; values must be hashable.
    """

    reason: RejectionReason
    basket_id: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def __hash__(self) -> int:
        return hash((self.reason, self.basket_id, tuple(sorted(self.details.items()))))

    @property
    def is_validated(self) -> bool:
        return False


ReconciliationResult = Union[Validated, Rejected]


@dataclass(frozen=True)
class CommunicationInformation:
    """Token plus the processor URL the buyer is redirected to for approval."""

    token: str
    redirect_url: str
