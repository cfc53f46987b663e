"""
Reconciliation - Pure domain objects and engine for checkout confirmation.

The stateful composition with basket service and processor client lives in
checkout_services.payment_service.
"""

from checkout_engines.reconciliation.checkout_types import (
    AddressRelation,
    AddressSource,
    AddressSourceKind,
    ApprovedCheckoutDetails,
    BasketOwner,
    BasketSnapshot,
    CommunicationInformation,
    ReconciliationResult,
    Rejected,
    RejectionReason,
    TokenStatus,
    Validated,
)

from checkout_engines.reconciliation.address_fields import (
    ADDRESS_FIELDS,
    AddressField,
    fields_by_name,
    mismatched_fields,
)

from checkout_engines.reconciliation.amount_policy import (
    AmountPolicy,
    ExactMinorUnitAmountPolicy,
    MinorUnitToleranceAmountPolicy,
    AMOUNT_POLICY_NAMES,
    PROCESSOR_AMOUNT_POLICY,
    amount_policy_from_name,
)

from checkout_engines.reconciliation.reconciler import (
    CheckoutReconciler,
    resolve_delivery_address_source,
)

__all__ = [
    # Snapshots and results
    "AddressRelation",
    "AddressSource",
    "AddressSourceKind",
    "ApprovedCheckoutDetails",
    "BasketOwner",
    "BasketSnapshot",
    "CommunicationInformation",
    "ReconciliationResult",
    "Rejected",
    "RejectionReason",
    "TokenStatus",
    "Validated",
    # Address field table
    "ADDRESS_FIELDS",
    "AddressField",
    "fields_by_name",
    "mismatched_fields",
    # Amount policies
    "AmountPolicy",
    "ExactMinorUnitAmountPolicy",
    "MinorUnitToleranceAmountPolicy",
    "AMOUNT_POLICY_NAMES",
    "PROCESSOR_AMOUNT_POLICY",
    "amount_policy_from_name",
    # Engine
    "CheckoutReconciler",
    "resolve_delivery_address_source",
]
