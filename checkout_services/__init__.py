"""
checkout_services -- Package init and public API.

Responsibility:
    Stateful composition of the pure checkout engines with the external
    collaborators (basket service, payment processor client) and the
    optional audit recorder.  This is the only layer that calls
    collaborators.

Architecture position:
    Services -- imperative shell over engines + kernel.

        checkout_services/ -> checkout_engines/  (allowed)
        checkout_services/ -> checkout_kernel/   (allowed)
        checkout_engines/  -> checkout_services/ (FORBIDDEN)
        checkout_kernel/   -> checkout_services/ (FORBIDDEN)
"""

from checkout_services.collaborators import (
    BasketService,
    PaymentProcessorClient,
    SetExpressCheckoutResponse,
)
from checkout_services.payment_service import (
    ExpressCheckoutPaymentService,
    build_payment_service,
)

__all__ = [
    "BasketService",
    "ExpressCheckoutPaymentService",
    "PaymentProcessorClient",
    "SetExpressCheckoutResponse",
    "build_payment_service",
]
