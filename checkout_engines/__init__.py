"""
checkout_engines -- Pure calculation engines for express checkout.

Engines take frozen dataclasses and return frozen dataclasses.  They never
touch the database, the network or the clock; the service layer fetches
inputs and acts on results.
"""

from checkout_engines.order_actions import OrderVoidActionData, ProcessorOrder
from checkout_engines.reconciliation import CheckoutReconciler

__all__ = [
    "CheckoutReconciler",
    "OrderVoidActionData",
    "ProcessorOrder",
]
