"""
Order action data -- amounts for follow-up actions on processor orders.

After checkout the processor order can be captured, refunded or voided from
the shop's back office.  These pure types compute the amount each action
applies to, in the order's currency.

Architecture: checkout_engines -- pure calculation, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from checkout_kernel.domain.values import Currency, Money


@dataclass(frozen=True)
class ProcessorOrder:
    """Money state of an order held by the payment processor.

    All amounts must share the order currency.
    """

    order_id: str
    total_order_sum: Money
    captured_amount: Money
    refunded_amount: Money

    def __post_init__(self) -> None:
        # Money arithmetic raises CurrencyMismatchError on mixed currencies
        _ = self.total_order_sum - self.captured_amount
        _ = self.captured_amount - self.refunded_amount

    @property
    def currency(self) -> Currency:
        return self.total_order_sum.currency

    @property
    def remaining_order_sum(self) -> Money:
        """Authorized amount not yet captured."""
        return self.total_order_sum - self.captured_amount

    @property
    def refundable_sum(self) -> Money:
        """Captured amount not yet refunded."""
        return self.captured_amount - self.refunded_amount


@dataclass(frozen=True)
class OrderVoidActionData:
    """Data for voiding the uncaptured remainder of a processor order."""

    order: ProcessorOrder

    @property
    def amount(self) -> Money:
        return self.order.remaining_order_sum

    @property
    def currency(self) -> Currency:
        return self.order.currency
