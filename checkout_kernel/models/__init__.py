"""ORM models for the checkout kernel."""

from checkout_kernel.models.reconciliation_outcome import (
    OutcomeStatus,
    ReconciliationOutcome,
)

__all__ = [
    "OutcomeStatus",
    "ReconciliationOutcome",
]
