"""
ReconciliationOutcomeRecorder -- audit trail of checkout reconciliation decisions.

Responsibility:
    Persists one ReconciliationOutcome row per reconciliation the payment
    service performs, validated or rejected.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by ExpressCheckoutPaymentService when a recorder is configured.
    The kernel does not import engine result types; callers pass primitives.

Failure modes:
    - SQLAlchemy errors propagate; the caller's transaction decides whether
      the surrounding confirmation is rolled back.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from checkout_kernel.domain.clock import Clock
from checkout_kernel.logging_config import get_logger
from checkout_kernel.models.reconciliation_outcome import (
    OutcomeStatus,
    ReconciliationOutcome,
)

logger = get_logger("services.outcome_recorder")


class ReconciliationOutcomeRecorder:
    """
    Service for recording reconciliation outcomes.

    Contract:
        Adds the outcome row and flushes within the caller's transaction.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT decide anything; the reconciler already has.

    Usage:
        recorder = ReconciliationOutcomeRecorder(session, clock)
        recorder.record_validated(basket_id="b-1", token="EC-1", payer_id="P1")
    """

    def __init__(self, session: Session, clock: Clock):
        self._session = session
        self._clock = clock

    def record_validated(
        self,
        basket_id: str,
        token: str,
        payer_id: str | None = None,
    ) -> ReconciliationOutcome:
        """Record a basket that matched the approved checkout."""
        return self._record(
            basket_id=basket_id,
            token=token,
            status=OutcomeStatus.VALIDATED,
            payer_id=payer_id,
        )

    def record_rejected(
        self,
        basket_id: str,
        token: str,
        reason_code: str,
        reason_detail: dict[str, Any] | None = None,
        payer_id: str | None = None,
    ) -> ReconciliationOutcome:
        """Record a basket refused because it drifted from the approval."""
        return self._record(
            basket_id=basket_id,
            token=token,
            status=OutcomeStatus.REJECTED,
            reason_code=reason_code,
            reason_detail=reason_detail,
            payer_id=payer_id,
        )

    def outcomes_for_basket(self, basket_id: str) -> list[ReconciliationOutcome]:
        """All recorded outcomes for a basket, oldest first (by attempt)."""
        stmt = (
            select(ReconciliationOutcome)
            .where(ReconciliationOutcome.basket_id == basket_id)
            .order_by(ReconciliationOutcome.attempt)
        )
        return list(self._session.scalars(stmt))

    def _record(
        self,
        basket_id: str,
        token: str,
        status: OutcomeStatus,
        reason_code: str | None = None,
        reason_detail: dict[str, Any] | None = None,
        payer_id: str | None = None,
    ) -> ReconciliationOutcome:
        outcome = ReconciliationOutcome(
            basket_id=basket_id,
            attempt=self._next_attempt(basket_id),
            token=token,
            status=status.value,
            reason_code=reason_code,
            reason_detail=reason_detail,
            payer_id=payer_id,
            recorded_at=self._clock.now(),
        )
        self._session.add(outcome)
        self._session.flush()

        logger.info(
            "reconciliation_outcome_recorded",
            extra={
                "outcome_id": str(outcome.id),
                "basket_id": basket_id,
                "attempt": outcome.attempt,
                "status": status.value,
                "reason_code": reason_code,
            },
        )
        return outcome

    def _next_attempt(self, basket_id: str) -> int:
        # Concurrent writers for one basket collide on the
        # (basket_id, attempt) unique constraint.
        stmt = select(func.max(ReconciliationOutcome.attempt)).where(
            ReconciliationOutcome.basket_id == basket_id,
        )
        return (self._session.scalar(stmt) or 0) + 1
