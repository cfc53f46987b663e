"""
Module: checkout_kernel.models.reconciliation_outcome
Responsibility: ORM persistence for checkout reconciliation decisions.
    Every recorded checkout confirmation ends here, validated or rejected.
Architecture position: Kernel > Models.  May import from db/base.py only.

Audit relevance:
    A row answers "why was this order allowed (or refused)?" after the fact:
    the basket, the processor token and payer, the decision, and for
    rejections the reason code plus the structured details (amounts or
    mismatched address fields).
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from checkout_kernel.db.base import Base


class OutcomeStatus(str, Enum):
    """Terminal status of a checkout reconciliation."""

    VALIDATED = "validated"
    REJECTED = "rejected"


class ReconciliationOutcome(Base):
    """
    Records one reconciliation decision.

    A basket may be confirmed several times (the buyer re-approves after a
    rejection).  ``attempt`` numbers those confirmations per basket, starting
    at 1, and orders them independently of clock resolution.
    """

    __tablename__ = "checkout_reconciliation_outcomes"

    __table_args__ = (
        UniqueConstraint("basket_id", "attempt", name="uq_recon_outcome_basket_attempt"),
        Index("idx_recon_outcome_basket", "basket_id"),
        Index("idx_recon_outcome_token", "token"),
        Index("idx_recon_outcome_status", "status"),
    )

    basket_id: Mapped[str] = mapped_column(String(64), nullable=False)

    attempt: Mapped[int] = mapped_column(Integer, nullable=False)

    token: Mapped[str] = mapped_column(String(128), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # Null when VALIDATED
    reason_code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    reason_detail: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    payer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    @property
    def is_validated(self) -> bool:
        return self.status == OutcomeStatus.VALIDATED.value

    def __repr__(self) -> str:
        return (
            f"<ReconciliationOutcome basket={self.basket_id} attempt={self.attempt} "
            f"token={self.token} status={self.status}>"
        )
