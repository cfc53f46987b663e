"""
ExpressCheckoutPaymentService -- express checkout operations for a storefront API.

Composes the CheckoutReconciler (pure engine) with the basket service and
the payment processor client, and optionally records every reconciliation
decision for audit.

Architecture: checkout_services -- imperative shell.
    All I/O (basket calculation, processor calls, audit writes) happens
    here or in the collaborators; the reconciler itself only compares.

Operations:
    get_token_status                 Has the buyer approved the token yet?
    reconcile / get_valid_basket     Does the basket still match the approval?
    get_communication_information    Start a checkout; token + redirect URL.

Failure modes:
    - ServiceNotConfiguredError when an operation needs a collaborator that
      was not wired in.  Raised before any basket or processor call.
    - BasketAmountChangedError / BasketAddressChangedError from
      get_valid_basket when the basket drifted from the approval.
    - Collaborator errors propagate unchanged; nothing is retried here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from checkout_kernel.exceptions import (
    BasketAddressChangedError,
    BasketAmountChangedError,
    ServiceNotConfiguredError,
)
from checkout_kernel.logging_config import LogContext, get_logger
from checkout_kernel.services.outcome_recorder import ReconciliationOutcomeRecorder

from checkout_engines.reconciliation.checkout_types import (
    ApprovedCheckoutDetails,
    BasketSnapshot,
    CommunicationInformation,
    ReconciliationResult,
    Rejected,
    RejectionReason,
    TokenStatus,
)
from checkout_engines.reconciliation.reconciler import CheckoutReconciler

from checkout_services.collaborators import (
    BasketRef,
    BasketService,
    PaymentProcessorClient,
)

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.orm import Session

    from checkout_kernel.domain.clock import Clock

logger = get_logger("services.payment")


class ExpressCheckoutPaymentService:
    """Express checkout operations over a basket service and a processor client.

    Contract:
        - The processor client is required.
        - The basket service is optional; operations that need it raise
          ``ServiceNotConfiguredError`` when it is missing.
        - Without an injected reconciler, one is built whose amount rule is
          the processor client's ``validate_approved_amount``.
        - With an outcome recorder, every reconciliation is recorded in the
          recorder's session (never committed here).

    Non-goals:
        - Does NOT create orders; a validated basket is only authorized.
        - Does NOT retry processor calls.
    """

    def __init__(
        self,
        processor_client: PaymentProcessorClient,
        basket_service: BasketService | None = None,
        reconciler: CheckoutReconciler | None = None,
        outcome_recorder: ReconciliationOutcomeRecorder | None = None,
    ) -> None:
        self._processor_client = processor_client
        self._basket_service = basket_service
        self._reconciler = reconciler or CheckoutReconciler(
            amount_policy=processor_client.validate_approved_amount,
        )
        self._outcome_recorder = outcome_recorder

    # -----------------------------------------------------------------
    # Collaborators
    # -----------------------------------------------------------------

    @property
    def basket_service(self) -> BasketService:
        if self._basket_service is None:
            raise ServiceNotConfiguredError("BasketService")
        return self._basket_service

    @property
    def processor_client(self) -> PaymentProcessorClient:
        return self._processor_client

    @property
    def reconciler(self) -> CheckoutReconciler:
        return self._reconciler

    # -----------------------------------------------------------------
    # Token status
    # -----------------------------------------------------------------

    def get_express_checkout_details(self, token: str) -> ApprovedCheckoutDetails:
        return self._processor_client.get_express_checkout_details(token)

    def get_token_status(
        self,
        token: str,
        details: ApprovedCheckoutDetails | None = None,
    ) -> TokenStatus:
        """Approval status of a token.

        Only when approval was finished on the processor's site do the
        checkout details carry a payer id.  Details are fetched from the
        processor unless the caller already has them.
        """
        if details is None:
            details = self.get_express_checkout_details(token)
        return self._reconciler.derive_token_status(token, details)

    # -----------------------------------------------------------------
    # Reconciliation
    # -----------------------------------------------------------------

    def load_basket(self, basket_ref: BasketRef) -> BasketSnapshot:
        """Calculated basket with its current delivery-address relation.

        The relation service is authoritative: when it reports no relation,
        any delivery address left on the calculated snapshot is dropped and
        the owner's invoice address applies.
        """
        basket_service = self.basket_service
        basket = basket_service.get_calculated_basket(basket_ref)
        relation = basket_service.get_delivery_address_relation(basket_ref)
        if relation != basket.delivery_address:
            basket = basket.with_delivery_address(relation)
        return basket

    def reconcile(
        self,
        basket_ref: BasketRef,
        details: ApprovedCheckoutDetails,
    ) -> ReconciliationResult:
        """Compare the current basket with the approved checkout details."""
        basket = self.load_basket(basket_ref)

        with LogContext.bind(basket_id=basket.basket_id, token=details.token):
            result = self._reconciler.reconcile(basket, details)

            if isinstance(result, Rejected):
                logger.warning(
                    "checkout_rejected",
                    extra={
                        "reason_code": result.reason.value,
                        "rejection_details": dict(result.details),
                    },
                )
            else:
                logger.info("checkout_reconciled")

            if self._outcome_recorder is not None:
                self._record(result, details)

        return result

    def get_valid_basket(
        self,
        basket_ref: BasketRef,
        details: ApprovedCheckoutDetails,
    ) -> BasketSnapshot:
        """The basket, if it still matches the approval; raise otherwise.

        Raises:
            BasketAmountChangedError: basket total changed since approval.
            BasketAddressChangedError: delivery address changed since approval.
        """
        result = self.reconcile(basket_ref, details)
        if isinstance(result, Rejected):
            raise _rejection_error(result)
        return result.basket

    def _record(
        self,
        result: ReconciliationResult,
        details: ApprovedCheckoutDetails,
    ) -> None:
        payer_id = details.payer_id or None
        if isinstance(result, Rejected):
            self._outcome_recorder.record_rejected(
                basket_id=result.basket_id,
                token=details.token,
                reason_code=result.reason.value,
                reason_detail=dict(result.details),
                payer_id=payer_id,
            )
        else:
            self._outcome_recorder.record_validated(
                basket_id=result.basket_id,
                token=details.token,
                payer_id=payer_id,
            )

    # -----------------------------------------------------------------
    # Starting a checkout
    # -----------------------------------------------------------------

    def get_communication_information(
        self,
        basket_ref: BasketRef,
        return_url: str,
        cancel_url: str,
        display_basket_in_processor: bool,
    ) -> CommunicationInformation:
        """Start an express checkout and return the token and redirect URL.

        The delivery-address id is passed to the processor whenever the
        basket has one, so the buyer approves the address the shop will use.
        """
        basket_service = self.basket_service
        relation = basket_service.get_delivery_address_relation(basket_ref)
        ship_to_address_id = relation.address_id if relation is not None else None

        basket = basket_service.get_calculated_basket(basket_ref)
        response = self._processor_client.set_express_checkout(
            basket,
            basket.owner,
            return_url,
            cancel_url,
            display_basket_in_processor,
            ship_to_address_id,
        )

        token = str(response.token)
        logger.info(
            "express_checkout_started",
            extra={
                "basket_id": basket.basket_id,
                "token": token,
                "ship_to_address_id": ship_to_address_id,
            },
        )
        return CommunicationInformation(
            token=token,
            redirect_url=self.get_communication_url(token),
        )

    def get_communication_url(self, token: str) -> str:
        return self._processor_client.build_communication_url(token)


def _rejection_error(
    result: Rejected,
) -> BasketAmountChangedError | BasketAddressChangedError:
    if result.reason is RejectionReason.AMOUNT_MISMATCH:
        return BasketAmountChangedError(
            result.basket_id,
            local_amount=result.details.get("local_amount"),
            approved_amount=result.details.get("approved_amount"),
        )
    return BasketAddressChangedError(
        result.basket_id,
        mismatched_fields=tuple(result.details.get("mismatched_fields", ())),
    )


def build_payment_service(
    processor_client: PaymentProcessorClient,
    basket_service: BasketService | None = None,
    session: Session | None = None,
    config_dir: Path | None = None,
    config_name: str = "default",
    clock: Clock | None = None,
) -> ExpressCheckoutPaymentService:
    """Build an ExpressCheckoutPaymentService from config (production entrypoint).

    Loads the named configuration set, builds the reconciler from its
    amount policy and address fields, and wires an outcome recorder when
    recording is enabled.  The default ``processor`` policy delegates the
    amount check to ``processor_client.validate_approved_amount``; ``exact``
    and ``tolerance`` replace it with a local rule.

    Raises:
        ServiceNotConfiguredError: recording is enabled but no session
            was given.
    """
    from checkout_config import build_reconciler, get_active_config
    from checkout_kernel.domain.clock import SystemClock

    config = get_active_config(config_dir, name=config_name)

    outcome_recorder = None
    if config.recording.enabled:
        if session is None:
            raise ServiceNotConfiguredError("Session")
        outcome_recorder = ReconciliationOutcomeRecorder(session, clock or SystemClock())

    return ExpressCheckoutPaymentService(
        processor_client,
        basket_service=basket_service,
        reconciler=build_reconciler(
            config, processor_amount_rule=processor_client.validate_approved_amount,
        ),
        outcome_recorder=outcome_recorder,
    )
