"""
Pytest fixtures for the checkout reconciliation test suite.

Provides:
- Structured logging setup and a JSON log capture fixture
- Deterministic clock
- In-memory SQLite session for audit-trail tests
- In-memory fakes of the basket service and payment processor client
"""

import json
import logging
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from checkout_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from checkout_kernel.domain.clock import DeterministicClock
from checkout_kernel.domain.values import Money
from checkout_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from checkout_kernel.services.outcome_recorder import ReconciliationOutcomeRecorder
from checkout_engines.reconciliation.amount_policy import ExactMinorUnitAmountPolicy
from checkout_engines.reconciliation.checkout_types import (
    AddressRelation,
    ApprovedCheckoutDetails,
    BasketOwner,
    BasketSnapshot,
)
from checkout_services.collaborators import SetExpressCheckoutResponse


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture checkout_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            service.reconcile(...)
            logs = captured_logs()
            assert any(r["message"] == "checkout_reconciled" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("checkout_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and database fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Session on a fresh in-memory SQLite database."""
    init_engine_from_url("sqlite://")
    create_tables()
    db_session = get_session()
    yield db_session
    db_session.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def outcome_recorder(session, deterministic_clock):
    return ReconciliationOutcomeRecorder(session, deterministic_clock)


# =============================================================================
# Collaborator fakes
# =============================================================================


class FakeBasketService:
    """In-memory basket service keyed by basket reference."""

    def __init__(self):
        self.baskets: dict[str, BasketSnapshot] = {}
        self.relations: dict[str, AddressRelation] = {}
        self.calls: list[tuple[str, str]] = []

    def add(self, basket_ref: str, basket: BasketSnapshot,
            relation: AddressRelation | None = None) -> None:
        self.baskets[basket_ref] = basket
        if relation is not None:
            self.relations[basket_ref] = relation

    def get_calculated_basket(self, basket_ref: str) -> BasketSnapshot:
        self.calls.append(("get_calculated_basket", basket_ref))
        return self.baskets[basket_ref]

    def get_delivery_address_relation(self, basket_ref: str) -> AddressRelation | None:
        self.calls.append(("get_delivery_address_relation", basket_ref))
        return self.relations.get(basket_ref)


class FakeProcessorClient:
    """In-memory payment processor client."""

    COMMUNICATION_URL = "https://processor.example/checkoutnow?token="

    def __init__(self, token_to_issue: str = "EC-TOKEN-1"):
        self.details: dict[str, ApprovedCheckoutDetails] = {}
        self.token_to_issue = token_to_issue
        self.set_express_checkout_calls: list[dict] = []
        self.details_requests: list[str] = []
        self.amount_checks: list[tuple[Money | None, Money]] = []
        self._policy = ExactMinorUnitAmountPolicy()

    def get_express_checkout_details(self, token: str) -> ApprovedCheckoutDetails:
        self.details_requests.append(token)
        return self.details[token]

    def set_express_checkout(
        self,
        basket: BasketSnapshot,
        owner: BasketOwner,
        return_url: str,
        cancel_url: str,
        display_basket_in_processor: bool,
        ship_to_address_id: str | None,
    ) -> SetExpressCheckoutResponse:
        self.set_express_checkout_calls.append({
            "basket": basket,
            "owner": owner,
            "return_url": return_url,
            "cancel_url": cancel_url,
            "display_basket_in_processor": display_basket_in_processor,
            "ship_to_address_id": ship_to_address_id,
        })
        return SetExpressCheckoutResponse(token=self.token_to_issue)

    def validate_approved_amount(self, local: Money | None, approved: Money) -> bool:
        self.amount_checks.append((local, approved))
        return self._policy(local, approved)

    def build_communication_url(self, token: str) -> str:
        return f"{self.COMMUNICATION_URL}{token}"


@pytest.fixture
def basket_service():
    return FakeBasketService()


@pytest.fixture
def processor_client():
    return FakeProcessorClient()
