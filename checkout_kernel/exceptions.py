"""
Typed Exception Hierarchy for the Checkout Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A checkout confirmation either passes or is refused for a precise reason.
Callers (GraphQL resolvers, REST handlers, background jobs) must react to
that reason without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (basket id, service name, fields)

Example - WRONG way to handle errors:
    try:
        service.get_valid_basket(basket_ref, details)
    except Exception as e:
        if "address" in str(e):  # FRAGILE - message might change
            ask_user_to_reapprove()

Example - RIGHT way (what this module enables):
    try:
        service.get_valid_basket(basket_ref, details)
    except BasketAddressChangedError as e:
        log.warning(f"Basket {e.basket_id} address changed")
        api_response(code=e.code, fields=e.mismatched_fields)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from CheckoutKernelError:

    CheckoutKernelError (base)
    |
    +-- ConfigurationError
    |   +-- ServiceNotConfiguredError
    |
    +-- BasketValidationError
    |   +-- BasketAmountChangedError
    |   +-- BasketAddressChangedError
    |
    +-- CurrencyError
        +-- InvalidCurrencyError
        +-- CurrencyMismatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | SERVICE_NOT_CONFIGURED      | Optional collaborator was not wired
----------------|-----------------------------|-----------------------------------------
Basket          | AMOUNT_MISMATCH             | Basket total changed since approval
                | ADDRESS_MISMATCH            | Delivery address changed since approval
----------------|-----------------------------|-----------------------------------------
Currency        | INVALID_CURRENCY            | Not a valid ISO 4217 code
                | CURRENCY_MISMATCH           | Mixed currencies in operation

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CONFIGURATION ERRORS ARE FATAL TO THE REQUEST:

    except ServiceNotConfiguredError as e:
        log.error(f"Missing collaborator: {e.service_name}")
        raise

2. BASKET VALIDATION ERRORS ARE USER-RECOVERABLE:

    except BasketValidationError as e:
        # Buyer must re-approve on the processor site or restart checkout
        return {"error": e.code, "basket_id": e.basket_id}
"""


class CheckoutKernelError(Exception):
    """
    Base exception for all checkout kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CHECKOUT_KERNEL_ERROR"


# Configuration exceptions


class ConfigurationError(CheckoutKernelError):
    """Base exception for wiring and configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ServiceNotConfiguredError(ConfigurationError):
    """
    A collaborator required by the requested operation was not configured.

    Raised before any comparison is attempted, never as a null dereference
    half way through an operation.
    """

    code: str = "SERVICE_NOT_CONFIGURED"

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"Service not configured: {service_name}")


# Basket validation exceptions


class BasketValidationError(CheckoutKernelError):
    """Base exception for baskets that no longer match the approved checkout."""

    code: str = "BASKET_VALIDATION_ERROR"

    def __init__(self, basket_id: str, message: str | None = None):
        self.basket_id = basket_id
        super().__init__(message or f"Basket {basket_id} failed validation")


class BasketAmountChangedError(BasketValidationError):
    """Basket gross amount differs from the amount approved by the processor."""

    code: str = "AMOUNT_MISMATCH"

    def __init__(
        self,
        basket_id: str,
        local_amount: str | None = None,
        approved_amount: str | None = None,
    ):
        self.local_amount = local_amount
        self.approved_amount = approved_amount
        super().__init__(
            basket_id,
            f"Basket {basket_id} amount changed since approval: "
            f"local={local_amount}, approved={approved_amount}",
        )


class BasketAddressChangedError(BasketValidationError):
    """Delivery address differs from the address approved by the processor."""

    code: str = "ADDRESS_MISMATCH"

    def __init__(self, basket_id: str, mismatched_fields: tuple[str, ...] = ()):
        self.mismatched_fields = tuple(mismatched_fields)
        fields = ", ".join(self.mismatched_fields) or "unknown"
        super().__init__(
            basket_id,
            f"Basket {basket_id} delivery address changed since approval "
            f"(fields: {fields})",
        )


# Currency-related exceptions


class CurrencyError(CheckoutKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not valid ISO 4217."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: {currency}")


class CurrencyMismatchError(CurrencyError):
    """Operation mixes amounts in different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(f"Currency mismatch: expected {expected}, received {received}")
