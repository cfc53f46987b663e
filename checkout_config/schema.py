"""
Checkout configuration schema.

The human-authored YAML set is parsed into these frozen dataclasses by the
loader.  Nothing here executes policy; ``checkout_config.build_reconciler``
turns a validated configuration into an engine.
"""

from __future__ import annotations

from dataclasses import dataclass

from checkout_engines.reconciliation.address_fields import ADDRESS_FIELDS
from checkout_engines.reconciliation.amount_policy import PROCESSOR_AMOUNT_POLICY


DEFAULT_ADDRESS_FIELDS: tuple[str, ...] = tuple(name for name, _ in ADDRESS_FIELDS)


@dataclass(frozen=True)
class ReconciliationSettings:
    """How the reconciler compares baskets with approved checkouts."""

    amount_policy: str = PROCESSOR_AMOUNT_POLICY
    address_fields: tuple[str, ...] = DEFAULT_ADDRESS_FIELDS


@dataclass(frozen=True)
class RecordingSettings:
    """Whether reconciliation decisions are written to the audit table."""

    enabled: bool = False


@dataclass(frozen=True)
class CheckoutConfig:
    """Validated runtime configuration.

    ``checksum`` identifies the exact source content the configuration was
    built from.
    """

    config_id: str
    version: int
    reconciliation: ReconciliationSettings
    recording: RecordingSettings
    checksum: str = ""
